# service.py

from contextlib import asynccontextmanager
from typing import NamedTuple, Optional

from azure_devops.api import AzureDevOpsAPI
from azure_devops.client import AzureDevOpsClient, parse_ado_url
from briefing import BriefingService
from chat.export_parser import parse_google_chat_export
from chat.google_chat import fetch_google_chat_messages
from config import Config
from correlation import correlate_chats_with_tickets
from crawler import GraphCrawler
from exceptions import HistoryError, InvalidURLError
from logger import logger
from utils import to_jsonable
from youtrack.api import YouTrackAPI
from youtrack.client import YouTrackClient, parse_youtrack_url


class TrackerTarget(NamedTuple):
    tracker: str
    issue_id: str
    base_url: Optional[str] = None
    org: Optional[str] = None
    project: Optional[str] = None


def parse_tracker_url(url):
    """
    Work out which tracker an issue URL belongs to.

    :param url: YouTrack issue URL or Azure DevOps work item edit URL
    :return: TrackerTarget
    :raises InvalidURLError: if the URL matches neither tracker
    """
    ado = parse_ado_url(url)
    if ado:
        org, project, work_item_id = ado
        return TrackerTarget("azure_devops", work_item_id, org=org, project=project)

    youtrack = parse_youtrack_url(url)
    if youtrack:
        base_url, issue_id = youtrack
        return TrackerTarget("youtrack", issue_id, base_url=base_url)

    raise InvalidURLError(f"Invalid tracker URL: {url}")


@asynccontextmanager
async def open_tracker_client(target: TrackerTarget):
    Config.validate(target.tracker, require_llm=False)
    if target.tracker == "azure_devops":
        async with AzureDevOpsAPI(target.org, target.project, Config.ADO_PAT) as api:
            yield AzureDevOpsClient(api)
    else:
        async with YouTrackAPI(target.base_url, Config.YOUTRACK_TOKEN) as api:
            yield YouTrackClient(api, target.base_url)


class AnalysisService:
    def __init__(self, briefing=None, history=None, client_factory=None, chat_api=None):
        self.briefing = briefing or BriefingService()
        self.history = history
        self.client_factory = client_factory or open_tracker_client
        self.chat_api = chat_api

    async def crawl(self, target: TrackerTarget):
        async with self.client_factory(target) as client:
            return await GraphCrawler(client).crawl(target.issue_id)

    async def load_chat(self, chat_export=None, chat_url=None):
        """Parse pasted export text if present, else fetch from the chat URL."""
        if chat_export and chat_export.strip():
            logger.info(f"Parsing chat export ({len(chat_export)} characters)")
            return parse_google_chat_export(chat_export)
        if chat_url:
            return await fetch_google_chat_messages(chat_url, api=self.chat_api)
        return None

    async def analyze(self, url, chat_export=None, chat_url=None):
        """
        Crawl an issue, attach chat context and ask for a briefing.

        :param url: Root issue URL
        :param chat_export: Optional pasted Google Chat export text
        :param chat_url: Optional Google Chat messages URL
        :return: dict with tickets, analysis and history_id
        :raises InvalidURLError: if the URL is not a known tracker URL
        :raises IssueNotFoundError: if the root issue cannot be fetched
        """
        target = parse_tracker_url(url)
        logger.info(f"New analysis request for {target.tracker} issue {target.issue_id}")

        graph = await self.crawl(target)

        chat_data = await self.load_chat(chat_export, chat_url)
        if chat_data is not None:
            graph.chat_messages = chat_data
            graph.correlations = correlate_chats_with_tickets(graph, chat_data)
            graph.stats.total_chat_messages = chat_data.total_messages
            graph.stats.chat_participants = len(chat_data.participants)
            graph.stats.ticket_mentions_in_chat = len(chat_data.ticket_mentions)

        data = to_jsonable(graph)
        analysis = await self.briefing.analyze(data)

        history_id = None
        if self.history is not None:
            try:
                history_id = self.history.add(
                    target.issue_id, url, data, analysis, tracker=target.tracker
                )
            except HistoryError as e:
                logger.error(f"Analysis of {target.issue_id} not saved to history: {e.message}")

        return {"tickets": data, "analysis": analysis, "history_id": history_id}

    async def ask(self, question, context):
        return await self.briefing.ask(question, context)
