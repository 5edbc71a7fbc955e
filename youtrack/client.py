# youtrack/client.py

import re

from crawler import TrackerClient
from exceptions import APIError
from logger import logger
from models import ProjectGraph

from .normalizer import parse_comments, parse_issue

ISSUE_URL_PATTERN = re.compile(r"^(.*?)/issue/([A-Z]+-\d+)", re.IGNORECASE)


def parse_youtrack_url(url):
    """
    Split a YouTrack issue URL into its base URL and readable issue id.

    Handles https://host/issue/KEY-1 and https://host/issue/KEY-1/Some-Title.

    :return: (base_url, issue_id) or None
    """
    match = ISSUE_URL_PATTERN.search(url or "")
    if not match:
        return None
    return match.group(1), match.group(2)


class YouTrackClient(TrackerClient):
    name = "youtrack"

    def __init__(self, api, base_url):
        super().__init__(api)
        self.base_url = base_url.rstrip("/")

    async def fetch_issue(self, issue_id):
        try:
            return await self.api.get_issue(issue_id)
        except APIError as e:
            logger.warning(f"Error fetching issue {issue_id}: {e.message}")
            return None

    async def fetch_comments(self, issue_id):
        try:
            raw_comments = await self.api.get_comments(issue_id)
        except APIError as e:
            logger.warning(f"Could not fetch comments for {issue_id}: {e.message}")
            return []
        return parse_comments(raw_comments)

    def normalize(self, issue, comments):
        return parse_issue(issue, comments)

    def new_graph(self, parent):
        return ProjectGraph(
            tracker=self.name,
            base_url=self.base_url,
            parent=parent,
            project_key=parent.project_key,
        )
