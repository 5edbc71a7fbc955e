# azure_devops/client.py

import re

from crawler import TrackerClient
from exceptions import APIError
from logger import logger
from models import ProjectGraph

from .normalizer import parse_comments, parse_work_item

WORK_ITEM_URL_PATTERNS = (
    re.compile(r"dev\.azure\.com/([^/]+)/([^/]+)/_workitems/edit/(\d+)"),
    re.compile(r"([^./]+)\.visualstudio\.com/([^/]+)/_workitems/edit/(\d+)"),
)


def parse_ado_url(url):
    """
    Extract the organization, project and work item id from an edit URL.

    :return: (org, project, work_item_id) or None
    """
    for pattern in WORK_ITEM_URL_PATTERNS:
        match = pattern.search(url or "")
        if match:
            return match.group(1), match.group(2), match.group(3)
    return None


class AzureDevOpsClient(TrackerClient):
    name = "azure_devops"

    async def fetch_issue(self, issue_id):
        try:
            return await self.api.get_work_item(issue_id)
        except APIError as e:
            logger.warning(f"Error fetching work item {issue_id}: {e.message}")
            return None

    async def fetch_comments(self, issue_id):
        try:
            response = await self.api.get_comments(issue_id)
        except APIError as e:
            logger.warning(f"Could not fetch comments for {issue_id}: {e.message}")
            return []
        return parse_comments(response)

    def normalize(self, issue, comments):
        return parse_work_item(issue, comments)

    def new_graph(self, parent):
        return ProjectGraph(
            tracker=self.name,
            base_url=self.api.base_url,
            parent=parent,
            project_key=self.api.project,
            org=self.api.org,
            project=self.api.project,
        )
