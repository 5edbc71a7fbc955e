# azure_devops/api.py

import aiohttp

from api import BaseAPI
from config import Config


class AzureDevOpsAPI(BaseAPI):
    def __init__(self, org, project, pat):
        # PAT authentication uses basic auth with an empty user name
        super().__init__(
            headers={"Accept": "application/json"},
            auth=aiohttp.BasicAuth("", pat),
        )
        self.org = org
        self.project = project
        self.base_url = f"{Config.ADO_BASE_URL.rstrip('/')}/{org}/{project}/_apis/wit"

    async def get_work_item(self, work_item_id):
        return await self.get(
            f"{self.base_url}/workitems/{work_item_id}",
            params={"$expand": "relations", "api-version": Config.ADO_API_VERSION},
        )

    async def get_comments(self, work_item_id):
        return await self.get(
            f"{self.base_url}/workitems/{work_item_id}/comments",
            params={"api-version": Config.ADO_COMMENTS_API_VERSION},
        )
