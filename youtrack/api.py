# youtrack/api.py

from api import BaseAPI

ISSUE_FIELDS = ",".join(
    [
        "id",
        "idReadable",
        "summary",
        "description",
        "created",
        "updated",
        "resolved",
        "reporter(login,fullName,email)",
        "updatedBy(login,fullName)",
        "assignee(login,fullName,email)",
        "project(id,name,shortName)",
        "state(name)",
        "priority(name)",
        "type(name)",
        "tags(name,color(background,foreground))",
        "estimation(presentation)",
        "spent(presentation)",
        "customFields(name,value(name,text,presentation,login,fullName,minutes))",
        "links(direction,linkType(name,sourceToTarget,targetToSource),"
        "issues(id,idReadable,summary,state(name),assignee(fullName)))",
    ]
)

COMMENT_FIELDS = "id,text,created,updated,author(login,fullName),deleted"


class YouTrackAPI(BaseAPI):
    def __init__(self, base_url, token):
        super().__init__(
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )
        self.base_url = base_url.rstrip("/")

    async def get_issue(self, issue_id):
        return await self.get(
            f"{self.base_url}/api/issues/{issue_id}", params={"fields": ISSUE_FIELDS}
        )

    async def get_comments(self, issue_id):
        return await self.get(
            f"{self.base_url}/api/issues/{issue_id}/comments",
            params={"fields": COMMENT_FIELDS},
        )
