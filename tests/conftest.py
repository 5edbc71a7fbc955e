"""
Shared fixtures for the briefing tests.
"""

from contextlib import asynccontextmanager

import pytest

from crawler import TrackerClient
from models import LinkRef, ProjectGraph, Ticket


class FakeTrackerClient(TrackerClient):
    """In-memory tracker: issues are Ticket objects keyed by id."""

    name = "fake"

    def __init__(self, tickets):
        super().__init__(api=None)
        self.tickets = tickets
        self.fetched = []

    async def fetch_issue(self, issue_id):
        self.fetched.append(issue_id)
        return self.tickets.get(issue_id)

    async def fetch_comments(self, issue_id):
        return []

    def normalize(self, issue, comments):
        return issue

    def new_graph(self, parent):
        return ProjectGraph(tracker=self.name, base_url="https://tracker.test", parent=parent)


def make_link(issue_id, **kwargs):
    return LinkRef(id=issue_id, title=f"Title {issue_id}", **kwargs)


@pytest.fixture
def make_client():
    return FakeTrackerClient


@pytest.fixture
def fake_client_factory():
    """Build an AnalysisService client_factory around a dict of tickets."""

    def factory(tickets):
        client = FakeTrackerClient(tickets)

        @asynccontextmanager
        async def open_client(target):
            yield client

        open_client.client = client
        return open_client

    return factory


@pytest.fixture
def small_project():
    """Root PROJ-1 with one subtask, one related issue and one dependency."""
    root = Ticket(
        id="PROJ-1",
        title="Checkout redesign",
        state="In Progress",
        children=[make_link("PROJ-2", link_type="Subtask", direction="OUTWARD")],
        related_items=[make_link("PROJ-3", link_type="Relates", relation_type="relates to")],
        dependencies=[make_link("PROJ-9", dependency_type="Depends on")],
    )
    subtask = Ticket(id="PROJ-2", title="Payment form", state="Done", assignee="Alice")
    related = Ticket(id="PROJ-3", title="Analytics", state="Open", type="Task")
    return {"PROJ-1": root, "PROJ-2": subtask, "PROJ-3": related}
