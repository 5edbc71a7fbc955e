# crawler.py

from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Dict, List, Optional

from exceptions import IssueNotFoundError
from logger import logger, progress_bar
from models import (
    Comment,
    CommentThread,
    GraphStats,
    LinkRef,
    ProjectGraph,
    Ticket,
)
from utils import count_by


class TrackerClient(ABC):
    """
    Capabilities the crawler needs from an issue tracker.

    Concrete clients wrap a tracker REST API. fetch_issue and fetch_comments
    never raise for transport errors: they log and return None / [] so a
    missing linked issue does not abort a crawl.
    """

    name = None

    def __init__(self, api):
        self.api = api

    @abstractmethod
    async def fetch_issue(self, issue_id) -> Optional[Dict[str, Any]]:
        """Fetch the raw issue payload, or None if unavailable."""

    @abstractmethod
    async def fetch_comments(self, issue_id) -> List[Comment]:
        """Fetch non-deleted comments, or [] if unavailable."""

    @abstractmethod
    def normalize(self, issue, comments) -> Optional[Ticket]:
        """Convert a raw payload and its comments into a Ticket."""

    @abstractmethod
    def new_graph(self, parent: Ticket) -> ProjectGraph:
        """Create an empty graph scoped to this tracker."""

    async def get_ticket(self, issue_id) -> Optional[Ticket]:
        issue = await self.fetch_issue(issue_id)
        if issue is None:
            return None
        comments = await self.fetch_comments(issue_id)
        return self.normalize(issue, comments)


def build_frontier(parent: Ticket) -> List[LinkRef]:
    """
    Collect the first-hop issues to crawl from the root ticket.

    Subtasks come first, tagged "Subtask", then related items tagged with
    their relation label. Duplicates and the root itself are dropped while
    keeping first-seen order.

    :param parent: Normalized root ticket
    :return: List of LinkRef objects to fetch
    """
    candidates = [replace(child, link_type="Subtask") for child in parent.children]
    candidates.extend(
        replace(related, link_type=related.relation_type or "Related")
        for related in parent.related_items
    )

    frontier = []
    seen_ids = {parent.id}
    for item in candidates:
        if item.id in seen_ids:
            continue
        seen_ids.add(item.id)
        frontier.append(item)
    return frontier


def compute_stats(graph: ProjectGraph) -> GraphStats:
    return GraphStats(
        total_children=len(graph.children),
        total_related=len(graph.related_items),
        total_dependencies=len(graph.dependencies),
        total_comments=sum(len(thread.comments) for thread in graph.all_comments),
        children_by_state=count_by(graph.children, "state", "Unknown"),
        children_by_type=count_by(graph.children, "type", "Issue"),
        children_by_assignee=count_by(graph.children, "assignee", "Unassigned"),
    )


class GraphCrawler:
    def __init__(self, client: TrackerClient):
        self.client = client

    async def crawl(self, issue_id) -> ProjectGraph:
        """
        Crawl the root issue and its first-hop subtasks and related issues.

        Issues are fetched one at a time. Dependencies found on crawled
        children are merged into the graph, but nothing beyond the first
        hop is fetched.

        :param issue_id: Identifier of the root issue
        :return: ProjectGraph
        :raises IssueNotFoundError: if the root issue cannot be fetched
        """
        logger.info(f"Fetching {self.client.name} issue {issue_id}")
        parent = await self.client.get_ticket(issue_id)
        if parent is None:
            logger.error(f"Could not fetch root issue {issue_id}")
            raise IssueNotFoundError(f"Could not fetch issue {issue_id}")

        graph = self.client.new_graph(parent)
        self._collect_comments(graph, parent)
        for dependency in parent.dependencies:
            self._merge_dependency(graph, dependency)

        frontier = build_frontier(parent)
        logger.info(
            f"Found {len(parent.children)} subtasks and {len(parent.related_items)} "
            f"related items, crawling {len(frontier)} linked issues"
        )

        for linked_ref in progress_bar(frontier, desc=f"Crawling {parent.id}"):
            linked = await self.client.get_ticket(linked_ref.id)
            if linked is None:
                logger.warning(
                    f"Skipping linked issue {linked_ref.id} ({linked_ref.link_type}): unavailable"
                )
                continue

            linked.link_type_to_parent = linked_ref.link_type
            graph.children.append(linked)
            self._collect_comments(graph, linked)
            for dependency in linked.dependencies:
                self._merge_dependency(graph, replace(dependency, source_issue=linked.id))

        # Related items now live in children, tagged with their relation type
        graph.related_items = []
        graph.stats = compute_stats(graph)

        logger.info(
            f"Crawl of {parent.id} complete: {graph.stats.total_children} children, "
            f"{graph.stats.total_dependencies} dependencies, "
            f"{graph.stats.total_comments} comments"
        )
        return graph

    def _collect_comments(self, graph: ProjectGraph, ticket: Ticket):
        if ticket.comments:
            graph.all_comments.append(
                CommentThread(
                    issue_id=ticket.id, issue_title=ticket.title, comments=ticket.comments
                )
            )

    def _merge_dependency(self, graph: ProjectGraph, dependency: LinkRef):
        if dependency.id == graph.parent.id:
            return
        if any(existing.id == dependency.id for existing in graph.dependencies):
            return
        graph.dependencies.append(dependency)
