# models.py

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

# Link buckets on a Ticket
CHILDREN = "children"
PARENTS = "parents"
RELATED = "related_items"
DEPENDENCIES = "dependencies"


@dataclass
class Comment:
    id: str
    text: str
    author: str
    created_date: Optional[Any] = None
    modified_date: Optional[Any] = None


@dataclass
class LinkRef:
    id: str
    internal_id: Optional[str] = None
    title: Optional[str] = None
    state: str = "Unknown"
    assignee: str = "Unassigned"
    link_type: str = "Related"
    direction: Optional[str] = None  # 'OUTWARD', 'INWARD', 'BOTH'
    dependency_type: Optional[str] = None  # 'Depends on', 'Required for'
    relation_type: Optional[str] = None
    source_issue: Optional[str] = None


@dataclass
class Ticket:
    id: str
    internal_id: Optional[str] = None
    type: str = "Issue"
    title: Optional[str] = None
    description: str = ""
    state: str = "Unknown"
    priority: str = "Normal"
    assignee: str = "Unassigned"
    reporter: str = "Unknown"
    project: str = ""
    tags: Set[str] = field(default_factory=set)
    created_date: Optional[Any] = None
    updated_date: Optional[Any] = None
    resolved_date: Optional[Any] = None
    custom_fields: Dict[str, Any] = field(default_factory=dict)
    comments: List[Comment] = field(default_factory=list)
    children: List[LinkRef] = field(default_factory=list)
    parents: List[LinkRef] = field(default_factory=list)
    related_items: List[LinkRef] = field(default_factory=list)
    dependencies: List[LinkRef] = field(default_factory=list)
    assignee_email: str = ""
    reporter_email: str = ""
    project_key: str = ""
    estimation: str = ""
    spent_time: str = ""
    updated_by: str = ""
    link_type_to_parent: Optional[str] = None


@dataclass
class CommentThread:
    issue_id: str
    issue_title: Optional[str]
    comments: List[Comment]


@dataclass
class GraphStats:
    total_children: int = 0
    total_related: int = 0
    total_dependencies: int = 0
    total_comments: int = 0
    children_by_state: Dict[str, int] = field(default_factory=dict)
    children_by_type: Dict[str, int] = field(default_factory=dict)
    children_by_assignee: Dict[str, int] = field(default_factory=dict)
    total_chat_messages: Optional[int] = None
    chat_participants: Optional[int] = None
    ticket_mentions_in_chat: Optional[int] = None


@dataclass
class ChatMessage:
    sender: str
    text: str
    timestamp: Optional[str] = None
    thread: Optional[str] = None
    ticket_ids: List[str] = field(default_factory=list)
    source: str = "google_chat"  # 'google_chat', 'google_chat_export'
    name: Optional[str] = None


@dataclass
class TicketMention:
    sender: str
    text: str
    timestamp: Optional[str] = None


@dataclass
class ChatDataset:
    space_id: str
    messages: List[ChatMessage] = field(default_factory=list)
    threads: Dict[str, List[ChatMessage]] = field(default_factory=dict)
    participants: List[str] = field(default_factory=list)
    ticket_mentions: Dict[str, List[TicketMention]] = field(default_factory=dict)
    total_messages: int = 0
    total_threads: int = 0


@dataclass
class Correlations:
    ticket_to_chats: Dict[str, List[TicketMention]] = field(default_factory=dict)
    chat_to_tickets: Dict[str, List[str]] = field(default_factory=dict)
    unlinked_chats: List[ChatMessage] = field(default_factory=list)


@dataclass
class ProjectGraph:
    tracker: str
    base_url: str
    parent: Ticket
    project_key: str = ""
    org: Optional[str] = None
    project: Optional[str] = None
    children: List[Ticket] = field(default_factory=list)
    related_items: List[LinkRef] = field(default_factory=list)
    dependencies: List[LinkRef] = field(default_factory=list)
    all_comments: List[CommentThread] = field(default_factory=list)
    stats: GraphStats = field(default_factory=GraphStats)
    chat_messages: Optional[ChatDataset] = None
    correlations: Optional[Correlations] = None

    @property
    def has_chat_data(self) -> bool:
        return bool(self.chat_messages and self.chat_messages.messages)
