# youtrack/normalizer.py

from models import CHILDREN, DEPENDENCIES, PARENTS, RELATED, Comment, LinkRef, Ticket
from utils import flatten_value

OUTWARD = "OUTWARD"


def _name(obj, key="name"):
    return (obj or {}).get(key)


def _override_candidate(value, keys):
    """Read a State/Assignee custom field value as a plain string, if possible."""
    if not value:
        return None
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        return next((value[key] for key in keys if value.get(key)), None)
    return value


def is_dependency_link(link_type):
    return link_type == "Depend" or "depend" in link_type.lower()


def classify_link(link):
    """
    Sort the issues of one YouTrack link entry into Ticket link buckets.

    :param link: Raw link with direction, linkType and issues
    :return: List of (bucket, LinkRef) tuples
    """
    link_type_info = link.get("linkType") or {}
    link_type = link_type_info.get("name") or "Related"
    direction = link.get("direction")
    outward = direction == OUTWARD

    classified = []
    for linked_issue in link.get("issues") or []:
        item = LinkRef(
            id=linked_issue.get("idReadable"),
            internal_id=linked_issue.get("id"),
            title=linked_issue.get("summary"),
            state=_name(linked_issue.get("state")) or "Unknown",
            assignee=_name(linked_issue.get("assignee"), "fullName") or "Unassigned",
            link_type=link_type,
            direction=direction,
        )

        if link_type == "Subtask":
            classified.append((CHILDREN if outward else PARENTS, item))
        elif is_dependency_link(link_type):
            item.dependency_type = "Depends on" if outward else "Required for"
            classified.append((DEPENDENCIES, item))
        else:
            label_key = "sourceToTarget" if outward else "targetToSource"
            item.relation_type = link_type_info.get(label_key) or link_type
            classified.append((RELATED, item))
    return classified


def parse_comments(raw_comments):
    """Convert raw YouTrack comments, dropping deleted ones."""
    comments = []
    for raw in raw_comments or []:
        if raw.get("deleted"):
            continue
        author = raw.get("author")
        comments.append(
            Comment(
                id=raw.get("id"),
                text=raw.get("text") or "",
                author=(author.get("fullName") or author.get("login") or "Unknown")
                if author
                else "Unknown",
                created_date=raw.get("created"),
                modified_date=raw.get("updated"),
            )
        )
    return comments


def parse_issue(issue, comments):
    """
    Normalize a raw YouTrack issue into a Ticket.

    Custom fields are flattened to display values. State and Assignee custom
    fields only fill in when the issue's own attribute is missing.

    :param issue: Raw issue payload, or None
    :param comments: List of Comment objects for the issue
    :return: Ticket or None
    """
    if issue is None:
        return None

    custom_fields = {}
    state_from_custom_fields = None
    assignee_from_custom_fields = None

    for custom_field in issue.get("customFields") or []:
        name = custom_field.get("name")
        value = custom_field.get("value")

        if name == "State":
            state_from_custom_fields = _override_candidate(value, ("name",))
        elif name == "Assignee":
            assignee_from_custom_fields = _override_candidate(
                value, ("fullName", "login", "name")
            )

        custom_fields[name] = flatten_value(value).value

    buckets = {CHILDREN: [], PARENTS: [], RELATED: [], DEPENDENCIES: []}
    for link in issue.get("links") or []:
        for bucket, item in classify_link(link):
            buckets[bucket].append(item)

    assignee = issue.get("assignee") or {}
    reporter = issue.get("reporter") or {}
    project = issue.get("project") or {}

    return Ticket(
        id=issue.get("idReadable"),
        internal_id=issue.get("id"),
        type=_name(issue.get("type")) or custom_fields.get("Type") or "Issue",
        title=issue.get("summary"),
        description=issue.get("description") or "",
        state=_name(issue.get("state"))
        or state_from_custom_fields
        or custom_fields.get("State")
        or "Unknown",
        priority=_name(issue.get("priority")) or custom_fields.get("Priority") or "Normal",
        assignee=assignee.get("fullName")
        or assignee_from_custom_fields
        or custom_fields.get("Assignee")
        or "Unassigned",
        reporter=reporter.get("fullName") or "Unknown",
        project=project.get("name") or "",
        tags={tag.get("name") for tag in issue.get("tags") or [] if tag.get("name")},
        created_date=issue.get("created"),
        updated_date=issue.get("updated"),
        resolved_date=issue.get("resolved"),
        custom_fields=custom_fields,
        comments=list(comments or []),
        children=buckets[CHILDREN],
        parents=buckets[PARENTS],
        related_items=buckets[RELATED],
        dependencies=buckets[DEPENDENCIES],
        assignee_email=assignee.get("email") or "",
        reporter_email=reporter.get("email") or "",
        project_key=project.get("shortName") or "",
        estimation=_name(issue.get("estimation"), "presentation")
        or custom_fields.get("Estimation")
        or "",
        spent_time=_name(issue.get("spent"), "presentation") or "",
        updated_by=_name(issue.get("updatedBy"), "fullName") or "",
    )
