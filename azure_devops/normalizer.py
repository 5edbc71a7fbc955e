# azure_devops/normalizer.py

from models import CHILDREN, DEPENDENCIES, PARENTS, RELATED, Comment, LinkRef, Ticket
from utils import flatten_value

CHILD_REL = "System.LinkTypes.Hierarchy-Forward"
PARENT_REL = "System.LinkTypes.Hierarchy-Reverse"
SUCCESSOR_REL = "System.LinkTypes.Dependency-Forward"
PREDECESSOR_REL = "System.LinkTypes.Dependency-Reverse"

# Relations that point at artifacts rather than work items
IGNORED_RELATIONS = ("Hyperlink", "AttachedFile", "ArtifactLink")

RELATION_TYPES = {
    CHILD_REL: "Child",
    PARENT_REL: "Parent",
    "System.LinkTypes.Related": "Related",
    SUCCESSOR_REL: "Successor",
    PREDECESSOR_REL: "Predecessor",
    "Microsoft.VSTS.Common.Affects-Forward": "Affects",
    "Microsoft.VSTS.Common.Affects-Reverse": "Affected By",
    "System.LinkTypes.Duplicate-Forward": "Duplicate Of",
    "System.LinkTypes.Duplicate-Reverse": "Duplicated By",
    "Microsoft.VSTS.Common.TestedBy-Forward": "Tested By",
    "Microsoft.VSTS.Common.TestedBy-Reverse": "Tests",
}

# Reference name -> display label for fields kept in custom_fields
EXTRA_FIELDS = {
    "Microsoft.VSTS.Common.AcceptanceCriteria": "Acceptance Criteria",
    "System.AreaPath": "Area Path",
    "System.IterationPath": "Iteration Path",
    "System.Reason": "Reason",
    "Microsoft.VSTS.Scheduling.StoryPoints": "Story Points",
    "Microsoft.VSTS.Scheduling.OriginalEstimate": "Original Estimate",
    "Microsoft.VSTS.Scheduling.RemainingWork": "Remaining Work",
    "Microsoft.VSTS.Scheduling.CompletedWork": "Completed Work",
}


def _display_name(identity, default):
    if not identity:
        return default
    return identity.get("displayName") or identity.get("uniqueName") or default


def _direction(rel):
    if rel.endswith("-Forward"):
        return "OUTWARD"
    if rel.endswith("-Reverse"):
        return "INWARD"
    return "BOTH"


def classify_link(relation):
    """
    Sort one work item relation into a Ticket link bucket.

    Work item relations only carry the target URL, so the LinkRef has no
    title or state until the target itself is fetched.

    :param relation: Raw relation with rel, url and attributes
    :return: List with zero or one (bucket, LinkRef) tuple
    """
    rel = relation.get("rel") or ""
    if any(ignored in rel for ignored in IGNORED_RELATIONS):
        return []

    url = relation.get("url") or ""
    friendly = RELATION_TYPES.get(rel) or (relation.get("attributes") or {}).get("name") or rel
    item = LinkRef(
        id=url.rstrip("/").split("/")[-1],
        internal_id=url,
        link_type=friendly,
        direction=_direction(rel),
    )

    if rel == CHILD_REL:
        return [(CHILDREN, item)]
    if rel == PARENT_REL:
        return [(PARENTS, item)]
    if rel == PREDECESSOR_REL:
        item.dependency_type = "Depends on"
        return [(DEPENDENCIES, item)]
    if rel == SUCCESSOR_REL:
        item.dependency_type = "Required for"
        return [(DEPENDENCIES, item)]
    item.relation_type = friendly
    return [(RELATED, item)]


def parse_comments(response):
    """Convert a work item comments response, dropping deleted comments."""
    comments = []
    for raw in (response or {}).get("comments") or []:
        if raw.get("isDeleted"):
            continue
        comments.append(
            Comment(
                id=str(raw.get("id")),
                text=raw.get("text") or "",
                author=_display_name(raw.get("createdBy"), "Unknown"),
                created_date=raw.get("createdDate"),
                modified_date=raw.get("modifiedDate"),
            )
        )
    return comments


def parse_work_item(item, comments):
    """
    Normalize a raw work item into a Ticket.

    :param item: Raw work item payload with fields and relations, or None
    :param comments: List of Comment objects for the work item
    :return: Ticket or None
    """
    if item is None:
        return None

    f = item.get("fields") or {}

    custom_fields = {}
    for reference_name, label in EXTRA_FIELDS.items():
        if reference_name in f:
            custom_fields[label] = flatten_value(f[reference_name]).value
    for reference_name, value in f.items():
        if reference_name.startswith("Custom."):
            custom_fields[reference_name[len("Custom."):]] = flatten_value(value).value

    buckets = {CHILDREN: [], PARENTS: [], RELATED: [], DEPENDENCIES: []}
    for relation in item.get("relations") or []:
        for bucket, link in classify_link(relation):
            buckets[bucket].append(link)

    priority = f.get("Microsoft.VSTS.Common.Priority")
    tags = f.get("System.Tags") or ""
    assigned_to = f.get("System.AssignedTo") or {}
    created_by = f.get("System.CreatedBy") or {}
    original_estimate = f.get("Microsoft.VSTS.Scheduling.OriginalEstimate")
    completed_work = f.get("Microsoft.VSTS.Scheduling.CompletedWork")

    return Ticket(
        id=str(item.get("id")),
        internal_id=item.get("url"),
        type=f.get("System.WorkItemType") or custom_fields.get("Type") or "Issue",
        title=f.get("System.Title"),
        description=f.get("System.Description") or "",
        state=f.get("System.State") or custom_fields.get("State") or "Unknown",
        priority=str(priority) if priority is not None else "Normal",
        assignee=_display_name(assigned_to, None)
        or custom_fields.get("Assignee")
        or "Unassigned",
        reporter=_display_name(created_by, "Unknown"),
        project=f.get("System.TeamProject") or "",
        tags={tag.strip() for tag in tags.split(";") if tag.strip()},
        created_date=f.get("System.CreatedDate"),
        updated_date=f.get("System.ChangedDate"),
        resolved_date=f.get("Microsoft.VSTS.Common.ResolvedDate")
        or f.get("Microsoft.VSTS.Common.ClosedDate"),
        custom_fields=custom_fields,
        comments=list(comments or []),
        children=buckets[CHILDREN],
        parents=buckets[PARENTS],
        related_items=buckets[RELATED],
        dependencies=buckets[DEPENDENCIES],
        assignee_email=assigned_to.get("uniqueName") or "",
        reporter_email=created_by.get("uniqueName") or "",
        project_key=f.get("System.TeamProject") or "",
        estimation=str(original_estimate) if original_estimate is not None else "",
        spent_time=str(completed_work) if completed_work is not None else "",
        updated_by=_display_name(f.get("System.ChangedBy"), ""),
    )
