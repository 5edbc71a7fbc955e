"""
Tests for YouTrack issue normalization.
"""

import pytest

from models import CHILDREN, DEPENDENCIES, PARENTS, RELATED, Comment
from utils import FlatValue, flatten_value
from youtrack.client import parse_youtrack_url
from youtrack.normalizer import classify_link, parse_comments, parse_issue


def raw_link(name, direction, issues, source_to_target=None, target_to_source=None):
    return {
        "direction": direction,
        "linkType": {
            "name": name,
            "sourceToTarget": source_to_target,
            "targetToSource": target_to_source,
        },
        "issues": issues,
    }


def raw_linked_issue(readable_id, state="Open", assignee="Bob"):
    return {
        "id": f"2-{readable_id.split('-')[1]}",
        "idReadable": readable_id,
        "summary": f"Summary of {readable_id}",
        "state": {"name": state},
        "assignee": {"fullName": assignee},
    }


class TestClassifyLink:
    def test_outward_subtask_is_child(self):
        result = classify_link(raw_link("Subtask", "OUTWARD", [raw_linked_issue("PROJ-2")]))

        assert len(result) == 1
        bucket, item = result[0]
        assert bucket == CHILDREN
        assert item.id == "PROJ-2"
        assert item.internal_id == "2-2"
        assert item.state == "Open"
        assert item.assignee == "Bob"
        assert item.link_type == "Subtask"

    def test_inward_subtask_is_parent(self):
        result = classify_link(raw_link("Subtask", "INWARD", [raw_linked_issue("PROJ-1")]))

        assert result[0][0] == PARENTS

    @pytest.mark.parametrize(
        "direction,expected", [("OUTWARD", "Depends on"), ("INWARD", "Required for")]
    )
    def test_dependency_direction(self, direction, expected):
        result = classify_link(raw_link("Depend", direction, [raw_linked_issue("PROJ-5")]))

        bucket, item = result[0]
        assert bucket == DEPENDENCIES
        assert item.dependency_type == expected

    def test_custom_dependency_name_matches_case_insensitively(self):
        result = classify_link(raw_link("Hard DEPENDENCY", "OUTWARD", [raw_linked_issue("X-1")]))

        assert result[0][0] == DEPENDENCIES

    def test_related_uses_directional_label(self):
        result = classify_link(
            raw_link(
                "Duplicate",
                "INWARD",
                [raw_linked_issue("PROJ-7")],
                source_to_target="duplicates",
                target_to_source="is duplicated by",
            )
        )

        bucket, item = result[0]
        assert bucket == RELATED
        assert item.relation_type == "is duplicated by"

    def test_related_label_falls_back_to_type_name(self):
        result = classify_link(raw_link("Relates", "BOTH", [raw_linked_issue("PROJ-8")]))

        assert result[0][1].relation_type == "Relates"

    def test_missing_state_and_assignee_defaults(self):
        issue = {"id": "2-3", "idReadable": "PROJ-3"}
        result = classify_link(raw_link("Relates", "BOTH", [issue]))

        item = result[0][1]
        assert item.state == "Unknown"
        assert item.assignee == "Unassigned"

    def test_one_entry_per_linked_issue(self):
        issues = [raw_linked_issue("PROJ-2"), raw_linked_issue("PROJ-3")]

        result = classify_link(raw_link("Subtask", "OUTWARD", issues))

        assert [item.id for _, item in result] == ["PROJ-2", "PROJ-3"]


class TestFlattenValue:
    def test_list_of_objects_joined(self):
        value = [{"name": "Backend"}, {"name": "API"}]

        assert flatten_value(value) == FlatValue("list", "Backend, API")

    def test_object_uses_first_display_key(self):
        assert flatten_value({"presentation": "2h", "fullName": "x"}) == FlatValue(
            "scalar", "2h"
        )

    def test_scalar_passes_through(self):
        assert flatten_value(5) == FlatValue("scalar", 5)
        assert flatten_value(None) == FlatValue("scalar", None)

    def test_object_without_display_key_is_serialized(self):
        assert flatten_value({"minutes": 90}).value == '{"minutes": 90}'


class TestParseComments:
    def test_deleted_comments_dropped(self):
        raw = [
            {"id": "c1", "text": "Looks good", "author": {"fullName": "Alice"}, "created": 1},
            {"id": "c2", "text": "spam", "author": {"login": "bob"}, "deleted": True},
        ]

        comments = parse_comments(raw)

        assert [c.id for c in comments] == ["c1"]
        assert comments[0].author == "Alice"
        assert comments[0].created_date == 1

    def test_author_falls_back_to_login_then_unknown(self):
        raw = [
            {"id": "c1", "text": "a", "author": {"login": "bob"}},
            {"id": "c2", "text": "b"},
        ]

        assert [c.author for c in parse_comments(raw)] == ["bob", "Unknown"]


class TestParseIssue:
    @pytest.fixture
    def raw_issue(self):
        return {
            "id": "2-1",
            "idReadable": "PROJ-1",
            "summary": "Checkout redesign",
            "description": None,
            "created": 1700000000000,
            "reporter": {"fullName": "Carol", "email": "carol@example.com"},
            "project": {"name": "Project", "shortName": "PROJ"},
            "tags": [{"name": "q4"}, {"name": "web"}],
            "customFields": [
                {"name": "State", "value": {"name": "In Progress"}},
                {"name": "Assignee", "value": {"fullName": "Dana", "login": "dana"}},
                {"name": "Priority", "value": {"name": "Critical"}},
                {"name": "Components", "value": [{"name": "Web"}, {"name": "API"}]},
                {"name": "Story points", "value": 3},
            ],
            "links": [
                raw_link("Subtask", "OUTWARD", [raw_linked_issue("PROJ-2")]),
                raw_link("Depend", "OUTWARD", [raw_linked_issue("PROJ-5")]),
                raw_link("Relates", "BOTH", [raw_linked_issue("PROJ-6")], "relates to"),
            ],
        }

    def test_none_issue(self):
        assert parse_issue(None, []) is None

    def test_custom_fields_fill_missing_attributes(self, raw_issue):
        ticket = parse_issue(raw_issue, [])

        assert ticket.id == "PROJ-1"
        assert ticket.internal_id == "2-1"
        assert ticket.state == "In Progress"
        assert ticket.assignee == "Dana"
        assert ticket.priority == "Critical"
        assert ticket.description == ""
        assert ticket.reporter == "Carol"
        assert ticket.reporter_email == "carol@example.com"
        assert ticket.project == "Project"
        assert ticket.project_key == "PROJ"
        assert ticket.tags == {"q4", "web"}
        assert ticket.custom_fields["Components"] == "Web, API"
        assert ticket.custom_fields["Story points"] == 3

    def test_primary_attributes_win_over_custom_fields(self, raw_issue):
        raw_issue["state"] = {"name": "Done"}
        raw_issue["assignee"] = {"fullName": "Erin"}

        ticket = parse_issue(raw_issue, [])

        assert ticket.state == "Done"
        assert ticket.assignee == "Erin"

    def test_defaults_without_any_source(self):
        ticket = parse_issue({"id": "2-1", "idReadable": "PROJ-1"}, [])

        assert ticket.state == "Unknown"
        assert ticket.assignee == "Unassigned"
        assert ticket.priority == "Normal"
        assert ticket.type == "Issue"
        assert ticket.reporter == "Unknown"

    def test_links_sorted_into_buckets(self, raw_issue):
        ticket = parse_issue(raw_issue, [])

        assert [c.id for c in ticket.children] == ["PROJ-2"]
        assert [d.id for d in ticket.dependencies] == ["PROJ-5"]
        assert [r.id for r in ticket.related_items] == ["PROJ-6"]
        assert ticket.parents == []

    def test_comments_attached(self, raw_issue):
        comments = [Comment(id="c1", text="hi", author="Alice")]

        ticket = parse_issue(raw_issue, comments)

        assert ticket.comments == comments

    def test_normalizing_twice_gives_equal_tickets(self, raw_issue):
        assert parse_issue(raw_issue, []) == parse_issue(raw_issue, [])


class TestParseYouTrackUrl:
    def test_issue_url(self):
        assert parse_youtrack_url("https://acme.youtrack.cloud/issue/PROJ-12") == (
            "https://acme.youtrack.cloud",
            "PROJ-12",
        )

    def test_issue_url_with_title_slug(self):
        result = parse_youtrack_url("https://yt.example.com/youtrack/issue/AB-3/Some-title")

        assert result == ("https://yt.example.com/youtrack", "AB-3")

    def test_issue_segment_case_insensitive(self):
        assert parse_youtrack_url("https://yt.example.com/ISSUE/ABC-1") == (
            "https://yt.example.com",
            "ABC-1",
        )

    def test_non_issue_url(self):
        assert parse_youtrack_url("https://example.com/projects/PROJ") is None
