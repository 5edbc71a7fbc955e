"""
Tests for the Google Chat export text parser.
"""

from chat.dataset import extract_ticket_ids
from chat.export_parser import parse_google_chat_export


def test_two_header_messages():
    text = (
        "Alice, Nov 24, 2:24 PM\n"
        "Let's ship UNSER-1141 today\n"
        "Bob, Nov 24, 2:26 PM\n"
        "Agreed\n"
    )

    dataset = parse_google_chat_export(text)

    assert [(m.sender, m.text, m.ticket_ids) for m in dataset.messages] == [
        ("Alice", "Let's ship UNSER-1141 today", ["UNSER-1141"]),
        ("Bob", "Agreed", []),
    ]
    assert dataset.space_id == "exported"
    assert dataset.participants == ["Alice", "Bob"]
    assert dataset.total_messages == 2
    assert dataset.total_threads == 1
    assert dataset.threads["main_thread"] == dataset.messages
    assert all(m.source == "google_chat_export" for m in dataset.messages)
    assert [m.sender for m in dataset.ticket_mentions["UNSER-1141"]] == ["Alice"]


def test_edited_suffix_stripped_from_timestamp():
    dataset = parse_google_chat_export("Alice Smith, Nov 24, 2024, 2:24 PM, Edited\nUpdated plan")

    message = dataset.messages[0]
    assert message.sender == "Alice Smith"
    assert message.timestamp == "Nov 24, 2024, 2:24 PM"


def test_continuation_lines_joined():
    text = "Alice, Nov 24, 2:24 PM\nFirst line\n\n  Second line about PROJ-7  \nThird PROJ-7"

    message = parse_google_chat_export(text).messages[0]

    assert message.text == "First line\nSecond line about PROJ-7\nThird PROJ-7"
    assert message.ticket_ids == ["PROJ-7"]


def test_legacy_lines():
    text = "10:15 AM Alice: Kicking off PROJ-1\n10:20 AM Bob: On it\nwith details"

    messages = parse_google_chat_export(text).messages

    assert [(m.timestamp, m.sender, m.text) for m in messages] == [
        ("10:15 AM", "Alice", "Kicking off PROJ-1"),
        ("10:20 AM", "Bob", "On it\nwith details"),
    ]
    assert messages[0].ticket_ids == ["PROJ-1"]


def test_header_drops_previous_message_without_text():
    text = "Alice, Nov 24, 2:24 PM\nBob, Nov 24, 2:26 PM\nHello"

    messages = parse_google_chat_export(text).messages

    assert [m.sender for m in messages] == ["Bob"]


def test_legacy_line_keeps_previous_message_without_text():
    text = "Alice, Nov 24, 2:24 PM\n10:20 AM Bob: Hello"

    messages = parse_google_chat_export(text).messages

    assert [(m.sender, m.text) for m in messages] == [("Alice", ""), ("Bob", "Hello")]


def test_text_before_first_header_ignored():
    dataset = parse_google_chat_export("stray line\nAlice, Nov 24, 2:24 PM\nHi")

    assert [m.text for m in dataset.messages] == ["Hi"]


def test_empty_input():
    dataset = parse_google_chat_export("")

    assert dataset.messages == []
    assert dataset.participants == []
    assert dataset.total_messages == 0


def test_extract_ticket_ids():
    assert extract_ticket_ids("See UNSER-1141 and ABC-22 please") == ["UNSER-1141", "ABC-22"]
    assert extract_ticket_ids("ABC-1 again ABC-1") == ["ABC-1", "ABC-1"]
    assert extract_ticket_ids("See ABC-1, abc-2 and XY-10; not ABC-") == ["ABC-1", "XY-10"]
    assert extract_ticket_ids(None) == []
