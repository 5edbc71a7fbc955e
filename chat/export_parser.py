# chat/export_parser.py

import re

from logger import logger
from models import ChatMessage

from .dataset import build_dataset, extract_ticket_ids

MAIN_THREAD = "main_thread"
EXPORT_SOURCE = "google_chat_export"

# "Sender Name, Nov 24, 2:24 PM" with an optional year and ", Edited" suffix
HEADER_PATTERN = re.compile(
    r"^([^,]+),\s+(\w+\s+\d{1,2}(?:,\s+\d{4})?,\s+\d{1,2}:\d{2}\s*(?:AM|PM|am|pm)?"
    r"(?:,\s*Edited)?)\s*$"
)
# "12:34 PM Sender Name: message text" or "Jan 1, 2024, 12:34 PM Sender Name: text"
LEGACY_PATTERN = re.compile(
    r"^(\d{1,2}:\d{2}\s*(?:AM|PM|am|pm)?|\w+\s+\d{1,2},\s+\d{4},?\s+\d{1,2}:\d{2}\s*"
    r"(?:AM|PM|am|pm)?)\s+(.+?):\s*(.+)$"
)
EDITED_SUFFIX = re.compile(r",\s*Edited$")


def parse_google_chat_export(chat_text):
    """
    Parse Google Chat text copied out of the web client.

    Lines are read one at a time. A header line opens a new message and any
    other line continues the open one. A "Sender, Date" header only keeps the
    previous message if it gathered some text, while a legacy
    "time Sender: text" header always keeps it.

    :param chat_text: Raw multi-line transcript
    :return: ChatDataset with every message in a single thread
    """
    messages = []
    current = None

    for line in (chat_text or "").split("\n"):
        line = line.strip()
        if not line:
            continue

        match = HEADER_PATTERN.match(line)
        if match:
            if current and current.text:
                messages.append(current)
            current = ChatMessage(
                sender=match.group(1).strip(),
                text="",
                timestamp=EDITED_SUFFIX.sub("", match.group(2)).strip(),
                ticket_ids=[],
                source=EXPORT_SOURCE,
            )
            continue

        match = LEGACY_PATTERN.match(line)
        if match:
            if current:
                messages.append(current)
            text = match.group(3).strip()
            current = ChatMessage(
                sender=match.group(2).strip(),
                text=text,
                timestamp=match.group(1),
                ticket_ids=extract_ticket_ids(text),
                source=EXPORT_SOURCE,
            )
        elif current:
            current.text = f"{current.text}\n{line}" if current.text else line
            for ticket_id in extract_ticket_ids(line):
                if ticket_id not in current.ticket_ids:
                    current.ticket_ids.append(ticket_id)

    if current:
        messages.append(current)

    logger.info(f"Parsed {len(messages)} messages from chat export")
    return build_dataset("exported", messages, {MAIN_THREAD: messages})
