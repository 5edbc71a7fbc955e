# chat/dataset.py

import re
from typing import Dict, List

from models import ChatDataset, ChatMessage, TicketMention

TICKET_ID_PATTERN = re.compile(r"\b([A-Z]+-\d+)\b")


def extract_ticket_ids(text):
    """Return ticket ids like ABC-123 in order of appearance."""
    return TICKET_ID_PATTERN.findall(text or "")


def build_dataset(
    space_id: str, messages: List[ChatMessage], threads: Dict[str, List[ChatMessage]]
) -> ChatDataset:
    """
    Assemble a ChatDataset and derive participants and ticket mentions.

    :param space_id: Chat space identifier, or "exported" for pasted text
    :param messages: Parsed messages in source order
    :param threads: Messages grouped by thread key
    :return: ChatDataset
    """
    participants = []
    ticket_mentions = {}
    for message in messages:
        if message.sender not in participants:
            participants.append(message.sender)
        for ticket_id in message.ticket_ids:
            ticket_mentions.setdefault(ticket_id, []).append(
                TicketMention(
                    sender=message.sender, text=message.text, timestamp=message.timestamp
                )
            )

    return ChatDataset(
        space_id=space_id,
        messages=messages,
        threads=threads,
        participants=participants,
        ticket_mentions=ticket_mentions,
        total_messages=len(messages),
        total_threads=len(threads),
    )
