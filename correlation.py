# correlation.py

import uuid

from logger import logger
from models import ChatDataset, Correlations, ProjectGraph


def message_key(message):
    """Key a message by resource name, then timestamp, then a random token."""
    return message.name or message.timestamp or uuid.uuid4().hex


def correlate_chats_with_tickets(graph: ProjectGraph, chat_data: ChatDataset):
    """
    Split chat messages into explicitly tagged and unlinked ones.

    Only verbatim ticket-id mentions are matched here. Messages with no
    mention are kept in unlinked_chats for the language model to place.

    :param graph: Crawled project graph
    :param chat_data: Parsed chat dataset, or None
    :return: Correlations, or None without chat data
    """
    if chat_data is None:
        return None

    logger.info(f"Correlating {chat_data.total_messages} chat messages with {graph.parent.id}")

    correlations = Correlations(ticket_to_chats=dict(chat_data.ticket_mentions))
    for message in chat_data.messages:
        if message.ticket_ids:
            correlations.chat_to_tickets.setdefault(message_key(message), message.ticket_ids)
        else:
            correlations.unlinked_chats.append(message)

    logger.info(
        f"Found {len(correlations.ticket_to_chats)} tickets mentioned in chats and "
        f"{len(correlations.unlinked_chats)} unlinked chat messages"
    )
    return correlations
