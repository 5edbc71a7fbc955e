# chat/google_chat.py

import re
from urllib.parse import parse_qs, urlparse

from api import BaseAPI
from config import Config
from exceptions import APIError
from logger import logger
from models import ChatMessage

from .dataset import build_dataset, extract_ticket_ids

SPACE_PATTERN = re.compile(r"/spaces/([^/]+)")
NO_THREAD = "no_thread"


def parse_google_chat_url(url):
    """
    Parse a Google Chat messages URL.

    Expected shape:
    https://chat.googleapis.com/v1/spaces/SPACE_ID/messages?key=API_KEY&token=TOKEN

    :return: dict with space_id, api_key, token and base_url, or None
    """
    try:
        parsed = urlparse(url)
    except (TypeError, ValueError) as e:
        logger.warning(f"Error parsing Google Chat URL: {e}")
        return None

    path_match = SPACE_PATTERN.search(parsed.path)
    query = parse_qs(parsed.query)
    api_key = query.get("key", [None])[0]
    if not path_match or not api_key:
        return None

    return {
        "space_id": path_match.group(1),
        "api_key": api_key,
        "token": query.get("token", [None])[0],
        "base_url": url.split("?")[0],
    }


def parse_message(raw):
    sender = raw.get("sender") or {}
    text = raw.get("text") or ""
    return ChatMessage(
        name=raw.get("name"),
        sender=sender.get("displayName") or sender.get("name") or "Unknown",
        text=text,
        timestamp=raw.get("createTime"),
        thread=(raw.get("thread") or {}).get("name"),
        ticket_ids=extract_ticket_ids(text),
        source="google_chat",
    )


class GoogleChatAPI(BaseAPI):
    async def list_messages(self, base_url, api_key, token=None, page_token=None):
        params = {"key": api_key, "pageSize": Config.CHAT_PAGE_SIZE}
        if token:
            params["token"] = token
        if page_token:
            params["pageToken"] = page_token
        return await self.get(base_url, params=params)


async def fetch_google_chat_messages(chat_url, api=None):
    """
    Fetch and parse the messages of a Google Chat space.

    Paging stops after Config.CHAT_MAX_PAGES pages even if the service keeps
    returning a continuation token.

    :param chat_url: Messages URL carrying the space id and API key
    :param api: Optional open GoogleChatAPI; a new session is used otherwise
    :return: ChatDataset, or None if the URL is invalid or fetching fails
    """
    parsed = parse_google_chat_url(chat_url)
    if not parsed:
        logger.warning("Invalid Google Chat URL")
        return None

    logger.info(f"Fetching Google Chat messages for space {parsed['space_id']}")
    try:
        if api is None:
            async with GoogleChatAPI() as chat_api:
                raw_messages = await _fetch_pages(chat_api, parsed)
        else:
            raw_messages = await _fetch_pages(api, parsed)
    except APIError as e:
        logger.warning(f"Error fetching Google Chat messages: {e.message}")
        return None

    logger.info(f"Fetched {len(raw_messages)} Google Chat messages")

    messages = [parse_message(raw) for raw in raw_messages]
    threads = {}
    for message in messages:
        threads.setdefault(message.thread or NO_THREAD, []).append(message)

    return build_dataset(parsed["space_id"], messages, threads)


async def _fetch_pages(api, parsed):
    raw_messages = []
    page_token = None
    page_count = 0

    while True:
        logger.debug(f"Fetching Google Chat page {page_count + 1}")
        response = await api.list_messages(
            parsed["base_url"], parsed["api_key"], parsed["token"], page_token
        )
        response = response or {}
        raw_messages.extend(response.get("messages") or [])
        page_token = response.get("nextPageToken")
        page_count += 1

        if page_count >= Config.CHAT_MAX_PAGES:
            if page_token:
                logger.info("Reached maximum Google Chat page limit")
            break
        if not page_token:
            break

    return raw_messages
