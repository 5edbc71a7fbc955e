# history.py

import json
import os
import threading
import time
from datetime import datetime, timezone

from config import Config
from exceptions import HistoryEntryNotFoundError, HistoryError
from logger import logger
from utils import to_jsonable

SUMMARY_FIELDS = (
    "id",
    "issue_id",
    "tracker",
    "project_name",
    "status",
    "timestamp",
    "total_tickets",
    "total_comments",
    "has_chat_data",
)


class HistoryStore:
    """
    Most-recent-first log of past analyses kept in one JSON file.

    The whole list is rewritten on every mutation. Mutations hold a lock so
    concurrent requests cannot lose each other's updates, and the in-memory
    list only changes once the file write succeeds.
    """

    def __init__(self, path=None, max_entries=None):
        self.path = path or Config.HISTORY_FILE
        self.max_entries = Config.MAX_HISTORY if max_entries is None else max_entries
        self._lock = threading.Lock()
        self._last_id = 0
        self._entries = self._load()
        logger.info(f"Loaded {len(self._entries)} history items from {self.path}")

    def __len__(self):
        return len(self._entries)

    def _load(self):
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                entries = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading history file {self.path}: {e}")
            return []
        if not isinstance(entries, list):
            logger.error(f"Ignoring history file {self.path}: expected a list")
            return []
        return entries

    def _save(self, entries):
        tmp_path = f"{self.path}.tmp"
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(entries, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Error saving history file {self.path}: {e}")
            raise HistoryError(f"Could not save history: {e}")

    def _new_id(self):
        # Millisecond timestamps, bumped so ids never repeat within a process
        latest = max(
            (int(entry["id"]) for entry in self._entries if str(entry.get("id")).isdigit()),
            default=0,
        )
        self._last_id = max(int(time.time() * 1000), latest + 1, self._last_id + 1)
        return str(self._last_id)

    def add(self, issue_id, url, data, analysis, tracker=None):
        """
        Record one analysis at the front of the history, evicting the oldest.

        :param issue_id: Root issue identifier
        :param url: URL the analysis was requested for
        :param data: ProjectGraph or its dict form
        :param analysis: Report returned by the briefing service
        :param tracker: Tracker name
        :return: id of the new entry
        """
        data = to_jsonable(data)
        analysis = analysis or {}
        overview = analysis.get("projectOverview")
        if not isinstance(overview, dict):
            overview = {}
        parent = data.get("parent") or {}
        chat = data.get("chat_messages") or {}

        with self._lock:
            entry = {
                "id": self._new_id(),
                "issue_id": issue_id,
                "url": url,
                "tracker": tracker or data.get("tracker"),
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "project_name": overview.get("name")
                or parent.get("title")
                or f"Issue {issue_id}",
                "status": overview.get("status") or parent.get("state") or "N/A",
                "total_tickets": len(data.get("children") or []) + 1,
                "total_comments": (data.get("stats") or {}).get("total_comments") or 0,
                "has_chat_data": bool(chat.get("messages")),
                "data": data,
                "analysis": analysis,
            }
            entries = ([entry] + self._entries)[: self.max_entries]
            self._save(entries)
            self._entries = entries

        logger.info(f"Saved history entry {entry['id']} for {issue_id}")
        return entry["id"]

    def list_summaries(self):
        return [
            {key: entry.get(key) for key in SUMMARY_FIELDS} for entry in self._entries
        ]

    def get(self, entry_id):
        for entry in self._entries:
            if entry["id"] == entry_id:
                return entry
        raise HistoryEntryNotFoundError(f"History item {entry_id} not found")

    def delete(self, entry_id):
        with self._lock:
            entries = [entry for entry in self._entries if entry["id"] != entry_id]
            if len(entries) < len(self._entries):
                self._save(entries)
                self._entries = entries
                logger.info(f"Deleted history entry {entry_id}")
                return
        raise HistoryEntryNotFoundError(f"History item {entry_id} not found")
