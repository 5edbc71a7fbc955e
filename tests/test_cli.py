"""
Tests for the command line interface.
"""

import pytest
from click.testing import CliRunner

from cli import cli
from config import Config
from history import HistoryStore


@pytest.fixture
def history_file(tmp_path, monkeypatch):
    path = str(tmp_path / "history.json")
    monkeypatch.setattr(Config, "HISTORY_FILE", path)
    return path


def test_history_list_empty(history_file):
    result = CliRunner().invoke(cli, ["history", "list"])

    assert result.exit_code == 0
    assert "No history entries." in result.output


def test_history_list_show_delete(history_file):
    data = {"parent": {"id": "P-1", "title": "Checkout", "state": "Open"}, "children": []}
    entry_id = HistoryStore().add("P-1", "https://yt.test/issue/P-1", data, {"ok": True})
    runner = CliRunner()

    listed = runner.invoke(cli, ["history", "list"])
    shown = runner.invoke(cli, ["history", "show", entry_id])
    deleted = runner.invoke(cli, ["history", "delete", entry_id])

    assert entry_id in listed.output
    assert "Checkout" in listed.output
    assert '"ok": true' in shown.output
    assert deleted.exit_code == 0
    assert len(HistoryStore()) == 0


def test_history_show_unknown(history_file):
    result = CliRunner().invoke(cli, ["history", "show", "missing"])

    assert result.exit_code == 1
    assert "History item missing not found" in result.output


def test_analyze_requires_credentials(monkeypatch):
    monkeypatch.setattr(Config, "YOUTRACK_TOKEN", None)
    monkeypatch.setattr(Config, "ADO_PAT", None)
    monkeypatch.setattr(Config, "ANTHROPIC_API_KEY", None)

    result = CliRunner().invoke(cli, ["analyze", "https://yt.test/issue/P-1"])

    assert result.exit_code == 1
    assert "Missing required environment variables" in result.output


def test_ask_requires_api_key(monkeypatch, history_file):
    monkeypatch.setattr(Config, "ANTHROPIC_API_KEY", None)

    result = CliRunner().invoke(cli, ["ask", "Status?", "--history-id", "1"])

    assert result.exit_code == 1
    assert "ANTHROPIC_API_KEY" in result.output
