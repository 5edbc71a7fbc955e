# cli.py

import asyncio

import click

from config import Config
from exceptions import BriefingError, ConfigurationError
from history import HistoryStore
from server import run_server
from service import AnalysisService
from utils import json_dumps


def _validate(**kwargs):
    try:
        Config.validate(**kwargs)
    except ConfigurationError as e:
        raise click.ClickException(e.message)


@click.group()
def cli():
    """Project briefings from YouTrack or Azure DevOps issues and Google Chat"""
    pass


@cli.command()
@click.argument("url")
@click.option(
    "--chat-export",
    type=click.File("r", encoding="utf-8"),
    help="File holding Google Chat text copied from the web client.",
)
@click.option(
    "--chat-url",
    help="Google Chat messages URL (spaces/SPACE_ID/messages?key=...). Ignored when --chat-export is given.",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, writable=True),
    help="Write the full result (tickets and analysis) to this JSON file.",
)
def analyze(url, chat_export, chat_url, output):
    """Crawl an issue and its linked issues and generate a briefing."""
    _validate()
    service = AnalysisService(history=HistoryStore())
    try:
        result = asyncio.run(
            service.analyze(
                url,
                chat_export=chat_export.read() if chat_export else None,
                chat_url=chat_url,
            )
        )
    except BriefingError as e:
        raise click.ClickException(e.message)

    stats = result["tickets"]["stats"]
    click.echo(
        f"Analyzed {result['tickets']['parent']['id']}: "
        f"{stats['total_children']} linked issues, "
        f"{stats['total_dependencies']} dependencies, "
        f"{stats['total_comments']} comments"
    )
    if stats.get("total_chat_messages") is not None:
        click.echo(
            f"Chat: {stats['total_chat_messages']} messages from "
            f"{stats['chat_participants']} participants"
        )
    click.echo(f"History entry: {result['history_id']}")

    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(json_dumps(result, indent=2))
        click.echo(f"Result written to {output}")
    else:
        click.echo(json_dumps(result["analysis"], indent=2))


@cli.command()
@click.argument("question")
@click.option(
    "--history-id",
    required=True,
    help="History entry whose project data the question is about.",
)
def ask(question, history_id):
    """Ask a question about a previously analyzed project."""
    if not Config.ANTHROPIC_API_KEY:
        raise click.ClickException("Missing required environment variables: ANTHROPIC_API_KEY")
    history = HistoryStore()
    try:
        entry = history.get(history_id)
        answer = asyncio.run(AnalysisService(history=history).ask(question, entry["data"]))
    except BriefingError as e:
        raise click.ClickException(e.message)
    click.echo(answer)


@cli.group()
def history():
    """Inspect and prune the analysis history."""
    pass


@history.command("list")
def list_history():
    """List past analyses, most recent first."""
    summaries = HistoryStore().list_summaries()
    if not summaries:
        click.echo("No history entries.")
        return
    for item in summaries:
        chat_marker = " [chat]" if item.get("has_chat_data") else ""
        click.echo(
            f"{item['id']}  {item['timestamp']}  {item['issue_id']}  "
            f"{item['project_name']} ({item['status']}) - "
            f"{item['total_tickets']} tickets, {item['total_comments']} comments{chat_marker}"
        )


@history.command("show")
@click.argument("entry_id")
def show_history(entry_id):
    """Print the stored data and analysis of one entry."""
    try:
        entry = HistoryStore().get(entry_id)
    except BriefingError as e:
        raise click.ClickException(e.message)
    click.echo(
        json_dumps(
            {"tickets": entry["data"], "analysis": entry["analysis"], "url": entry["url"]},
            indent=2,
        )
    )


@history.command("delete")
@click.argument("entry_id")
def delete_history(entry_id):
    """Remove one entry from the history."""
    try:
        HistoryStore().delete(entry_id)
    except BriefingError as e:
        raise click.ClickException(e.message)
    click.echo(f"Deleted history entry {entry_id}")


@cli.command()
@click.option("--host", default=Config.HOST, show_default=True, help="Interface to bind.")
@click.option("--port", default=Config.PORT, show_default=True, type=int, help="Port to listen on.")
def serve(host, port):
    """Run the HTTP API."""
    _validate()
    history_store = HistoryStore()
    run_server(AnalysisService(history=history_store), history_store, host, port)


if __name__ == "__main__":
    cli()
