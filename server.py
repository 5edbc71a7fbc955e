# server.py

import json

from aiohttp import web

from exceptions import (
    BriefingError,
    HistoryEntryNotFoundError,
    InvalidURLError,
    IssueNotFoundError,
)
from history import HistoryStore
from logger import logger
from service import AnalysisService
from utils import json_dumps

SERVICE_KEY = web.AppKey("service", AnalysisService)
HISTORY_KEY = web.AppKey("history", HistoryStore)

MAX_REQUEST_SIZE = 50 * 1024 * 1024

routes = web.RouteTableDef()


def json_response(data, status=200):
    return web.json_response(data, status=status, dumps=json_dumps)


def error_response(message, status):
    return json_response({"error": message}, status=status)


async def read_json(request):
    try:
        body = await request.json()
    except json.JSONDecodeError:
        raise web.HTTPBadRequest(
            text=json_dumps({"error": "Request body must be JSON"}),
            content_type="application/json",
        )
    return body if isinstance(body, dict) else {}


@routes.post("/api/analyze")
async def analyze(request):
    body = await read_json(request)
    service = request.app[SERVICE_KEY]
    try:
        result = await service.analyze(
            body.get("url") or "",
            chat_export=body.get("chatExport"),
            chat_url=body.get("chatUrl"),
        )
    except InvalidURLError as e:
        return error_response(e.message, 400)
    except IssueNotFoundError as e:
        return error_response(e.message, 404)
    except BriefingError as e:
        logger.error(f"Analysis error: {e.message}")
        return error_response(e.message, 500)
    return json_response(result)


@routes.post("/api/chat")
async def ask(request):
    body = await read_json(request)
    question = body.get("question")
    if not question:
        return error_response("A question is required", 400)
    service = request.app[SERVICE_KEY]
    try:
        answer = await service.ask(question, body.get("context") or {})
    except BriefingError as e:
        return error_response(e.message, 500)
    return json_response({"response": answer})


@routes.get("/api/history")
async def list_history(request):
    return json_response({"history": request.app[HISTORY_KEY].list_summaries()})


@routes.get("/api/history/{entry_id}")
async def get_history(request):
    try:
        entry = request.app[HISTORY_KEY].get(request.match_info["entry_id"])
    except HistoryEntryNotFoundError as e:
        return error_response(e.message, 404)
    return json_response(
        {"tickets": entry["data"], "analysis": entry["analysis"], "url": entry["url"]}
    )


@routes.delete("/api/history/{entry_id}")
async def delete_history(request):
    try:
        request.app[HISTORY_KEY].delete(request.match_info["entry_id"])
    except HistoryEntryNotFoundError as e:
        return error_response(e.message, 404)
    return json_response({"success": True})


def create_app(service: AnalysisService, history: HistoryStore):
    app = web.Application(client_max_size=MAX_REQUEST_SIZE)
    app[SERVICE_KEY] = service
    app[HISTORY_KEY] = history
    app.add_routes(routes)
    return app


def run_server(service, history, host, port):
    logger.info(f"Serving briefing API on http://{host}:{port}")
    web.run_app(create_app(service, history), host=host, port=port, print=None)
