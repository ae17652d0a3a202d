"""
HTTP Server - aiohttp endpoints for the web client
/ping, /check, /print
"""

import asyncio
import logging
from typing import Optional

from aiohttp import web

from .config_manager import ServerConfig
from .errors import InvalidRequestError, UnknownModeError
from .print_request import PrintRequest
from .print_service import PrintService

logger = logging.getLogger(__name__)

AGENT_NAME = "cleanlink-printer"

SERVICE_KEY = web.AppKey("service", PrintService)
SERVER_CONFIG_KEY = web.AppKey("server_config", ServerConfig)
DEVICE_KEY = web.AppKey("device_id", str)


def create_app(service: PrintService, server_config: ServerConfig, device_id: Optional[str]) -> web.Application:
    """device_id is the printer every job goes to ("" or None: not selected)"""
    app = web.Application(middlewares=[preflight_middleware])
    app[SERVICE_KEY] = service
    app[SERVER_CONFIG_KEY] = server_config
    app[DEVICE_KEY] = device_id or ""

    app.on_response_prepare.append(add_cors_headers)

    app.router.add_get("/ping", ping)
    app.router.add_get("/check", check_printer)
    app.router.add_post("/print", print_job)
    return app


# === CORS ===

@web.middleware
async def preflight_middleware(request: web.Request, handler):
    """Answer OPTIONS before routing so every path accepts preflight"""
    if request.method == "OPTIONS":
        return web.Response(status=200)
    return await handler(request)


async def add_cors_headers(request: web.Request, response: web.StreamResponse) -> None:
    response.headers["Access-Control-Allow-Origin"] = request.app[SERVER_CONFIG_KEY].cors_origin
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
    response.headers["Access-Control-Max-Age"] = "3600"


# === Handlers ===

async def ping(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok", "agent": AGENT_NAME})


async def check_printer(request: web.Request) -> web.Response:
    device_id = request.app[DEVICE_KEY]
    if not device_id:
        return web.json_response({"status": "error", "message": "No printer selected", "com": ""})

    manager = request.app[SERVICE_KEY].printer_manager
    result = await asyncio.to_thread(manager.check_printer, device_id)
    if not result.success:
        return web.json_response({"status": "error", "message": result.error, "com": device_id})

    return web.json_response({
        "status": "ok",
        "message": "Printer port detected and accessible",
        "com": device_id
    })


async def print_job(request: web.Request) -> web.Response:
    try:
        body = await request.read()
        print_request = PrintRequest.from_json(body, request.charset or "utf-8")
    except InvalidRequestError as e:
        logger.warning(f"Rejected print request: {e.message}")
        return _error_response(400, e.message)

    token = request.app[SERVER_CONFIG_KEY].api_token
    if token and print_request.token != token:
        logger.warning(f"Unauthorized print request from {request.remote}")
        return _error_response(401, "Unauthorized")

    device_id = request.app[DEVICE_KEY]
    if not device_id:
        return _error_response(500, "No printer selected")

    service = request.app[SERVICE_KEY]
    try:
        # Device writes block, keep them off the event loop
        result = await asyncio.to_thread(service.print, print_request, device_id)
    except UnknownModeError as e:
        return _error_response(400, e.message)

    if not result.success:
        return web.json_response({
            "status": "error",
            "message": result.error,
            "kind": result.error_kind,
            "com": device_id
        }, status=500)

    if result.error_kind == "empty_job":
        return web.json_response({"status": "skipped", "com": device_id})

    return web.json_response({
        "status": "printed",
        "com": device_id,
        "bytes": result.bytes_written
    })


def _error_response(status: int, message: str) -> web.Response:
    return web.json_response({"status": "error", "message": message}, status=status)


# === Runner ===

async def start_server(app: web.Application, host: str, port: int) -> web.AppRunner:
    """Start listening; caller keeps the runner and calls cleanup() on exit"""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info(f"Cleanlink Printer Agent running on {host}:{port}")
    return runner
