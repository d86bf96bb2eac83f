"""aiohttp application serving the dashboard API."""

import asyncio
import json
import logging
from typing import Optional

from aiohttp import web

from ..analysis import ReportAnalyzer, build_analyzer
from ..core.controller import TestController
from ..core.errors import (
    AnalysisError,
    ConfigError,
    HulkError,
    LifecycleError,
    ResourceReadError,
)
from ..core.resources import sample_resources
from ..settings import Settings

logger = logging.getLogger(__name__)

CONTROLLER_KEY = web.AppKey("controller", TestController)
ANALYZER_KEY = web.AppKey("analyzer", object)

_ERROR_STATUS = (
    (ConfigError, 400),
    (LifecycleError, 400),
    (ResourceReadError, 500),
    (AnalysisError, 502),
)


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Map engine errors to JSON responses."""
    try:
        return await handler(request)
    except HulkError as e:
        status = next((code for exc_type, code in _ERROR_STATUS if isinstance(e, exc_type)), 500)
        if status >= 500:
            logger.error(f"{request.method} {request.path} failed: {e}")
        return web.json_response({"message": str(e)}, status=status)


async def _read_json(request: web.Request) -> dict:
    if not request.can_read_body:
        return {}
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ConfigError("Request body must be valid JSON.")
    if not isinstance(data, dict):
        raise ConfigError("Request body must be a JSON object.")
    return data


async def get_resources(request: web.Request) -> web.Response:
    # cpu_percent blocks for its sampling interval
    snapshot = await asyncio.to_thread(sample_resources)
    return web.json_response(snapshot.to_dict())


async def start_test(request: web.Request) -> web.Response:
    payload = await _read_json(request)
    await request.app[CONTROLLER_KEY].start(payload)
    return web.json_response({"message": "Load test started successfully."})


async def stop_test(request: web.Request) -> web.Response:
    report = await request.app[CONTROLLER_KEY].stop()
    return web.json_response({
        "message": "Load test stopped successfully.",
        "report": report.to_dict() if report else None,
    })


async def get_stats(request: web.Request) -> web.Response:
    return web.json_response(request.app[CONTROLLER_KEY].poll_status().to_dict())


async def get_reports(request: web.Request) -> web.Response:
    reports = request.app[CONTROLLER_KEY].store.list()
    return web.json_response([r.to_dict() for r in reports])


async def analyze_report(request: web.Request) -> web.Response:
    analyzer: Optional[ReportAnalyzer] = request.app[ANALYZER_KEY]
    if analyzer is None:
        return web.json_response(
            {"message": "Report analysis is not configured (HULK_ANALYZER_API_KEY is not set)."},
            status=503,
        )

    payload = await _read_json(request)
    report = payload.get("report")
    if not isinstance(report, dict) or not report:
        return web.json_response({"message": "A report is required."}, status=400)
    question = payload.get("question")
    if question is not None and not isinstance(question, str):
        return web.json_response({"message": "question must be a string."}, status=400)

    analysis = await analyzer.analyze(report, question)
    return web.json_response({"analysis": analysis})


async def _on_cleanup(app: web.Application) -> None:
    logger.info("Shutting down; waiting for in-flight requests to drain")
    await app[CONTROLLER_KEY].shutdown()


def create_app(
    settings: Optional[Settings] = None,
    controller: Optional[TestController] = None,
    analyzer: Optional[ReportAnalyzer] = None,
) -> web.Application:
    """
    Build the API application.

    Args:
        settings: Runtime settings (read from the environment if None)
        controller: Controller to expose (a fresh one if None)
        analyzer: Report analyzer; built from settings if None

    Returns:
        Configured aiohttp application
    """
    settings = settings or Settings.from_env()
    if analyzer is None:
        analyzer = build_analyzer(settings)

    app = web.Application(middlewares=[error_middleware])
    app[CONTROLLER_KEY] = controller or TestController()
    app[ANALYZER_KEY] = analyzer

    app.router.add_get("/api/resources", get_resources)
    app.router.add_post("/api/start-test", start_test)
    app.router.add_post("/api/stop-test", stop_test)
    app.router.add_get("/api/stats", get_stats)
    app.router.add_get("/api/reports", get_reports)
    app.router.add_post("/api/analyze-report", analyze_report)

    app.on_cleanup.append(_on_cleanup)
    return app
