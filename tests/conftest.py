import asyncio
import os

import pytest
from aiohttp import web

os.environ.setdefault("MPLBACKEND", "Agg")


def _make_target_app(delay: float = 0.0, status: int = 200) -> web.Application:
    """Stub target that counts hits and answers after ``delay`` seconds."""
    app = web.Application()
    app["hits"] = []

    async def handler(request: web.Request) -> web.Response:
        body = await request.text()
        app["hits"].append((request.method, body))
        if delay:
            await asyncio.sleep(delay)
        return web.json_response({"ok": True}, status=status)

    app.router.add_route("*", "/ok", handler)
    return app


@pytest.fixture
async def ok_server(aiohttp_server):
    """Target that always answers immediately."""
    return await aiohttp_server(_make_target_app())


@pytest.fixture
async def error_server(aiohttp_server):
    """Target that always answers 500."""
    return await aiohttp_server(_make_target_app(status=500))


@pytest.fixture
async def slow_server(aiohttp_server):
    """Target that takes longer than the short test timeouts to answer."""
    return await aiohttp_server(_make_target_app(delay=1.0))


@pytest.fixture
async def hanging_server(aiohttp_server):
    """Target that outlasts the default five second request timeout."""
    return await aiohttp_server(_make_target_app(delay=6.0))


@pytest.fixture
def target_url():
    def _url(server) -> str:
        return str(server.make_url("/ok"))

    return _url
