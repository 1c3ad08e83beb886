"""
Shared fixtures: a throwaway aiohttp server and on-disk store layouts.
"""

from contextlib import asynccontextmanager
from pathlib import Path

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from tow.models.config import TowConfig


def attachment_handler(body: bytes, filename: str):
    """Serves a fixed body as an attachment with a Content-Length."""

    async def handler(request: web.Request) -> web.Response:
        return web.Response(
            body=body,
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    return handler


@pytest.fixture
def attachment():
    """Returns the attachment handler factory."""
    return attachment_handler


@pytest.fixture
def http_server():
    """
    Returns an async context manager starting a local server for the given
    {path: handler} routes.
    """

    @asynccontextmanager
    async def _serve(routes):
        app = web.Application()
        for path, handler in routes.items():
            app.router.add_get(path, handler)
        server = TestServer(app)
        await server.start_server()
        try:
            yield server
        finally:
            await server.close()

    return _serve


@pytest.fixture
def binaries_dir(tmp_path) -> Path:
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def store_dir(tmp_path) -> Path:
    return tmp_path / "data" / "tow"


@pytest.fixture
def staging_dir(tmp_path) -> Path:
    path = tmp_path / "staging"
    path.mkdir()
    return path


@pytest.fixture
def config(binaries_dir, store_dir) -> TowConfig:
    return TowConfig(binaries_dir=binaries_dir, store_dir=store_dir)
