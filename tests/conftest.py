"""pytest configuration and shared fixtures for Legrand2Hubitat tests."""

from typing import Any, Dict, List, Optional, Set

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from models import Credentials


class FakeLegrand:
    """In-process stand-in for the Legrand hub REST API."""

    def __init__(self):
        self.username = "user"
        self.password = "secret"
        self.token = "tok-123"
        self.devices: List[Any] = []
        self.login_status = 200
        self.devices_status = 200
        self.login_body: Optional[Any] = None
        self.devices_body: Optional[Any] = None
        self.login_calls = 0
        self.device_calls: List[str] = []

    async def login(self, request: web.Request) -> web.Response:
        self.login_calls += 1
        if self.login_status != 200:
            return web.json_response({"error": "nope"}, status=self.login_status)
        body = await request.json()
        if body.get("username") != self.username or body.get("password") != self.password:
            return web.json_response({"error": "bad credentials"}, status=401)
        if self.login_body is not None:
            return web.json_response(self.login_body)
        return web.json_response({"token": self.token})

    async def list_devices(self, request: web.Request) -> web.Response:
        auth = request.headers.get("Authorization", "")
        self.device_calls.append(auth)
        if auth != f"Bearer {self.token}":
            return web.json_response({"error": "unauthorized"}, status=401)
        if self.devices_status != 200:
            return web.json_response({"error": "boom"}, status=self.devices_status)
        if self.devices_body is not None:
            return web.json_response(self.devices_body)
        return web.json_response(self.devices)


class FakeHubitat:
    """In-process stand-in for the Hubitat Maker API."""

    def __init__(self):
        self.access_token = "hub-token"
        self.fail_ids: Set[str] = set()
        self.calls: List[Dict[str, str]] = []
        self.devices = [{"id": "d1", "label": "Kitchen"}]

    async def command(self, request: web.Request) -> web.Response:
        device_id = request.match_info["device_id"]
        action = request.match_info["command"]
        token = request.query.get("access_token")
        self.calls.append({"device_id": device_id, "command": action, "access_token": token})
        if token != self.access_token:
            return web.json_response({"error": "unauthorized"}, status=401)
        if device_id in self.fail_ids:
            return web.json_response({"error": "device error"}, status=500)
        return web.json_response({"id": device_id, "command": action})

    async def list_devices(self, request: web.Request) -> web.Response:
        if request.query.get("access_token") != self.access_token:
            return web.json_response({"error": "unauthorized"}, status=401)
        return web.json_response(self.devices)


@pytest.fixture
def credentials():
    return Credentials(username="user", password="secret")


@pytest.fixture
def legrand():
    return FakeLegrand()


@pytest.fixture
def hubitat():
    return FakeHubitat()


@pytest_asyncio.fixture
async def legrand_url(legrand):
    app = web.Application()
    app.router.add_post("/login", legrand.login)
    app.router.add_get("/devices", legrand.list_devices)
    server = TestServer(app)
    await server.start_server()
    yield f"http://{server.host}:{server.port}"
    await server.close()


@pytest_asyncio.fixture
async def hubitat_url(hubitat):
    app = web.Application()
    app.router.add_get("/apps/api/7/devices", hubitat.list_devices)
    app.router.add_get("/apps/api/7/devices/{device_id}/{command}", hubitat.command)
    server = TestServer(app)
    await server.start_server()
    yield f"http://{server.host}:{server.port}/apps/api/7"
    await server.close()
