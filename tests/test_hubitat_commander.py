"""Tests for CommandDispatcher against a local Hubitat Maker API."""

import pytest

from errors import DispatchError
from hubitat_commander import CommandDispatcher
from models import Command


class TestCommandDispatcher:
    async def test_send_encodes_device_action_and_token(self, hubitat, hubitat_url):
        dispatcher = CommandDispatcher(hubitat_url, "hub-token")
        try:
            await dispatcher.send(Command(target_device_id="d1", action="on"))
            await dispatcher.send(Command(target_device_id="d2", action="off"))
        finally:
            await dispatcher.close()
        assert hubitat.calls == [
            {"device_id": "d1", "command": "on", "access_token": "hub-token"},
            {"device_id": "d2", "command": "off", "access_token": "hub-token"},
        ]

    async def test_trailing_slash_in_base_url(self, hubitat, hubitat_url):
        dispatcher = CommandDispatcher(hubitat_url + "/", "hub-token")
        try:
            await dispatcher.send(Command(target_device_id="d1", action="on"))
        finally:
            await dispatcher.close()
        assert hubitat.calls[0]["device_id"] == "d1"

    async def test_non_success_raises_dispatch_error_for_device(self, hubitat, hubitat_url):
        hubitat.fail_ids.add("d2")
        dispatcher = CommandDispatcher(hubitat_url, "hub-token")
        try:
            with pytest.raises(DispatchError) as exc_info:
                await dispatcher.send(Command(target_device_id="d2", action="on"))
        finally:
            await dispatcher.close()
        assert exc_info.value.device_id == "d2"
        assert "500" in str(exc_info.value)

    async def test_bad_token_raises_dispatch_error(self, hubitat_url):
        dispatcher = CommandDispatcher(hubitat_url, "wrong")
        try:
            with pytest.raises(DispatchError):
                await dispatcher.send(Command(target_device_id="d1", action="off"))
        finally:
            await dispatcher.close()

    async def test_unreachable_hub_raises_dispatch_error(self):
        dispatcher = CommandDispatcher("http://127.0.0.1:1/apps/api/7", "hub-token", timeout=2.0)
        try:
            with pytest.raises(DispatchError) as exc_info:
                await dispatcher.send(Command(target_device_id="d1", action="on"))
        finally:
            await dispatcher.close()
        assert exc_info.value.device_id == "d1"

    async def test_invalid_action_rejected(self):
        dispatcher = CommandDispatcher("http://127.0.0.1:1", "hub-token")
        with pytest.raises(ValueError):
            await dispatcher.send(Command(target_device_id="d1", action="toggle"))

    async def test_list_devices(self, hubitat_url):
        dispatcher = CommandDispatcher(hubitat_url, "hub-token")
        try:
            devices = await dispatcher.list_devices()
        finally:
            await dispatcher.close()
        assert devices == [{"id": "d1", "label": "Kitchen"}]
