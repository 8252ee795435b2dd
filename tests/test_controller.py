"""Behavioural tests for the view-sync controller."""

from __future__ import annotations

import asyncio
from pathlib import Path
import sys
from typing import List

import httpx

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fakes import FakeUsersService
from userboard.client import UsersClient
from userboard.config import AppConfig
from userboard.controller import ViewSyncController
from userboard.models import Draft, User
from userboard.state import CREATED_MESSAGE, VALIDATION_MESSAGE, is_error_message

CONFIG = AppConfig(api_url="http://users.test")

SEED = [
    {"id": 1, "name": "Alice", "email": "alice@example.com"},
    {"id": 2, "name": "Bob", "email": "bob@example.com"},
    {"id": 3, "name": "Carol", "email": "carol@example.com"},
]


def _controller(handler) -> ViewSyncController:
    client = UsersClient(CONFIG.api_url, transport=httpx.MockTransport(handler))
    return ViewSyncController(client, CONFIG)


def test_list_users_replaces_collection_in_order() -> None:
    service = FakeUsersService(SEED)
    controller = _controller(service)

    asyncio.run(controller.list_users())

    state = controller.state
    assert len(state.users) == 3
    assert [user.id for user in state.users] == ["1", "2", "3"]
    assert state.message == ""
    assert state.loading is False


def test_failed_list_keeps_users_and_reports_error() -> None:
    service = FakeUsersService(SEED)
    controller = _controller(service)

    async def scenario() -> None:
        await controller.list_users()
        service.fail_with["GET /api/users"] = 503
        await controller.list_users()

    asyncio.run(scenario())

    state = controller.state
    assert len(state.users) == 3
    assert is_error_message(state.message)
    assert state.message.startswith("Error fetching users:")
    assert state.loading is False


def test_incomplete_draft_skips_network() -> None:
    service = FakeUsersService()
    controller = _controller(service)

    asyncio.run(controller.create_user(Draft(name="", email="a@b.com")))

    assert service.requests == []
    assert controller.state.message == VALIDATION_MESSAGE
    assert controller.state.loading is False
    assert controller.state.draft == Draft(name="", email="a@b.com")


def test_create_user_appends_and_resets_draft() -> None:
    service = FakeUsersService(SEED[:1])
    controller = _controller(service)

    async def scenario() -> None:
        await controller.list_users()
        await controller.create_user(Draft(name="Al", email="a@b.com"))

    asyncio.run(scenario())

    state = controller.state
    assert len(state.users) == 2
    assert state.users[-1].name == "Al"
    assert state.draft == Draft(name="", email="")
    assert state.message == CREATED_MESSAGE
    assert not is_error_message(state.message)
    assert service.calls("POST", "/api/users") == 1


def test_create_user_uses_current_draft() -> None:
    service = FakeUsersService()
    controller = _controller(service)

    controller.update_draft(name="Al")
    controller.update_draft(email="a@b.com")
    asyncio.run(controller.create_user())

    assert [user.email for user in controller.state.users] == ["a@b.com"]


def test_failed_create_reports_error_and_keeps_draft() -> None:
    service = FakeUsersService()
    service.fail_with["POST /api/users"] = 500
    controller = _controller(service)

    asyncio.run(controller.create_user(Draft(name="Al", email="a@b.com")))

    state = controller.state
    assert state.users == ()
    assert state.message.startswith("Error adding user:")
    assert state.draft == Draft(name="Al", email="a@b.com")
    assert state.loading is False


def test_check_health_floors_uptime() -> None:
    controller = _controller(FakeUsersService(uptime=125.9))

    asyncio.run(controller.check_health())

    assert "125s" in controller.state.backend_status
    assert "126s" not in controller.state.backend_status


def test_check_health_failure_does_not_touch_loading() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    controller = _controller(handler)
    asyncio.run(controller.check_health())

    assert controller.state.backend_status.startswith("Backend connection failed:")
    assert controller.state.loading is False


def _gated_handler(service: FakeUsersService, entered: asyncio.Event, release: asyncio.Event):
    async def handler(request: httpx.Request) -> httpx.Response:
        entered.set()
        await release.wait()
        return service(request)

    return handler


def test_loading_is_true_only_while_list_is_in_flight() -> None:
    observed: List[bool] = []

    async def scenario() -> None:
        entered = asyncio.Event()
        release = asyncio.Event()
        service = FakeUsersService(SEED)
        controller = _controller(_gated_handler(service, entered, release))

        observed.append(controller.state.loading)
        task = asyncio.create_task(controller.list_users())
        await entered.wait()
        observed.append(controller.state.loading)
        release.set()
        await task
        observed.append(controller.state.loading)

    asyncio.run(scenario())
    assert observed == [False, True, False]


def test_loading_is_cleared_after_failed_create() -> None:
    observed: List[bool] = []

    async def scenario() -> None:
        entered = asyncio.Event()
        release = asyncio.Event()
        service = FakeUsersService()
        service.fail_with["POST /api/users"] = 500
        controller = _controller(_gated_handler(service, entered, release))

        task = asyncio.create_task(controller.create_user(Draft(name="Al", email="a@b.com")))
        await entered.wait()
        observed.append(controller.state.loading)
        release.set()
        await task
        observed.append(controller.state.loading)

    asyncio.run(scenario())
    assert observed == [True, False]


def test_activate_runs_list_and_health_once() -> None:
    service = FakeUsersService(SEED)
    controller = _controller(service)

    async def scenario() -> None:
        await controller.activate()
        await controller.activate()

    asyncio.run(scenario())

    assert controller.activated is True
    assert service.calls("GET", "/api/users") == 1
    assert service.calls("GET", "/api/health") == 1
    assert len(controller.state.users) == 3
    assert "Uptime: 125s" in controller.state.backend_status


def test_listener_sees_every_transition() -> None:
    events: List[str] = []
    client = UsersClient(CONFIG.api_url, transport=FakeUsersService(SEED).transport())
    controller = ViewSyncController(
        client, CONFIG, listener=lambda state, event: events.append(type(event).__name__)
    )

    asyncio.run(controller.list_users())

    assert events == ["ListStarted", "ListSucceeded", "RequestFinished"]


def test_overlapping_requests_apply_in_completion_order() -> None:
    async def scenario() -> ViewSyncController:
        list_release = asyncio.Event()
        list_entered = asyncio.Event()
        service = FakeUsersService(SEED[:1])

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET" and request.url.path == "/api/users":
                list_entered.set()
                await list_release.wait()
            return service(request)

        controller = _controller(handler)
        listing = asyncio.create_task(controller.list_users())
        await list_entered.wait()
        # the create resolves while the slower list is still pending
        await controller.create_user(Draft(name="Al", email="a@b.com"))
        assert [user.name for user in controller.state.users] == ["Al"]

        list_release.set()
        await listing
        return controller

    controller = asyncio.run(scenario())
    # list response was captured after the create hit the service, so it includes it
    assert [user.name for user in controller.state.users] == ["Alice", "Al"]
    assert controller.state.message == ""
    assert controller.state.loading is False
    assert isinstance(controller.state.users[0], User)


def test_non_finite_uptime_becomes_status_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b'{"uptime": NaN}', headers={"content-type": "application/json"})

    controller = _controller(handler)
    asyncio.run(controller.check_health())

    assert controller.state.backend_status == (
        "Backend connection failed: Health response did not include a numeric uptime"
    )


def test_activation_survives_infinite_uptime() -> None:
    service = FakeUsersService(SEED)

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/health":
            return httpx.Response(200, content=b'{"uptime": 1e400}', headers={"content-type": "application/json"})
        return service(request)

    controller = _controller(handler)
    asyncio.run(controller.activate())

    assert len(controller.state.users) == 3
    assert controller.state.backend_status.startswith("Backend connection failed:")


def test_redirected_list_keeps_users_and_reports_error() -> None:
    service = FakeUsersService(SEED)
    controller = _controller(service)

    async def scenario() -> None:
        await controller.list_users()
        service.fail_with["GET /api/users"] = 302
        await controller.list_users()

    asyncio.run(scenario())

    assert len(controller.state.users) == 3
    assert controller.state.message.startswith("Error fetching users: Request failed with status code 302")
    assert controller.state.loading is False
