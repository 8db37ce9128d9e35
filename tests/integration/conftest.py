"""
Integration Test Fixtures.

An in-process fake xapi server behind httpx.MockTransport. Requests go
through the real RPCClient and XML-RPC codec; only the socket is fake.
"""

from collections.abc import Callable, Generator
from functools import partial
from typing import Any
from unittest.mock import patch

import httpx
import pytest

from xapi_bridge.rpc.client import RPCClient
from xapi_bridge.rpc.codec import decode_call, encode_fault, encode_response
from xapi_bridge.rpc.values import Str, TypedValue, lift


# =============================================================================
# Fake xapi Server
# =============================================================================


class FakeXapiServer:
    """
    Minimal xapi endpoint.

    Accepts one user, issues a fresh session per login, answers registered
    methods with ``{"Status": "Success", "Value": ...}`` and rejects
    unknown sessions with SESSION_INVALID, the way xapi does.
    """

    def __init__(self, user: str = "root", password: str = "secret"):
        self.user = user
        self.password = password
        self.sessions: set[str] = set()
        self.methods: dict[str, Callable[..., Any]] = {}
        self.log: list[tuple[str, tuple[TypedValue, ...]]] = []
        self._counter = 0
        self.fail_logout = False
        self.http_status = 200

    def register(self, name: str, handler: Callable[..., Any]) -> None:
        """Register ``handler(*args)``; its return value is lifted into the response."""
        self.methods[name] = handler

    def _success(self, value: Any) -> TypedValue:
        return lift({"Status": "Success", "Value": value})

    def _failure(self, *description: str) -> TypedValue:
        return lift({"Status": "Failure", "ErrorDescription": list(description)})

    def dispatch(self, method: str, params: tuple[TypedValue, ...]) -> TypedValue:
        if method == "session.login_with_password":
            if params[:2] != (Str(self.user), Str(self.password)):
                return self._failure("SESSION_AUTHENTICATION_FAILED", params[0].value, "Authentication failure")
            self._counter += 1
            token = f"OpaqueRef:session-{self._counter}"
            self.sessions.add(token)
            return self._success(token)

        if not params or not isinstance(params[0], Str) or params[0].value not in self.sessions:
            return self._failure("SESSION_INVALID")

        if method == "session.logout":
            self.sessions.discard(params[0].value)
            if self.fail_logout:
                raise httpx.RemoteProtocolError("connection dropped")
            return self._success("")

        handler = self.methods.get(method)
        if handler is None:
            return self._failure("MESSAGE_METHOD_UNKNOWN", method)
        return self._success(handler(*params[1:]))

    def handle(self, request: httpx.Request) -> httpx.Response:
        method, params = decode_call(request.content)
        self.log.append((method, params))
        if self.http_status != 200:
            return httpx.Response(self.http_status, text="unavailable")
        if method == "system.fault":
            return httpx.Response(200, content=encode_fault(-1, "forced fault"))
        return httpx.Response(200, content=encode_response(self.dispatch(method, params)))

    @property
    def called(self) -> list[str]:
        return [method for method, _ in self.log]


@pytest.fixture
def xapi_server() -> FakeXapiServer:
    """Provide a fake xapi server with a few VM methods."""
    server = FakeXapiServer()
    server.register("VM.get_all", lambda: ["OpaqueRef:vm-1", "OpaqueRef:vm-2"])
    server.register(
        "VM.get_record",
        lambda ref: {
            "uuid": "3f1c0d6e-0000-0000-0000-000000000001",
            "name_label": "vm01",
            "power_state": "Running",
            "memory_static_max": 2**33,
            "VCPUs_max": 2,
            "is_a_template": False,
            "other_config": {},
            "tags": [],
            "ref": ref.value,
        },
    )
    return server


# =============================================================================
# Client Wiring
# =============================================================================


@pytest.fixture
def wired_client(xapi_server: FakeXapiServer) -> Generator[None, None, None]:
    """Route the CLI's RPCClient to the fake server."""
    transport = httpx.MockTransport(xapi_server.handle)
    with patch("cli.RPCClient", partial(RPCClient, transport=transport)):
        yield


@pytest.fixture
def xapi_env() -> dict[str, str | None]:
    """Environment pointing the CLI at the fake server's credentials."""
    return {"XAPI_HOST": "https://xapi.test", "XAPI_USER": "root", "XAPI_PASSWORD": "secret", "XAPI_TIMEOUT": None}
