"""Shared fixtures for the realtime hub tests.

Hub tests run against an in-memory identity directory and a recording
transport, so no network or websocket server is involved.

Usage:
    @pytest.mark.anyio
    async def test_something(open_connection: OpenConnection):
        alice, transport = await open_connection("alice")
"""

from __future__ import annotations

import typing as t

import pydantic as p
import pytest

from campuslive.auth import ConnectionAuthenticator, InMemoryIdentityDirectory, JWTManager
from campuslive.model import IdentityRecord, OutboundMessage, UserID, UserRole
from campuslive.realtime import Connection, RealtimeHub, RealtimeState

TEST_JWT_SECRET = "test-jwt-secret-for-realtime-tests-0123456789abcdef0123456789abcdef"


class RecordingTransport(object):
    """Transport that keeps everything sent to it."""

    def __init__(self, fail: bool = False) -> None:
        self.sent: list[OutboundMessage] = []
        self.closed: tuple[int, str] | None = None
        self.fail = fail

    async def send(self, message: OutboundMessage) -> None:
        if self.fail:
            raise ConnectionResetError("peer went away")
        self.sent.append(message)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.closed = (code, reason)

    def topics(self) -> list[str | None]:
        return [m.topic for m in self.sent]

    def of(self, topic: str) -> list[OutboundMessage]:
        return [m for m in self.sent if m.topic == topic]

    def clear(self) -> None:
        self.sent.clear()


OpenConnection = t.Callable[[str], t.Awaitable[tuple[Connection, RecordingTransport]]]


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def jwt_manager() -> JWTManager:
    return JWTManager(
        secret_key=p.Secret(TEST_JWT_SECRET),
        algorithm="HS256",
        access_token_expire_minutes=30,
    )


@pytest.fixture
def directory() -> InMemoryIdentityDirectory:
    """A small campus: two students, a professor, an admin and a deactivated account."""
    return InMemoryIdentityDirectory([
        IdentityRecord(user_id=UserID("alice"), role=UserRole.Student, display_name="Alice"),
        IdentityRecord(user_id=UserID("bob"), role=UserRole.Student, display_name="Bob"),
        IdentityRecord(user_id=UserID("prof"), role=UserRole.Faculty, display_name="Prof. Chen"),
        IdentityRecord(user_id=UserID("root"), role=UserRole.Admin, display_name="Registrar"),
        IdentityRecord(user_id=UserID("dora"), role=UserRole.Student, display_name="Dora", is_active=False),
    ])


@pytest.fixture
def authenticator(jwt_manager: JWTManager, directory: InMemoryIdentityDirectory) -> ConnectionAuthenticator:
    return ConnectionAuthenticator(jwt_manager=jwt_manager, directory=directory)


@pytest.fixture
def state() -> RealtimeState:
    return RealtimeState(stripes=8)


@pytest.fixture
def hub(state: RealtimeState, authenticator: ConnectionAuthenticator) -> RealtimeHub:
    return RealtimeHub(state, authenticator, queue_size=32)


@pytest.fixture
def token_for(jwt_manager: JWTManager, directory: InMemoryIdentityDirectory) -> t.Callable[[str], str]:
    def issue(user_id: str) -> str:
        record = directory.get(UserID(user_id))
        role = record.role.value if record is not None else UserRole.Student.value
        return jwt_manager.create_access_token(UserID(user_id), role)

    return issue


@pytest.fixture
def open_connection(hub: RealtimeHub, token_for: t.Callable[[str], str]) -> OpenConnection:
    async def open(user_id: str) -> tuple[Connection, RecordingTransport]:
        transport = RecordingTransport()
        connection = await hub.connect(token_for(user_id), transport)
        return connection, transport

    return open


@pytest.fixture
def recording_transport() -> t.Callable[..., RecordingTransport]:
    return RecordingTransport


Settle = t.Callable[[], t.Awaitable[None]]


@pytest.fixture
def settle(hub: RealtimeHub) -> Settle:
    """Wait until every open connection's outbox has been written."""

    async def drain() -> None:
        for connection in hub.state.connections():
            await connection.drain()

    return drain
