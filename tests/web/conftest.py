"""Fixtures for exercising the websocket endpoint through the booted container."""

from __future__ import annotations

import os
import typing as t
from pathlib import Path

import pydantic as p
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

import campuslive
from campuslive.auth import InMemoryIdentityDirectory, JWTManager
from campuslive.core import CampusLiveContainer
from campuslive.core.config.web import WebSettings
from campuslive.model import DeploymentEnvironment, IdentityRecord, UserID, UserRole
from campuslive.web.main import _create_app  # pyright: ignore[reportPrivateUsage]


@pytest.fixture
def container() -> t.Generator[CampusLiveContainer, None, None]:
    """Boot the DI container in the Test environment.

    Function scoped: every test gets a fresh hub and directory.
    """
    ct = CampusLiveContainer()
    root = Path(os.path.dirname(campuslive.__file__)).parent

    CampusLiveContainer.boot(
        ct,
        debug=False,
        env=DeploymentEnvironment.Test,
        config_root=p.FileUrl(f"file://{root}/config"),
        override=(),
    )

    yield ct

    ct.unwire()
    ct.shutdown_resources()


@pytest.fixture
def directory(container: CampusLiveContainer) -> InMemoryIdentityDirectory:
    directory = t.cast(InMemoryIdentityDirectory, container.auth.directory())
    directory.add(IdentityRecord(user_id=UserID("alice"), role=UserRole.Student, display_name="Alice"))
    directory.add(IdentityRecord(user_id=UserID("bob"), role=UserRole.Student, display_name="Bob"))
    directory.add(IdentityRecord(user_id=UserID("prof"), role=UserRole.Faculty, display_name="Prof. Chen"))
    return directory


@pytest.fixture
def token_for(container: CampusLiveContainer, directory: InMemoryIdentityDirectory) -> t.Callable[[str], str]:
    jwt_manager: JWTManager = container.auth.jwt_manager()

    def issue(user_id: str) -> str:
        record = directory.get(UserID(user_id))
        role = record.role.value if record is not None else UserRole.Student.value
        return jwt_manager.create_access_token(UserID(user_id), role)

    return issue


@pytest.fixture
def app(container: CampusLiveContainer) -> FastAPI:
    return _create_app(
        config=WebSettings(**container.config.web()),
        hub=container.realtime.hub(),
        bridge=container.realtime.bridge(),
    )


@pytest.fixture
def client(app: FastAPI) -> t.Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client
