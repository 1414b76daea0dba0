"""Authentication container for dependency injection."""

from __future__ import annotations

import typing as t

from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Provider, Singleton

from campuslive.auth import ClaimsIdentityDirectory, ConnectionAuthenticator, IdentityDirectory, \
    InMemoryIdentityDirectory, JWTManager


def provide_identity_directory(kind: t.Literal["claims", "memory"]) -> IdentityDirectory:
    match kind:
        case "memory":
            return InMemoryIdentityDirectory()
        case "claims":
            return ClaimsIdentityDirectory()
        case _:
            raise ValueError(f"unknown identity directory: {kind!r}")


class AuthContainer(DeclarativeContainer):
    """Container for handshake authentication."""

    config: Configuration = Configuration()
    secrets: Configuration = Configuration()

    jwt_manager: Provider[JWTManager] = Singleton(
        JWTManager,
        secret_key=secrets.jwt,
        algorithm=config.jwt_algorithm,
        access_token_expire_minutes=config.access_token_expire_minutes,
    )

    directory: Provider[IdentityDirectory] = Singleton(provide_identity_directory, kind=config.directory)

    authenticator: Provider[ConnectionAuthenticator] = Singleton(
        ConnectionAuthenticator,
        jwt_manager=jwt_manager,
        directory=directory,
    )
