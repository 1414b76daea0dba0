"""Identity directories resolve a verified token to an identity record.

The directory is an external collaborator; these implementations cover tests,
development and deployments where the token issuer is trusted to carry the
role and display name.
"""

from __future__ import annotations

import typing as t
from abc import abstractmethod

from campuslive.model import IdentityRecord, UserID, UserRole

from .jwt import TokenData


class IdentityDirectory(t.Protocol):
    @abstractmethod
    async def resolve(self, token: TokenData) -> IdentityRecord | None:
        """Look up the identity behind a verified token.

        Returns:
            The identity record, or None if no such identity exists.
        """
        ...


class InMemoryIdentityDirectory(object):
    """Directory backed by a dict, for tests and local development."""

    def __init__(self, records: t.Iterable[IdentityRecord] = ()) -> None:
        self._records: dict[UserID, IdentityRecord] = {r.user_id: r for r in records}

    def add(self, record: IdentityRecord) -> None:
        self._records[record.user_id] = record

    def deactivate(self, user_id: UserID) -> None:
        record = self._records[user_id]
        self._records[user_id] = record.model_copy(update={"is_active": False})

    def get(self, user_id: UserID) -> IdentityRecord | None:
        return self._records.get(user_id)

    async def resolve(self, token: TokenData) -> IdentityRecord | None:
        return self._records.get(token.user_id)


class ClaimsIdentityDirectory(object):
    """Trust the signed token: role and display name come from its claims."""

    async def resolve(self, token: TokenData) -> IdentityRecord | None:
        try:
            role = UserRole(token.role)
        except ValueError:
            return None
        return IdentityRecord(user_id=token.user_id, role=role, display_name=token.name or token.user_id)
