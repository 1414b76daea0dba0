from __future__ import annotations

import enum
import logging
import typing as t

from campuslive.model import Identity

from .directory import IdentityDirectory
from .jwt import JWTManager

logger = logging.getLogger(__name__)


class RejectionReason(enum.Enum):
    MissingCredential = "missing_credential"
    InvalidCredential = "invalid_credential"
    IdentityNotFound = "identity_not_found"
    AccountDeactivated = "account_deactivated"


class Rejected(t.NamedTuple):
    reason: RejectionReason


class ConnectionAuthenticator(object):
    """Resolves a handshake credential to an identity, failing closed.

    No state is created here; a rejected credential leaves nothing behind.
    """

    def __init__(self, jwt_manager: JWTManager, directory: IdentityDirectory) -> None:
        self._jwt_manager = jwt_manager
        self._directory = directory

    async def authenticate(self, credential: str | None) -> Identity | Rejected:
        if not credential:
            return self._reject(RejectionReason.MissingCredential)

        token = self._jwt_manager.decode_token(credential)
        if token is None:
            return self._reject(RejectionReason.InvalidCredential)

        record = await self._directory.resolve(token)
        if record is None:
            return self._reject(RejectionReason.IdentityNotFound, user_id=token.user_id)

        if not record.is_active:
            return self._reject(RejectionReason.AccountDeactivated, user_id=token.user_id)

        return record.to_identity()

    def _reject(self, reason: RejectionReason, **extra: t.Any) -> Rejected:
        logger.info("handshake rejected", extra={"reason": reason.value, **extra})
        return Rejected(reason)
