"""Handshake authentication."""

__all__ = [
    "ClaimsIdentityDirectory",
    "ConnectionAuthenticator",
    "IdentityDirectory",
    "InMemoryIdentityDirectory",
    "JWTManager",
    "Rejected",
    "RejectionReason",
    "TokenData",
]

from .authenticator import ConnectionAuthenticator, Rejected, RejectionReason
from .directory import ClaimsIdentityDirectory, IdentityDirectory, InMemoryIdentityDirectory
from .jwt import JWTManager, TokenData
