import typing as t

import annotated_types as ant

from .base import BaseSettings


class AuthSettings(BaseSettings):
    """Handshake authentication settings for JWT tokens."""

    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: t.Annotated[int, ant.Gt(0)] = 30
    # "claims" trusts the token's role and name; "memory" resolves against a process-local directory
    directory: t.Literal["claims", "memory"] = "claims"
