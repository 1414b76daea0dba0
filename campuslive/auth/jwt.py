"""HS256 access tokens presented at the websocket handshake."""

from __future__ import annotations

import datetime
import typing as t

import annotated_types as ant
import jwt
import pydantic as p

from campuslive.model import FrozenModel, UserID


class TokenClaims(FrozenModel):
    sub: t.Annotated[str, ant.MinLen(1)]  # user_id
    role: str = ""
    name: str | None = None  # display name
    exp: int
    iat: int


class TokenData(t.NamedTuple):
    """Decoded token data."""

    user_id: UserID
    role: str
    name: str | None
    expires_at: datetime.datetime
    issued_at: datetime.datetime


class JWTManager(object):
    """Issues and verifies access tokens.

    Verification fails closed: a token that is malformed, expired, signed with
    another key or algorithm, or missing `sub`/`exp`/`iat` decodes to None.
    """

    _secret_key: p.Secret[str]
    _algorithm: t.Literal["HS256"]
    _lifetime: datetime.timedelta

    def __init__(
        self,
        secret_key: p.Secret[str],
        algorithm: t.Literal["HS256"] = "HS256",
        access_token_expire_minutes: t.Annotated[int, ant.Ge(1)] = 30,
    ) -> None:
        if access_token_expire_minutes < 1:
            raise ValueError("access tokens must live at least one minute")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._lifetime = datetime.timedelta(minutes=access_token_expire_minutes)

    @property
    def secret_key(self) -> str:
        return self._secret_key.get_secret_value()

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def lifetime(self) -> datetime.timedelta:
        return self._lifetime

    def create_access_token(
        self,
        user_id: UserID,
        role: str,
        name: str | None = None,
        expires_delta: datetime.timedelta | None = None,
        now: datetime.datetime | None = None,
    ) -> str:
        issued = now or datetime.datetime.now(datetime.UTC)
        claims = TokenClaims(
            sub=str(user_id),
            role=role,
            name=name,
            iat=int(issued.timestamp()),
            exp=int((issued + (expires_delta or self._lifetime)).timestamp()),
        )
        return jwt.encode(claims.model_dump(exclude_none=True), self.secret_key, algorithm=self._algorithm)

    def decode_token(self, token: str) -> TokenData | None:
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
            claims = TokenClaims.model_validate(payload)
        except (jwt.InvalidTokenError, p.ValidationError):
            return None

        return TokenData(
            user_id=UserID(claims.sub),
            role=claims.role,
            name=claims.name,
            expires_at=datetime.datetime.fromtimestamp(claims.exp, tz=datetime.UTC),
            issued_at=datetime.datetime.fromtimestamp(claims.iat, tz=datetime.UTC),
        )
