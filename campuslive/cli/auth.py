import datetime

import campuslive.lib.cli as click
from campuslive.auth import JWTManager
from campuslive.core import di
from campuslive.model import UserID, UserRole


@click.group()
def auth(): ...


@auth.command(name="token")
@click.argument("user_id")
@click.option("-r", "--role", type=click.EnumType(UserRole), default=UserRole.Student)
@click.option("-n", "--name", default=None, help="display name carried in the token")
@click.option("-m", "--minutes", type=click.IntRange(min=1), default=None, help="lifetime, defaults to auth config")
@di.inject
def issue(
    user_id: str,
    role: UserRole,
    name: str | None,
    minutes: int | None,
    jwt_manager: JWTManager = di.Provide["auth.jwt_manager"],
):
    """Mint an access token for connecting to the websocket endpoint."""
    expires_delta = datetime.timedelta(minutes=minutes) if minutes is not None else None
    click.echo(jwt_manager.create_access_token(UserID(user_id), role.value, name=name, expires_delta=expires_delta))
