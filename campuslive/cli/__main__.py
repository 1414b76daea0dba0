from __future__ import annotations

import importlib
import sys
import traceback
import types
import typing as t
from pathlib import Path

import pydantic as p

import campuslive
import campuslive.lib.cli as click
from campuslive.core import CampusLiveContainer
from campuslive.model import DeploymentEnvironment

DefaultConfigRoot: t.Final[Path] = Path(campuslive.__file__).resolve().parents[1] / "config"
Subcommands: t.Final[tuple[str, ...]] = ("auth", "event", "web")

# subcommand modules imported so far; boot wires them into the container
_loaded: list[types.ModuleType] = []


class LazySubcommandGroup(click.Group):
    """Imports `campuslive.cli.<name>` only once `<name>` is actually invoked."""

    def list_commands(self, ctx: click.Context) -> list[str]:
        return list(Subcommands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        if cmd_name not in Subcommands:
            return None
        module = importlib.import_module(f"campuslive.cli.{cmd_name}")
        if module not in _loaded:
            _loaded.append(module)
        return getattr(module, cmd_name)


@click.group(cls=LazySubcommandGroup)
@click.option("-E", "--env", default=DeploymentEnvironment.Local, type=click.EnumType(DeploymentEnvironment))
@click.option("-c", "--config-root", default=DefaultConfigRoot, type=click.ConfigRootType())
@click.option(
    "-o",
    "--override",
    multiple=True,
    help="override a configuration value, e.g. -o realtime.queue_size=64",
)
@click.option("-D", "--debug", is_flag=True, default=False)
@click.pass_obj
def main(
    ct: CampusLiveContainer,
    env: DeploymentEnvironment,
    config_root: p.FileUrl,
    override: tuple[str, ...],
    debug: bool,
):
    CampusLiveContainer.boot(
        ct,
        debug=debug,
        env=env,
        config_root=config_root,
        override=override,
        wiring=tuple(_loaded),
    )


def execute_command(*argv: str) -> None:
    args = list(argv or sys.argv)
    container = CampusLiveContainer()

    try:
        rv = main.main(args=args[1:], prog_name=Path(args[0]).name, obj=container, standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except (click.Abort, EOFError, KeyboardInterrupt):
        click.echo("Aborted!", err=True)
        sys.exit(1)
    except Exception as e:
        click.secho(f"error: {e}", fg="red", err=True)
        if container.debug():
            traceback.print_exc()
        sys.exit(1)
    finally:
        container.shutdown_resources()
    sys.exit(rv if isinstance(rv, int) else 0)


if __name__ == "__main__":
    execute_command(*sys.argv)
