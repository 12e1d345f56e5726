"""snapperms CLI — snapd permission prompting front-end."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Optional, TypeVar

import typer

from snapperms.lib.models import AppConfig

__version__ = "0.1.0"

app = typer.Typer(
    name="snapperms",
    help="Manage snapd app permission prompting and custom rules.",
    no_args_is_help=True,
)

log = logging.getLogger("snapperms")

T = TypeVar("T")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"snapperms version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable DEBUG logging"),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Print version and exit",
    ),
    config: Path = typer.Option(
        Path("~/.config/snapperms/config.toml"),
        "--config",
        "-c",
        help="Config file path",
    ),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config.expanduser()


# Default config.toml content
DEFAULT_CONFIG_TOML = """\
[daemon]
socket = "/run/snapd.socket"
base_url = "http://localhost"
timeout = 10.0

[rules]
interface = "home"
"""


@app.command()
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing file"),
    dir: Optional[Path] = typer.Option(
        None,
        "--dir",
        help="Target directory (default: ~/.config/snapperms)",
    ),
) -> None:
    """Initialize ~/.config/snapperms/ with a default config.toml."""
    config_dir = (dir or Path("~/.config/snapperms")).expanduser()
    config_dir.mkdir(parents=True, exist_ok=True)

    config_file = config_dir / "config.toml"
    if config_file.exists() and not force:
        typer.echo(f"  Exists, skipping: {config_file}")
    else:
        config_file.write_text(DEFAULT_CONFIG_TOML)
        typer.echo(f"  Created: {config_file}")

    typer.echo("Init complete.")


def _open_transport(config: AppConfig):
    """Create the transport used by every command."""
    from snapperms.lib.transport import HttpxTransport

    return HttpxTransport(config)


def _run(ctx: typer.Context, operation: Callable[..., T]) -> T:
    """Run one server operation, turning failures into exit code 1."""
    from snapperms.lib.config import load_config
    from snapperms.lib.errors import PermissionsError
    from snapperms.lib.server import PermissionServer

    try:
        config = load_config(ctx.obj["config_path"])
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    transport = _open_transport(config)
    try:
        server = PermissionServer(transport, interface=config.interface)
        return operation(server)
    except (PermissionsError, ValueError) as e:
        log.debug("operation failed", exc_info=True)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        transport.close()


@app.command()
def enable(ctx: typer.Context) -> None:
    """Enable app permission prompting."""
    _run(ctx, lambda server: server.enable_app_permissions())
    typer.echo("App permission prompting enabled.")


@app.command()
def disable(ctx: typer.Context) -> None:
    """Disable app permission prompting."""
    _run(ctx, lambda server: server.disable_app_permissions())
    typer.echo("App permission prompting disabled.")


@app.command()
def status(ctx: typer.Context) -> None:
    """Show whether app permission prompting is enabled."""
    result = _run(ctx, lambda server: server.is_app_permissions_enabled())
    typer.echo("enabled" if result.value else "disabled")


@app.command()
def rules(ctx: typer.Context) -> None:
    """Show whether any custom rules are applied."""
    result = _run(ctx, lambda server: server.are_custom_rules_applied())
    typer.echo("yes" if result.value else "no")


@app.command()
def folders(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of text"),
) -> None:
    """List personal folder permissions granted through custom rules."""
    result = _run(ctx, lambda server: server.list_personal_folders_permissions())

    if as_json:
        payload = [
            {
                "id": pathsnap.rule_id,
                "snap": pathsnap.snap,
                "path-pattern": pathsnap.path_pattern,
                "permissions": [p.value for p in pathsnap.permissions],
                "outcome": pathsnap.outcome.value,
                "lifespan": pathsnap.lifespan.value,
            }
            for pathsnap in result.pathsnaps
        ]
        typer.echo(json.dumps(payload, indent=2))
        return

    if not result.pathsnaps:
        typer.echo("No custom rules.")
        return
    for pathsnap in result.pathsnaps:
        permissions = ",".join(p.value for p in pathsnap.permissions)
        typer.echo(
            f"{pathsnap.snap}  {pathsnap.path_pattern}  {permissions}  "
            f"{pathsnap.outcome.value} ({pathsnap.lifespan.value})"
        )


@app.command()
def remove(
    ctx: typer.Context,
    snap: str = typer.Argument(..., help="Snap whose custom rules are removed"),
) -> None:
    """Remove all custom rules of a snap."""
    _run(ctx, lambda server: server.remove_app_permission(snap))
    typer.echo(f"Removed custom rules for {snap}.")


@app.command(hidden=True)
def version() -> None:
    """Print version string."""
    typer.echo(f"snapperms version: {__version__}")


if __name__ == "__main__":
    app()
