"""
Outline CLI - Command-line Interface

This module wires the command groups together and is the single place where
errors are reported to the user and turned into an exit code.
"""

import logging
import sys
from enum import Enum

import typer

from .context import AppContext, get_app_context
from .keys import app as keys_app
from .servers import app as servers_app
from .. import __version__
from ..core.logger import configure_logging
from ..shared.constants import LOGGER_NAME
from ..shared.error_sanitizer import log_error_safely


class Verbosity(str, Enum):
    error = "error"
    warning = "warning"
    info = "info"
    debug = "debug"


EPILOG = """Examples:

  outline-cli servers add myserver https://example.com/secret --cert-sha256 abc123def456...

  outline-cli servers add-json myserver '{"apiUrl":"https://example.com/secret","certSha256":"abc123def456..."}'

  outline-cli keys create -s myserver -k mykey -l 1GB

  outline-cli keys list -s myserver

  outline-cli servers metrics -s myserver
"""

# Create main CLI app
app = typer.Typer(
    name="outline-cli",
    help="Outline CLI - A command-line interface for managing Outline VPN servers and access keys",
    epilog=EPILOG,
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)


@app.callback()
def root(
    ctx: typer.Context,
    verbosity: Verbosity = typer.Option(
        Verbosity.info, "--verbosity", "-v", help="Verbosity level", case_sensitive=False
    ),
):
    logger = configure_logging(verbosity.value)
    ctx.obj = AppContext(logger)


@app.command(name="version", help="Show version information")
def version_command():
    typer.echo(f"outline-cli version {__version__}")


@app.command(name="print-config", help="Print configuration in YAML format")
def print_config_command(ctx: typer.Context):
    typer.echo(get_app_context(ctx).registry.dump())


# Register command groups
app.add_typer(servers_app, name="servers", help="Manage Outline servers")
app.add_typer(keys_app, name="keys", help="Manage access keys")


def main():
    """CLI entry point."""
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("\n\nOperation cancelled by user", err=True)
        sys.exit(1)
    except Exception as e:
        message = log_error_safely(logging.getLogger(LOGGER_NAME), e, "command")
        typer.echo(f"Error: {message}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
