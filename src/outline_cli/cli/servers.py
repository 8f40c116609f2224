"""
Outline CLI - Server Commands

Register, inspect and remove Outline servers, and read their transfer metrics.
"""

from typing import Optional

import typer

from .context import SERVER_NAME_OPTION, as_typer_parser, get_app_context
from .output import print_metrics, print_server, print_servers
from ..core.exceptions import NotFoundError
from ..core.values import parse_cert_fingerprint, parse_server_url

app = typer.Typer(help="Manage Outline servers", no_args_is_help=True)


@app.command(name="list", help="List all configured servers")
def list_command(ctx: typer.Context):
    print_servers(get_app_context(ctx).registry.list_all())


@app.command(name="add", help="Add a new server with individual parameters")
def add_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Server name/label"),
    url: str = typer.Argument(
        ..., help="Server URL with secret path", parser=as_typer_parser(parse_server_url)
    ),
    cert_sha256: str = typer.Option(
        ...,
        "--cert-sha256",
        help="Certificate SHA256 hash",
        parser=as_typer_parser(parse_cert_fingerprint),
    ),
):
    """
    Register a server.

    Examples:
        outline-cli servers add myserver https://example.com/secret --cert-sha256 ABC123...
    """
    get_app_context(ctx).registry.add(name, url, cert_sha256)
    typer.echo(f"Server '{name}' added")


@app.command(name="add-json", help="Add a new server from JSON input")
def add_json_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Server name/label"),
    json_input: str = typer.Argument(
        ..., metavar="JSON", help="JSON input with apiUrl and certSha256 fields"
    ),
):
    """
    Register a server from the JSON printed by the Outline installer.

    Examples:
        outline-cli servers add-json myserver '{"apiUrl":"https://example.com/secret","certSha256":"ABC123..."}'
    """
    get_app_context(ctx).registry.add_from_json(name, json_input)
    typer.echo(f"Server '{name}' added")


@app.command(name="get", help="Get server details")
def get_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Server name"),
):
    server, info = get_app_context(ctx).manager.get_server(name)
    print_server(server, info)


@app.command(name="update", help="Update server details")
def update_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Server name"),
    url: Optional[str] = typer.Option(
        None, "--url", help="New server URL", parser=as_typer_parser(parse_server_url)
    ),
):
    get_app_context(ctx).registry.update_url(name, url)
    typer.echo(f"Server '{name}' updated")


@app.command(name="delete", help="Delete a server")
def delete_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Server name"),
):
    if not get_app_context(ctx).registry.delete(name):
        raise NotFoundError(f"server '{name}' not found", context={"server": name})
    typer.echo(f"Server '{name}' deleted")


@app.command(name="metrics", help="View server metrics")
def metrics_command(
    ctx: typer.Context,
    server_name: str = SERVER_NAME_OPTION,
):
    metrics = get_app_context(ctx).manager.get_metrics(server_name)
    print_metrics(server_name, metrics)
