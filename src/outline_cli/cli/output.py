"""
Outline CLI - Plain-text Output

Renders registry entries and API results for the terminal.
"""

from typing import Iterable, List, Optional

import typer

from ..core.models import AccessKey, ServerEndpoint, ServerInfo, TransferMetrics
from ..core.values import format_data_size


def _heading(title: str):
    typer.echo(title)
    typer.echo("=" * len(title))


def print_servers(servers: Iterable[ServerEndpoint]):
    servers = list(servers)
    if not servers:
        typer.echo("No servers configured")
        typer.echo("\nTip: Run 'outline-cli servers add' to register your first server")
        return

    _heading("Configured servers:")
    for server in servers:
        typer.echo(f"Name: {typer.style(server.name, fg=typer.colors.CYAN, bold=True)}")
        typer.echo(f"URL:  {server.url}")
        typer.echo(f"Cert: {server.cert_sha256}")
        typer.echo("---")


def print_server(server: ServerEndpoint, info: Optional[ServerInfo]):
    typer.echo(f"Server: {typer.style(server.name, fg=typer.colors.CYAN, bold=True)}")
    typer.echo(f"URL:   {server.url}")
    typer.echo(f"Cert:  {server.cert_sha256}")

    if info is None:
        typer.echo("API Info: unavailable")
        return

    typer.echo("API Info:")
    typer.echo(f"  Name:                    {info.name}")
    typer.echo(f"  Server ID:               {info.server_id}")
    typer.echo(f"  Version:                 {info.version}")
    typer.echo(f"  Metrics Enabled:         {str(info.metrics_enabled).lower()}")
    typer.echo(f"  Port for New Keys:       {info.port_for_new_access_keys}")
    typer.echo(f"  Hostname for Keys:       {info.hostname_for_access_keys}")
    if info.access_key_data_limit is not None:
        typer.echo(f"  Access Key Data Limit:   {info.access_key_data_limit.bytes} bytes")


def print_access_key(key: AccessKey, show_password: bool = False):
    typer.echo(f"ID:         {key.id}")
    typer.echo(f"Name:       {key.name}")
    if show_password:
        typer.echo(f"Password:   {key.password}")
    typer.echo(f"Port:       {key.port}")
    typer.echo(f"Method:     {key.method}")
    typer.echo(f"Access URL: {key.access_url}")
    if key.data_limit is not None:
        typer.echo(f"Data Limit: {format_data_size(key.data_limit.bytes) or '0 B'}")


def print_access_keys(server_name: str, keys: List[AccessKey]):
    if not keys:
        typer.echo(f"No access keys on server '{server_name}'")
        return

    _heading(f"Access keys for server '{server_name}':")
    for key in keys:
        print_access_key(key)
        typer.echo("---")


def print_metrics(server_name: str, metrics: TransferMetrics):
    _heading(f"Transfer metrics for server '{server_name}':")
    usage = metrics.bytes_transferred_by_user_id
    if not usage:
        typer.echo("No transfer data available")
        return

    for user_id, transferred in sorted(usage.items()):
        typer.echo(f"User {user_id}: {format_data_size(transferred) or '0 B'}")
