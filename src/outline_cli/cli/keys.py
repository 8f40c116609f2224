"""
Outline CLI - Access Key Commands

List, create, delete and edit access keys on a registered server. Keys can be
addressed by id or by name; a name resolves to the first key carrying it.
"""

from typing import Optional

import typer

from .context import SERVER_NAME_OPTION, as_typer_parser, get_app_context
from .output import print_access_key, print_access_keys
from ..core.values import (
    DataSize,
    EncryptionMethod,
    parse_encryption_method,
    parse_port,
)
from ..shared.constants import DEFAULT_ENCRYPTION_METHOD

app = typer.Typer(help="Manage access keys", no_args_is_help=True)

_data_size_parser = as_typer_parser(DataSize.parse)


@app.command(name="list", help="List access keys")
def list_command(
    ctx: typer.Context,
    server_name: str = SERVER_NAME_OPTION,
):
    keys = get_app_context(ctx).manager.list_access_keys(server_name)
    print_access_keys(server_name, keys)


@app.command(name="create", help="Create a new access key")
def create_command(
    ctx: typer.Context,
    server_name: str = SERVER_NAME_OPTION,
    key_name: str = typer.Option("", "--key-name", "-k", help="Access key name"),
    method: EncryptionMethod = typer.Option(
        DEFAULT_ENCRYPTION_METHOD,
        "--method",
        "-m",
        help="Encryption method",
        parser=as_typer_parser(parse_encryption_method),
    ),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", help="Port number", parser=as_typer_parser(parse_port)
    ),
    data_limit: Optional[DataSize] = typer.Option(
        None,
        "--data-limit",
        "-l",
        help="Data limit (e.g., '1GB', '500MB', '2TB')",
        parser=_data_size_parser,
    ),
):
    """
    Create an access key.

    Examples:
        outline-cli keys create -s myserver -k mykey -l 1GB
    """
    key = get_app_context(ctx).manager.create_access_key(
        server_name,
        key_name=key_name,
        method=method,
        port=port or 0,
        data_limit=data_limit.bytes if data_limit else 0,
    )
    typer.echo("Access key created successfully!")
    print_access_key(key, show_password=True)


@app.command(name="delete", help="Delete an access key")
def delete_command(
    ctx: typer.Context,
    server_name: str = SERVER_NAME_OPTION,
    key_id: str = typer.Option("", "--key-id", "-k", help="Access key ID (use this to delete by ID)"),
    key_name: str = typer.Option(
        "", "--key-name", "-n", help="Access key name (use this to delete by name)"
    ),
):
    if not key_id and not key_name:
        raise typer.BadParameter(
            "either --key-id or --key-name must be specified for delete operation"
        )

    manager = get_app_context(ctx).manager
    if key_name:
        key_id = manager.delete_access_key_by_name(server_name, key_name)
    else:
        manager.delete_access_key(server_name, key_id)
    typer.echo(f"Access key '{key_id}' deleted")


@app.command(name="edit", help="Edit an existing access key")
def edit_command(
    ctx: typer.Context,
    server_name: str = SERVER_NAME_OPTION,
    key_id: str = typer.Option("", "--key-id", "-k", help="Access key ID (use this to edit by ID)"),
    key_name: str = typer.Option(
        "", "--key-name", "-n", help="Access key name (use this to edit by name)"
    ),
    new_name: str = typer.Option("", "--new-name", help="New name for the access key"),
    data_limit: Optional[DataSize] = typer.Option(
        None,
        "--data-limit",
        "-l",
        help="New data limit (e.g., '1GB', '500MB', '2TB')",
        parser=_data_size_parser,
    ),
    remove_limit: bool = typer.Option(False, "--remove-limit", help="Remove data limit from the key"),
):
    if not key_id and not key_name:
        raise typer.BadParameter("either --key-id or --key-name must be specified for edit operation")

    if not new_name and not data_limit and not remove_limit:
        raise typer.BadParameter(
            "at least one of --new-name, --data-limit, or --remove-limit must be specified "
            "for edit operation"
        )

    changes = get_app_context(ctx).manager.edit_access_key(
        server_name,
        key_id=key_id,
        key_name=key_name,
        new_name=new_name,
        data_limit=data_limit.bytes if data_limit else 0,
        remove_limit=remove_limit,
    )
    for change in changes:
        typer.echo(change)
