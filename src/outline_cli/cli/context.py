"""
Outline CLI - Command Context

Objects shared by every command: the configured logger, the registry and the
manager built on top of it, plus the option definitions and value parsers
several commands reuse.
"""

import logging
from typing import Callable, Optional, TypeVar

import typer

from ..core.client import OutlineClient
from ..core.exceptions import ValidationError
from ..core.manager import ServerManager
from ..core.registry import ServerRegistry

T = TypeVar("T")


class AppContext:
    """Per-invocation state stored on ``typer.Context.obj``."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self._registry: Optional[ServerRegistry] = None

    @property
    def registry(self) -> ServerRegistry:
        # Loaded on first use so `version` works with a broken config file
        if self._registry is None:
            self._registry = ServerRegistry(logger=self.logger)
        return self._registry

    @property
    def manager(self) -> ServerManager:
        return ServerManager(self.registry, logger=self.logger, client_factory=OutlineClient)


def get_app_context(ctx: typer.Context) -> AppContext:
    return ctx.find_object(AppContext)


def as_typer_parser(parse: Callable[[str], T]) -> Callable[[str], T]:
    """Adapt a value parser so its errors are reported as bad parameters."""

    def _parser(value: str) -> T:
        try:
            return parse(value)
        except ValidationError as e:
            raise typer.BadParameter(e.message)

    _parser.__name__ = parse.__name__
    return _parser


# Every command that talks to one registered server takes this option
SERVER_NAME_OPTION = typer.Option(..., "--server-name", "-s", help="Server name")
