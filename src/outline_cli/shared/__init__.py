"""
Outline CLI - Shared Utilities

This package contains constants and error sanitization shared across the CLI.
"""

from . import constants

__all__ = ["constants"]
