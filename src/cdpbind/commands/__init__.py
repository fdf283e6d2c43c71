"""Subcommand modules for cdpbind.

Provides register_commands() which uses deferred imports to keep
``cdpbind --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from cdpbind.commands.message import message
    from cdpbind.commands.schema import schema

    cli.add_command(schema)
    cli.add_command(message)

    # --- Standalone commands ---
    from cdpbind.commands.check import check
    from cdpbind.commands.generate import generate

    cli.add_command(generate)
    cli.add_command(check)
