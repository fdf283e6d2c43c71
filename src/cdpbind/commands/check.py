"""Command: validate the protocol schema without writing anything."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from cdpbind.commands._base import BindCommand, schema_arguments

if TYPE_CHECKING:
    from cdpbind.commands._context import AppContext


@click.command(
    cls=BindCommand,
    examples="""\
  cdpbind check
  cdpbind check json/browser_protocol.json json/js_protocol.json
  cdpbind -v check""",
)
@schema_arguments
@click.pass_obj
def check(app: AppContext, browser: Path | None, js: Path | None) -> None:
    """Load, resolve, and analyze the schema; report counts."""
    from cdpbind.services.schema import SchemaService

    app.emit(SchemaService(app.settings).check(browser, js))
