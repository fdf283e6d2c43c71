"""Command group: inspect the protocol schema."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from cdpbind.commands._base import BindGroup, schema_arguments

if TYPE_CHECKING:
    from cdpbind.commands._context import AppContext


@click.group(
    cls=BindGroup,
    examples="""\
  cdpbind schema domains
  cdpbind schema borrows
  cdpbind schema borrows --explain dom.Node
  cdpbind schema deprecated""",
)
def schema() -> None:
    """Inspect domains, borrowing types, and deprecations."""


@schema.command(
    examples="""\
  cdpbind schema domains
  cdpbind -q schema domains
  cdpbind --json schema domains""",
)
@schema_arguments
@click.pass_obj
def domains(app: AppContext, browser: Path | None, js: Path | None) -> None:
    """List every domain with its command, event, and type counts."""
    from cdpbind.services.schema import SchemaService

    app.emit(SchemaService(app.settings).domains(browser, js))


@schema.command(
    examples="""\
  cdpbind schema borrows
  cdpbind schema borrows --explain page.NavigateCommand
  cdpbind -v schema borrows""",
)
@schema_arguments
@click.option(
    "--explain",
    "target",
    default=None,
    metavar="MODULE.NAME",
    help="Show the chain of references that makes one type borrow.",
)
@click.pass_obj
def borrows(app: AppContext, browser: Path | None, js: Path | None, target: str | None) -> None:
    """List generated types that hold string data from the message."""
    from cdpbind.services.schema import SchemaService

    app.emit(SchemaService(app.settings).borrows(target, browser, js))


@schema.command(
    examples="""\
  cdpbind schema deprecated
  cdpbind -v schema deprecated""",
)
@schema_arguments
@click.pass_obj
def deprecated(app: AppContext, browser: Path | None, js: Path | None) -> None:
    """List deprecated nodes with their effective warnings."""
    from cdpbind.services.schema import SchemaService

    app.emit(SchemaService(app.settings).deprecated(browser, js))
