"""Command: compile the protocol schema into a bindings package."""

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
  cdpbind generate
  cdpbind generate json/browser_protocol.json json/js_protocol.json
  cdpbind generate -o build --package cdp_bindings
  cdpbind --json generate""",
)
@schema_arguments
@click.option(
    "-o",
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory to write the package into (default: [generate] output_dir).",
)
@click.option("--package", default=None, help="Import name of the generated package.")
@click.pass_obj
def generate(
    app: AppContext,
    browser: Path | None,
    js: Path | None,
    output_dir: Path | None,
    package: str | None,
) -> None:
    """Generate typed bindings from the BROWSER and JS protocol halves."""
    from cdpbind.services.generate import GenerateService

    if package is not None and not package.isidentifier():
        raise click.BadParameter(f"'{package}' is not a valid identifier", param_hint="--package")

    svc = GenerateService(app.settings)
    app.emit(svc.generate(browser, js, output_dir=output_dir, package=package))
