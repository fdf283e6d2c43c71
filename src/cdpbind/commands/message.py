"""Command group: work with protocol messages."""

from __future__ import annotations

from typing import IO, TYPE_CHECKING

import click

from cdpbind.commands._base import BindGroup

if TYPE_CHECKING:
    from cdpbind.commands._context import AppContext


@click.group(
    cls=BindGroup,
    examples="""\
  cdpbind message parse request.json
  echo '{"id":1,"method":"Page.enable"}' | cdpbind message parse -""",
)
def message() -> None:
    """Parse incoming protocol messages."""


@message.command(
    examples="""\
  cdpbind message parse request.json
  echo '{"id":1,"method":"Page.enable"}' | cdpbind message parse
  cdpbind message parse --package cdp request.json
  cdpbind -q message parse bad.json""",
)
@click.argument("source", type=click.File("rb"), default="-")
@click.option(
    "--package",
    default=None,
    help="Generated bindings package to dispatch the method against.",
)
@click.pass_obj
def parse(app: AppContext, source: IO[bytes], package: str | None) -> None:
    """Parse one incoming message from SOURCE (a file, or - for stdin).

    Prints the parsed message, or the protocol error reply for a
    malformed one.
    """
    from cdpbind.services.message import MessageService

    app.emit(MessageService(app.settings).parse(source.read(), package=package))
