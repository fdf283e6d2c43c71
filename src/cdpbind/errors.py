"""Exception hierarchy for cdpbind.

Three classes of failure, matching where they surface:

- Schema errors abort a compile run. Nothing is emitted.
- Dispatch declaration errors are raised when a variant set is declared.
- Runtime message errors are recoverable and map onto a protocol error
  reply (see :mod:`cdpbind.runtime.envelope`).
"""

from __future__ import annotations

from typing import Any


class CdpBindError(Exception):
    """Root of every error raised by cdpbind."""


# ---------------------------------------------------------------------------
# Schema-load errors
# ---------------------------------------------------------------------------


class SchemaError(CdpBindError):
    """The protocol schema is malformed, incompatible, or inconsistent."""


class SchemaParseError(SchemaError):
    """A schema document could not be parsed into the schema model."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class VersionMismatchError(SchemaError):
    """The two halves of the protocol report different versions."""

    def __init__(self, browser: str, js: str) -> None:
        self.browser = browser
        self.js = js
        super().__init__(
            f"browser protocol version {browser} doesn't match js protocol version {js}"
        )


class UnresolvedReferenceError(SchemaError):
    """A ``$ref`` names a type that does not exist in the target domain."""

    def __init__(self, domain: str, target: str, *, location: str | None = None) -> None:
        self.domain = domain
        self.target = target
        self.location = location
        msg = f"unresolved reference '{target}' in domain '{domain}'"
        if location:
            msg = f"{msg} (at {location})"
        super().__init__(msg)


class DuplicateDeclarationError(SchemaError):
    """Two generated declarations would share one identifier in a module."""

    def __init__(self, module: str, name: str) -> None:
        self.module = module
        self.name = name
        super().__init__(f"duplicate generated declaration '{module}.{name}'")


# ---------------------------------------------------------------------------
# Declaration-time errors
# ---------------------------------------------------------------------------


class DispatchDeclarationError(CdpBindError, TypeError):
    """A command or event variant set is structurally invalid."""


# ---------------------------------------------------------------------------
# Runtime message errors
# ---------------------------------------------------------------------------


class InvalidParamsError(CdpBindError):
    """A variant was selected but its parameters failed to deserialize."""

    def __init__(self, name: str, detail: str, *, params: Any = None) -> None:
        self.name = name
        self.detail = detail
        self.params = params
        super().__init__(f"invalid parameters for '{name}': {detail}")


# ---------------------------------------------------------------------------
# Output errors
# ---------------------------------------------------------------------------


class RenderError(CdpBindError):
    """A template failed to render, or its output is not valid Python.

    Usually a broken template override. ``path`` is the template name or
    the generated file, whichever the failure belongs to.
    """

    def __init__(
        self, path: str, detail: str, *, reason: str = "rendered module does not parse"
    ) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"{path}: {reason}: {detail}")
