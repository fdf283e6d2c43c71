"""MessageService: parse incoming protocol messages.

Parses the envelope and, when a generated bindings package is named,
dispatches the method onto its typed command and event classes. Every
failure maps onto the protocol error reply a server would send.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any

from cdpbind.errors import CdpBindError
from cdpbind.runtime.dispatch import Matcher, Unrecognized, first_match
from cdpbind.runtime.envelope import (
    Incoming,
    IncomingMessageError,
    ProtocolError,
    error_reply,
    serialize_error,
)
from cdpbind.runtime.models import ProtocolModel
from cdpbind.services.base import BaseService
from cdpbind.services.result import ServiceError, ServiceResult
from cdpbind.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


def _protocol_failure(error: ProtocolError, id: int | None) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op="parse_message",
        error=ServiceError(
            code="PROTOCOL_ERROR",
            message=str(error),
            detail={
                "id": id,
                "error_code": error.code,
                "reply": serialize_error(error, id),
            },
        ),
    )


class MessageService(BaseService):
    """Envelope parsing and typed dispatch."""

    def _matchers(self, package: str) -> tuple[Matcher, ...]:
        module = importlib.import_module(package)
        return tuple(
            matcher
            for matcher in (getattr(module, "COMMANDS", None), getattr(module, "EVENTS", None))
            if isinstance(matcher, Matcher)
        )

    @traced
    def parse(self, payload: str | bytes, *, package: str | None = None) -> ServiceResult:
        """Parse one incoming message.

        Args:
            payload: The raw message text.
            package: Import name of a generated bindings package. When
                given, the method is dispatched onto its ``COMMANDS`` and
                ``EVENTS`` matchers.
        """
        matchers: tuple[Matcher, ...] = ()
        if package is not None:
            try:
                matchers = self._matchers(package)
            except ImportError as exc:
                return ServiceResult(
                    ok=False,
                    op="parse_message",
                    error=ServiceError(
                        code="PACKAGE_NOT_FOUND",
                        message=f"cannot import bindings package '{package}': {exc}",
                        detail={"package": package},
                    ),
                )

        try:
            incoming = Incoming.parse(payload)
        except IncomingMessageError as exc:
            return _protocol_failure(exc.error, exc.id)

        data: dict[str, Any] = incoming.model_dump()
        if not matchers:
            return ServiceResult(ok=True, op="parse_message", data=data)

        with trace_span("dispatch"):
            try:
                value = first_match(incoming.method, incoming.params, *matchers)
            except CdpBindError as exc:
                logger.debug("Dispatch of %s failed: %s", incoming.method, exc)
                return _protocol_failure(error_reply(exc), incoming.id)

        if isinstance(value, Unrecognized):
            return _protocol_failure(error_reply(value), incoming.id)

        data["type"] = type(value).__qualname__
        if isinstance(value, ProtocolModel):
            data["value"] = value.model_dump(mode="json", by_alias=True)
            data["borrows"] = type(value).BORROWS
        return ServiceResult(ok=True, op="parse_message", data=data)
