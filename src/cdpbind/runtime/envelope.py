"""Wire framing of protocol messages and the fixed error taxonomy.

Incoming (client -> library)::

    {"id": <non-negative integer>, "method": "Domain.method", "params": {...}}

Outgoing (library -> client), one of::

    {"id": ..., "result": {...}}       CommandSuccess
    {"id": ..., "error": {...}}        CommandFailure
    {"error": {...}}                   GeneralFailure (no id known yet)
    {"method": ..., "params": {...}}   EventMessage
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Annotated, Any

from pydantic import Field, TypeAdapter

from cdpbind.errors import CdpBindError, InvalidParamsError
from cdpbind.runtime.dispatch import Unrecognized
from cdpbind.runtime.models import CommandRequest, CommandResponse, EventRequest, ProtocolModel

_MAX_ID = 2**64


class ErrorKind(IntEnum):
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    SERVER_ERROR = -32000

    @classmethod
    def from_code(cls, code: int) -> ErrorKind | OtherErrorKind:
        """Named kind for the six fixed codes, :class:`OtherErrorKind` otherwise."""
        try:
            return cls(code)
        except ValueError:
            return OtherErrorKind(code)


@dataclass(frozen=True)
class OtherErrorKind:
    """An error code outside the fixed table, carried through unchanged."""

    code: int

    def __int__(self) -> int:
        return self.code


class ProtocolError(ProtocolModel):
    """The ``error`` object of an outgoing message."""

    code: int
    message: str
    data: Any = None

    @property
    def kind(self) -> ErrorKind | OtherErrorKind:
        return ErrorKind.from_code(self.code)

    def __str__(self) -> str:
        text = f"cdp error (code {self.code}): {self.message}"
        if self.data is not None:
            text = f"{text}; {self.data}"
        return text

    @classmethod
    def invalid_message(cls) -> ProtocolError:
        return cls(code=ErrorKind.PARSE_ERROR.value, message="Message must be a valid JSON")

    @classmethod
    def must_be_object(cls) -> ProtocolError:
        return cls(code=ErrorKind.INVALID_REQUEST.value, message="Message must be an object")

    @classmethod
    def must_have_id(cls) -> ProtocolError:
        return cls(
            code=ErrorKind.INVALID_REQUEST.value, message="Message must have integer 'id' porperty"
        )

    @classmethod
    def must_have_method(cls) -> ProtocolError:
        return cls(
            code=ErrorKind.INVALID_REQUEST.value,
            message="Message must have string 'method' porperty",
        )

    @classmethod
    def method_not_found(cls, method: str) -> ProtocolError:
        return cls(code=ErrorKind.METHOD_NOT_FOUND.value, message=f"'{method}' wasn't found")

    @classmethod
    def invalid_params(cls, detail: str) -> ProtocolError:
        return cls(code=ErrorKind.INVALID_PARAMS.value, message="Invalid parameters", data=detail)

    @classmethod
    def server_error(cls, message: str) -> ProtocolError:
        return cls(code=ErrorKind.SERVER_ERROR.value, message=message)

    @classmethod
    def internal_error(cls, detail: str) -> ProtocolError:
        return cls(code=ErrorKind.INTERNAL_ERROR.value, message="Internal error", data=detail)


class IncomingMessageError(CdpBindError):
    """An incoming message failed to parse.

    Attributes:
        error: The error to send back.
        id: The message id, when it was read before the failure.
    """

    def __init__(self, error: ProtocolError, id: int | None = None) -> None:
        self.error = error
        self.id = id
        super().__init__(str(error))

    def reply(self) -> str:
        return serialize_error(self.error, self.id)


# --- Incoming ---


class Incoming(ProtocolModel):
    id: int
    method: str
    params: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def parse(cls, payload: str | bytes) -> Incoming:
        """Parse one incoming message.

        Checks run in order and stop at the first failure: valid JSON, an
        object, an integer ``id``, a string ``method``. A missing or
        non-object ``params`` becomes ``{}``.

        Raises:
            IncomingMessageError: Carrying the error reply and, once read,
                the message id.
        """
        try:
            value = json.loads(payload)
        except (ValueError, RecursionError) as exc:
            raise IncomingMessageError(ProtocolError.invalid_message()) from exc

        if not isinstance(value, dict):
            raise IncomingMessageError(ProtocolError.must_be_object())

        id = value.get("id")
        if isinstance(id, bool) or not isinstance(id, int) or not 0 <= id < _MAX_ID:
            raise IncomingMessageError(ProtocolError.must_have_id())

        method = value.get("method")
        if not isinstance(method, str):
            raise IncomingMessageError(ProtocolError.must_have_method(), id)

        params = value.get("params")
        if not isinstance(params, dict):
            params = {}
        return cls(id=id, method=method, params=params)


def serialize_command(
    id: int, command: CommandRequest | str, params: Mapping[str, Any] | None = None
) -> str:
    """Frame a command for sending: either a request object or ``(name, params)``."""
    if isinstance(command, CommandRequest):
        method, params = command.COMMAND_NAME, command.to_params()
    else:
        method = command
    return _dumps({"id": id, "method": method, "params": dict(params or {})})


# --- Outgoing ---


class CommandSuccess(ProtocolModel):
    id: int
    result: dict[str, Any]


class CommandFailure(ProtocolModel):
    id: int
    error: ProtocolError


class GeneralFailure(ProtocolModel):
    error: ProtocolError


class EventMessage(ProtocolModel):
    method: str
    params: dict[str, Any] = Field(default_factory=dict)


Outgoing = Annotated[
    CommandSuccess | CommandFailure | GeneralFailure | EventMessage,
    Field(union_mode="left_to_right"),
]

_OUTGOING: TypeAdapter[Outgoing] = TypeAdapter(Outgoing)


def parse_outgoing(
    payload: str | bytes,
) -> CommandSuccess | CommandFailure | GeneralFailure | EventMessage:
    """Parse an outgoing message, trying the shapes in the order listed above."""
    return _OUTGOING.validate_json(payload)


def serialize_result(id: int, result: CommandResponse | Mapping[str, Any]) -> str:
    if isinstance(result, CommandResponse):
        result = result.to_result()
    return _dumps({"id": id, "result": dict(result)})


def serialize_error(error: ProtocolError, id: int | None = None) -> str:
    """Frame an error reply; without an id it is a general failure."""
    body = error.model_dump(mode="json")
    if id is None:
        return _dumps({"error": body})
    return _dumps({"id": id, "error": body})


def serialize_response(
    id: int, outcome: CommandResponse | Mapping[str, Any] | ProtocolError
) -> str:
    if isinstance(outcome, ProtocolError):
        return serialize_error(outcome, id)
    return serialize_result(id, outcome)


def serialize_event(event: EventRequest | str, params: Mapping[str, Any] | None = None) -> str:
    if isinstance(event, EventRequest):
        method, params = event.EVENT_NAME, event.to_params()
    else:
        method = event
    return _dumps({"method": method, "params": dict(params or {})})


def error_reply(exc: Exception | Unrecognized) -> ProtocolError:
    """Error to report for a failure while handling a message."""
    match exc:
        case IncomingMessageError():
            return exc.error
        case InvalidParamsError():
            return ProtocolError.invalid_params(exc.detail)
        case Unrecognized(name=name):
            return ProtocolError.method_not_found(name)
        case _:
            return ProtocolError.internal_error(str(exc))


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
