"""Pydantic base classes subclassed by generated bindings.

Generated records are frozen, accept their wire (camelCase) or Python
(snake_case) field names, ignore unknown keys, and omit absent optional
fields when serialized.
"""

from __future__ import annotations

import functools
import inspect
from types import ModuleType
from typing import Annotated, Any, ClassVar, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializationInfo,
    SerializerFunctionWrapHandler,
    model_serializer,
)

from cdpbind.runtime.dispatch import Kind, Matcher, Unrecognized, Variant, compile_variants

# 32-bit signed integer, the protocol's ``integer``.
Int32 = Annotated[int, Field(ge=-(2**31), le=2**31 - 1)]


class ProtocolModel(BaseModel):
    """Base of every generated record."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        defer_build=True,
        protected_namespaces=(),
    )

    # True when the record (transitively) holds string data from the message.
    BORROWS: ClassVar[bool] = False

    @model_serializer(mode="wrap")
    def _omit_absent(self, handler: SerializerFunctionWrapHandler, info: SerializationInfo) -> Any:
        data = handler(self)
        if not isinstance(data, dict):
            return data
        for name, field in type(self).model_fields.items():
            if field.is_required() or self.__dict__.get(name) is not None:
                continue
            key = (field.serialization_alias or field.alias or name) if info.by_alias else name
            data.pop(key, None)
        return data


class Empty(ProtocolModel):
    """The empty parameter object: serializes as ``{}``, accepts any object."""


class CommandResponse(ProtocolModel):
    """Base of ``{Method}Response`` classes."""

    Command: ClassVar[type[CommandRequest]]

    def to_result(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class CommandRequest(ProtocolModel):
    """Base of ``{Method}Command`` classes."""

    COMMAND_NAME: ClassVar[str]
    Response: ClassVar[type[CommandResponse]]

    @classmethod
    def deserialize_command(cls, name: str, params: Any) -> Self | Unrecognized:
        """Parse *params* if *name* is this command's name.

        Returns :class:`Unrecognized` for any other name.
        """
        return _single_variant(cls, Kind.COMMAND).dispatch(name, params)

    def command_name(self) -> str:
        return self.COMMAND_NAME

    def to_params(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class EventRequest(ProtocolModel):
    """Base of ``{Method}Event`` classes."""

    EVENT_NAME: ClassVar[str]

    @classmethod
    def deserialize_event(cls, name: str, params: Any) -> Self | Unrecognized:
        return _single_variant(cls, Kind.EVENT).dispatch(name, params)

    def event_name(self) -> str:
        return self.EVENT_NAME

    def to_params(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


@functools.cache
def _single_variant(cls: type[ProtocolModel], kind: Kind) -> Matcher:
    return compile_variants(kind, [Variant(cls.__name__, (cls,))])


def rebuild_models(*modules: ModuleType) -> int:
    """Build every record declared in *modules*; return how many were built.

    Generated modules reference each other by name, so records are built
    only once all domain modules are imported.
    """
    built = 0
    for module in modules:
        for _, obj in inspect.getmembers(module, inspect.isclass):
            if issubclass(obj, ProtocolModel) and obj.__module__ == module.__name__:
                obj.model_rebuild(force=True)
                built += 1
    return built
