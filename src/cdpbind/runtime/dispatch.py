"""Name -> variant dispatch for commands and events.

A variant set is an ordered list of :class:`Variant` descriptors. Each is
classified by its number of fields:

- 0 fields: matched by an explicit name; params must be an object.
- 1 field: matched by an explicit name, or by the ``COMMAND_NAME`` /
  ``EVENT_NAME`` of the field's type; params deserialize into that type.
- 2 fields: the wildcard. Takes any name (converted through the first
  field's type) and the raw params (deserialized into the second field's
  type). At most one, and it must be last.

:func:`compile_variants` checks these rules once and returns a
:class:`Matcher`. Matching is first-match in declaration order. A name
nothing matches comes back as :class:`Unrecognized`, so callers can try
several sets in turn.

Matchers hold no mutable state and are safe to share between threads.
"""

from __future__ import annotations

import dataclasses
import logging
import typing
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, ClassVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from cdpbind.errors import DispatchDeclarationError, InvalidParamsError

logger = logging.getLogger(__name__)

_NAME_ATTR = "__cdp_name__"


class Kind(StrEnum):
    COMMAND = "command"
    EVENT = "event"

    @property
    def name_attr(self) -> str:
        """Class constant carrying the wire name on generated types."""
        return "COMMAND_NAME" if self is Kind.COMMAND else "EVENT_NAME"


@dataclass(frozen=True)
class Variant:
    """One declared variant.

    Attributes:
        ident: Variant name, used in error messages.
        field_types: Types of the variant's fields, in order.
        name: Explicit wire name, if declared.
        build: Called with the deserialized field values to produce the
            result. Defaults to returning the single field value (or the
            field tuple for wildcards, ``None`` for 0-field variants).
    """

    ident: str
    field_types: tuple[Any, ...]
    name: str | None = None
    build: Callable[..., Any] | None = None

    @property
    def arity(self) -> int:
        return len(self.field_types)


@dataclass(frozen=True)
class Unrecognized:
    """No variant of the set claims this name; the input is handed back."""

    name: str
    params: Any


@dataclass(frozen=True)
class Matched:
    """A variant claimed the name; *value* is what it built."""

    variant: Variant
    value: Any


def _default_build(*values: Any) -> Any:
    if not values:
        return None
    if len(values) == 1:
        return values[0]
    return values


def _validator_for(tp: Any) -> Callable[[Any], Any]:
    if isinstance(tp, type) and issubclass(tp, BaseModel):
        return tp.model_validate
    if tp is Any:
        return lambda value: value
    adapter: TypeAdapter[Any] | None = None

    def validate(value: Any) -> Any:
        nonlocal adapter
        if adapter is None:
            adapter = TypeAdapter(tp)
        return adapter.validate_python(value)

    return validate


def _name_converter(tp: Any) -> Callable[[str], Any]:
    if tp is str or tp is Any:
        return lambda name: name
    return tp


_OBJECT = TypeAdapter(dict[str, Any])


@dataclass(frozen=True)
class _Entry:
    variant: Variant
    key: str | None
    fields: tuple[Callable[[Any], Any], ...]


class Matcher:
    """Compiled variant set. Build with :func:`compile_variants`."""

    def __init__(self, kind: Kind, entries: tuple[_Entry, ...], wildcard: _Entry | None) -> None:
        self.kind = kind
        self._entries = entries
        self._by_key = {entry.key: entry for entry in entries}
        self._wildcard = wildcard

    @property
    def names(self) -> tuple[str, ...]:
        """Wire names of the typed variants, in declaration order."""
        return tuple(entry.key for entry in self._entries if entry.key is not None)

    @property
    def has_wildcard(self) -> bool:
        return self._wildcard is not None

    def __contains__(self, name: object) -> bool:
        return name in self._by_key

    def match(self, name: str, params: Any) -> Matched | Unrecognized:
        """Deserialize ``(name, params)`` into the first matching variant.

        Typed variants are tried in declaration order, then the wildcard.

        Raises:
            InvalidParamsError: A variant matched but *params* did not fit it.
        """
        entry = self._by_key.get(name)
        if entry is not None:
            return Matched(entry.variant, self._build(entry, name, params))
        if self._wildcard is not None:
            wildcard = self._wildcard
            return Matched(wildcard.variant, self._build_wildcard(wildcard, name, params))
        return Unrecognized(name, params)

    def dispatch(self, name: str, params: Any) -> Any:
        """Like :meth:`match`, but return the built value itself.

        Returns:
            The built variant value, or :class:`Unrecognized` when no
            variant matches and there is no wildcard.
        """
        result = self.match(name, params)
        if isinstance(result, Matched):
            return result.value
        return result

    def _build(self, entry: _Entry, name: str, params: Any) -> Any:
        build = entry.variant.build or _default_build
        try:
            if not entry.fields:
                _OBJECT.validate_python(params)
                return build()
            return build(entry.fields[0](params))
        except ValidationError as exc:
            raise InvalidParamsError(name, str(exc), params=params) from exc

    def _build_wildcard(self, entry: _Entry, name: str, params: Any) -> Any:
        build = entry.variant.build or _default_build
        to_name, to_params = entry.fields
        try:
            return build(to_name(name), to_params(params))
        except ValidationError as exc:
            raise InvalidParamsError(name, str(exc), params=params) from exc

    def __repr__(self) -> str:
        wildcard = ", wildcard" if self._wildcard else ""
        return f"Matcher({self.kind}, {list(self.names)!r}{wildcard})"


def compile_variants(kind: Kind, variants: Sequence[Variant]) -> Matcher:
    """Check a variant set's declaration rules and build its matcher.

    Raises:
        DispatchDeclarationError: On a 0-field variant without a name, a
            1-field variant with no name source, a wildcard not in last
            position, a variant with 3+ fields, or two variants sharing a
            wire name.
    """
    entries: list[_Entry] = []
    wildcard: _Entry | None = None
    seen: dict[str, str] = {}

    for variant in variants:
        if wildcard is not None:
            msg = f"any 'wildcard' {kind} variant (with 2 fields) must come last in the enumeration"
            raise DispatchDeclarationError(msg)

        match variant.arity:
            case 0:
                if variant.name is None:
                    msg = (
                        f"unit variant `{variant.ident}` is missing a @cdp_name(\"...\") "
                        f"decorator to specify the {kind} name"
                    )
                    raise DispatchDeclarationError(msg)
                entry = _Entry(variant, variant.name, ())
            case 1:
                (field_type,) = variant.field_types
                key = variant.name or getattr(field_type, kind.name_attr, None)
                if not isinstance(key, str):
                    msg = (
                        f"variant `{variant.ident}` needs a @cdp_name(\"...\") decorator or a "
                        f"field type exposing {kind.name_attr}"
                    )
                    raise DispatchDeclarationError(msg)
                entry = _Entry(variant, key, (_validator_for(field_type),))
            case 2:
                name_type, params_type = variant.field_types
                wildcard = _Entry(
                    variant, None, (_name_converter(name_type), _validator_for(params_type))
                )
                continue
            case n:
                msg = f"expected 0, 1, or 2 fields on {variant.ident}, but found {n}"
                raise DispatchDeclarationError(msg)

        if entry.key in seen:
            msg = (
                f"variants `{seen[entry.key]}` and `{variant.ident}` both match {kind} "
                f"'{entry.key}'"
            )
            raise DispatchDeclarationError(msg)
        seen[entry.key] = variant.ident
        entries.append(entry)

    return Matcher(kind, tuple(entries), wildcard)


def matcher_for(kind: Kind, classes: Iterable[type]) -> Matcher:
    """Matcher over generated request classes, keyed by their wire names."""
    return compile_variants(kind, [Variant(cls.__name__, (cls,)) for cls in classes])


def first_match(name: str, params: Any, *matchers: Matcher) -> Any:
    """Try each matcher in turn; :class:`Unrecognized` if none claims *name*."""
    for matcher in matchers:
        result = matcher.dispatch(name, params)
        if not isinstance(result, Unrecognized):
            return result
    return Unrecognized(name, params)


# --- Declarative variant sets ---


def cdp_name[T: type](name: str) -> Callable[[T], T]:
    """Attach an explicit wire name to a variant class.

    Raises:
        DispatchDeclarationError: If the class already carries one.
    """

    def decorate(cls: T) -> T:
        if _NAME_ATTR in vars(cls):
            msg = f"multiple `cdp_name` decorators attached to `{cls.__qualname__}`"
            raise DispatchDeclarationError(msg)
        setattr(cls, _NAME_ATTR, name)
        return cls

    return decorate


def _variant_of(cls: type) -> Variant:
    hints = typing.get_type_hints(cls)
    field_types = tuple(hints[f.name] for f in dataclasses.fields(cls))
    return Variant(
        ident=cls.__qualname__,
        field_types=field_types,
        name=vars(cls).get(_NAME_ATTR),
        build=cls,
    )


class _VariantSet:
    _kind: ClassVar[Kind]
    _matcher: ClassVar[Matcher]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        variants = [
            _variant_of(value)
            for value in vars(cls).values()
            if isinstance(value, type) and dataclasses.is_dataclass(value)
        ]
        cls._matcher = compile_variants(cls._kind, variants)
        logger.debug("Compiled %s %s set %s", cls.__qualname__, cls._kind, cls._matcher)

    @classmethod
    def matcher(cls) -> Matcher:
        return cls._matcher


class CommandSet(_VariantSet):
    """Declare a closed set of supported commands.

    Each nested dataclass is a variant, tried in declaration order::

        class Supported(CommandSet):
            @cdp_name("Page.enable")
            @dataclass(frozen=True)
            class Enable:
                pass

            @dataclass(frozen=True)
            class Navigate:
                params: page.NavigateCommand

            @dataclass(frozen=True)
            class Other:
                name: str
                params: dict[str, Any]
    """

    _kind = Kind.COMMAND

    @classmethod
    def deserialize_command(cls, name: str, params: Any) -> Any:
        return cls._matcher.dispatch(name, params)


class EventSet(_VariantSet):
    """Declare a closed set of supported events; see :class:`CommandSet`."""

    _kind = Kind.EVENT

    @classmethod
    def deserialize_event(cls, name: str, params: Any) -> Any:
        return cls._matcher.dispatch(name, params)
