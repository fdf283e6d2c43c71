"""Identifier conversion for generated code.

Protocol names come in mixed styles (``DOMStorage``, ``getHTML``,
``mouse-pressed``, ``-0``). Two canonical forms are derived from them:

- member form (:func:`snake_case`): record fields and domain modules
- type form (:func:`pascal_case`): classes and enums

The type form is always derived from the member form, so ``DOMStorage``
becomes ``dom_storage`` and then ``DomStorage``.
"""

from __future__ import annotations

import keyword
import re
from typing import NamedTuple

_LEADING_DASH_RE = re.compile(r"^-")
_NON_ALNUM_RE = re.compile(r"[^0-9A-Za-z]+")
_ACRONYM_RE = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_RE = re.compile(r"([a-z0-9])([A-Z])")
_DOMAIN_REF_RE = re.compile(r"^([A-Za-z0-9]+)\.([A-Za-z0-9]+)$")

# Member names the generated code cannot use as written.
_RESERVED_SUBSTITUTIONS = {
    "type": "ty",
    "override": "overridden",
}

_ENUM_RESERVED = frozenset({"ENUM_VALUES", "STR_VALUES"})


class QualifiedName(NamedTuple):
    """A generated declaration's identity: ``(module, name)``."""

    module: str
    name: str

    def __str__(self) -> str:
        return f"{self.module}.{self.name}"


def replace_unsafe_chars(name: str) -> str:
    """Replace characters that cannot start an identifier (leading ``-``)."""
    return _LEADING_DASH_RE.sub("Negative", name)


def _words(name: str) -> str:
    text = _NON_ALNUM_RE.sub("_", replace_unsafe_chars(name))
    text = _ACRONYM_RE.sub(r"\1_\2", text)
    text = _WORD_RE.sub(r"\1_\2", text)
    return re.sub(r"_+", "_", text).strip("_").lower()


def snake_case(name: str) -> str:
    """Member-name form, with reserved-word substitutions applied."""
    words = _words(name)
    words = _RESERVED_SUBSTITUTIONS.get(words, words)
    if keyword.iskeyword(words) or keyword.issoftkeyword(words):
        words = f"{words}_"
    return words


def pascal_case(name: str) -> str:
    """Type-name form."""
    return "".join(part[:1].upper() + part[1:] for part in _words(name).split("_"))


def module_name(domain: str) -> str:
    """Python module name for a domain (``DOMStorage`` -> ``dom_storage``)."""
    return snake_case(domain)


def method_class_name(method: str, kind: str) -> str:
    """Request class name: ``navigate`` -> ``NavigateCommand`` / ``NavigateEvent``."""
    suffix = "Command" if kind == "command" else "Event"
    return f"{pascal_case(method)}{suffix}"


def response_class_name(method: str) -> str:
    return f"{pascal_case(method)}Response"


def enum_member_names(values: tuple[str, ...]) -> tuple[str, ...]:
    """Upper-snake member names for enum wire values, one per value.

    Collisions (``foo-bar`` vs ``fooBar``) get a numeric suffix so every
    wire value keeps its own member.
    """
    seen: set[str] = set()
    names: list[str] = []
    for value in values:
        base = _words(value).upper() or "EMPTY"
        if base[0].isdigit():
            base = f"V_{base}"
        if base in _ENUM_RESERVED or keyword.iskeyword(base):
            base = f"{base}_"
        candidate = base
        counter = 2
        while candidate in seen:
            candidate = f"{base}_{counter}"
            counter += 1
        seen.add(candidate)
        names.append(candidate)
    return tuple(names)


def split_reference(domain: str, target: str) -> tuple[str, str]:
    """Split a ``$ref`` into ``(domain, type)``.

    ``Network.LoaderId`` resolves in ``Network``; a bare ``LoaderId`` resolves
    in the referencing *domain*.
    """
    match = _DOMAIN_REF_RE.match(target)
    if match:
        return match.group(1), match.group(2)
    return domain, target
