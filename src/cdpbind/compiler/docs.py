"""Documentation text for generated declarations and the package index."""

from __future__ import annotations

from cdpbind.schema.deprecation import DeprecationStatus, NodeMeta, escape_for_markdown


def deprecation_message(status: DeprecationStatus) -> str | None:
    """Text for a ``@deprecated(...)`` decorator, or None when not deprecated."""
    if not status.is_deprecated:
        return None
    return status.warning or "Deprecated."


def docstring(meta: NodeMeta, description: str | None, note: str | None = None) -> str:
    """Docstring body for a generated declaration.

    The description is left out when the node carries its own deprecation
    warning, since the warning already quotes it.
    """
    parts: list[str] = []
    head = "[Experimental]" if meta.experimental else ""
    if description and not meta.deprecation.has_own_warning:
        head = f"{head} {description}".strip()
    if head:
        parts.append(head)
    if note:
        parts.append(note)
    if meta.deprecated:
        warning = meta.deprecation.warning
        parts.append(f"Deprecated: {warning}" if warning else "Deprecated.")
    return "\n\n".join(parts)


def index_entry(name: str, link: str, meta: NodeMeta, description: str | None) -> str:
    """One markdown bullet of the per-domain index."""
    badges = ""
    if meta.experimental:
        badges += " **Experimental**"
    if meta.deprecated:
        warning = meta.deprecation.warning
        if warning is None:
            badges += " **[Deprecated]**"
        else:
            badges += f"\n  \n  *Deprecated: {warning}*"

    desc = ""
    if description and not meta.deprecation.has_own_warning:
        lines = description.split("\n")
        desc = "\n" + "".join(f"\n  {escape_for_markdown(line)}" for line in lines)

    return f"- [`{name}`]({link}){badges}{desc}\n"


def method_note(
    package: str,
    module: str,
    qualified: str,
    kind: str,
    request: str,
    response: str | None,
    *,
    handlers: tuple[str, ...] = (),
    redirect: str | None = None,
) -> str:
    title = "Command" if kind == "command" else "Event"
    lines = [
        f"{title} `{qualified}`.",
        "",
        f"Domain module: `{package}.{module}`",
        f"{title} class: `{package}.{module}.{request}`",
    ]
    if response is not None:
        lines.append(f"Response class: `{package}.{module}.{response}`")
    if handlers:
        lines.append(f"Handled by: {', '.join(handlers)}")
    if redirect:
        lines.append(f"Redirected to `{redirect}`.")
    return "\n".join(lines)


def field_usage_note(package: str, module: str, parent: str, field: str) -> str:
    return f"Used in the type of `{package}.{module}.{parent}.{field}`."
