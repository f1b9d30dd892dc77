# src/tctree/protocol/messages.py

"""
Formatting of single ##teamcity service-message lines.
"""

from collections.abc import Iterable, Mapping

from tctree.protocol.escaping import escape_attribute_value

MESSAGE_PREFIX = "##teamcity["
MESSAGE_SUFFIX = "]"


def format_value(value: object) -> str:
    """Render an attribute value; booleans use the protocol's lowercase form."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return escape_attribute_value(str(value))


def format_message(
    command: str,
    attributes: Mapping[str, object | None] | Iterable[tuple[str, object | None]] = (),
) -> str:
    """
    Build one protocol line: ``##teamcity[<command> key='value' ...]``.

    Attributes whose value is ``None`` are left out; insertion order is kept.
    """
    items = attributes.items() if isinstance(attributes, Mapping) else attributes
    parts = [command]
    parts.extend(f"{key}='{format_value(value)}'" for key, value in items if value is not None)
    return MESSAGE_PREFIX + " ".join(parts) + MESSAGE_SUFFIX


# 🔼⚙️
