# src/tctree/protocol/escaping.py

"""
Attribute value escaping for ##teamcity service messages.

Each reserved character is replaced by a two-character sequence: the escape
character ``|`` followed by a substitute. Values with nothing to escape are
returned as the very same object.
"""

from tctree.exceptions import ProtocolError

ESCAPE_CHAR = "|"


def _build_tables() -> tuple[dict[str, str], dict[str, str]]:
    escape_map: dict[str, str] = {}

    def add_mapping(from_char: str, to_char: str) -> None:
        if len(from_char) != 1 or len(to_char) != 1:
            raise ValueError("Escape mappings must map single characters")
        if from_char in escape_map:
            raise ValueError(f"Duplicate escape mapping for {from_char!r}")
        escape_map[from_char] = to_char

    add_mapping("\n", "n")
    add_mapping("\r", "r")
    add_mapping("\u0085", "x")
    add_mapping("\u2028", "l")
    add_mapping("\u2029", "p")
    add_mapping("|", "|")
    add_mapping("'", "'")
    add_mapping("[", "[")
    add_mapping("]", "]")

    unescape_map = {sub: char for char, sub in escape_map.items()}
    return escape_map, unescape_map


_ESCAPE_MAP, _UNESCAPE_MAP = _build_tables()
_ESCAPABLE = frozenset(_ESCAPE_MAP)


def is_escaping_needed(value: str) -> bool:
    """Return True if ``value`` holds at least one reserved character."""
    return not _ESCAPABLE.isdisjoint(value)


def escape_attribute_value(value: str) -> str:
    """Escape ``value`` for use inside a quoted service-message attribute."""
    if not is_escaping_needed(value):
        return value
    return "".join(
        ESCAPE_CHAR + _ESCAPE_MAP[char] if char in _ESCAPABLE else char for char in value
    )


def unescape_attribute_value(value: str) -> str:
    """
    Decode a value produced by :func:`escape_attribute_value`.

    Raises:
        ProtocolError: on a dangling escape character or an unknown sequence.
    """
    if ESCAPE_CHAR not in value:
        return value

    result: list[str] = []
    chars = iter(value)
    for char in chars:
        if char != ESCAPE_CHAR:
            result.append(char)
            continue
        code = next(chars, None)
        if code is None:
            raise ProtocolError(f"Dangling escape character at end of value {value!r}")
        try:
            result.append(_UNESCAPE_MAP[code])
        except KeyError:
            raise ProtocolError(f"Unknown escape sequence '|{code}' in value {value!r}") from None
    return "".join(result)


# 🔼⚙️
