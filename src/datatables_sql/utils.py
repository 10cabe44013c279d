import math
from typing import Any, Mapping, Optional, Union

# Largest integer a JSON consumer using IEEE-754 doubles can represent exactly.
MAX_SAFE_INTEGER = 2**53 - 1

Number = Union[int, float]


def to_number(value: Any) -> Optional[Number]:
    """
    Loosely parse a request value as a number.

    Accepts ints, floats and numeric strings (surrounding whitespace allowed).
    Integral values come back as int. Booleans, NaN, infinities and anything
    unparseable return None.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    if number.is_integer():
        return int(number)
    return number


def is_number(value: Any) -> bool:
    return to_number(value) is not None


def to_int(value: Any) -> Optional[int]:
    number = to_number(value)
    if isinstance(number, int):
        return number
    return None


def escape_like(value: str, escape_char: str = "\\") -> str:
    """
    Escape LIKE/ILIKE metacharacters so the value matches literally.

    The escape character itself is escaped first, then the ``%`` and ``_``
    wildcards. Pair with ``ESCAPE '<escape_char>'`` in the predicate.
    """
    return (
        value.replace(escape_char, escape_char + escape_char)
        .replace("%", escape_char + "%")
        .replace("_", escape_char + "_")
    )


def to_json_number(value: Any) -> Union[int, str]:
    """Return ints outside the double-safe range as decimal strings."""
    value = int(value)
    if -MAX_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER:
        return value
    return str(value)


def as_index_map(value: Any) -> Optional[Mapping[Any, Any]]:
    """
    Normalise a map-shaped request value.

    Bracket-notation query strings produce dicts keyed by numeric strings,
    while JSON bodies often send arrays. Arrays are treated as maps keyed by
    position. Returns None for anything else.
    """
    if isinstance(value, Mapping):
        return value
    if isinstance(value, (list, tuple)):
        return {str(index): item for index, item in enumerate(value)}
    return None
