"""String helpers shared by resources, actions and groups."""
from __future__ import annotations

import re

_CAMEL_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])|([a-z\d])([A-Z])")
_NON_PARAM_CHARS = re.compile(r"[^a-z0-9]+")


def humanize_string(value: str) -> str:
    """Turn an identifier into a human-readable label.

    >>> humanize_string("ShipOrder")
    'Ship Order'
    >>> humanize_string("APIKey")
    'API Key'
    >>> humanize_string("mark_as_paid")
    'Mark As Paid'
    """
    text = value.replace("_", " ")
    human: list[str] = []
    for i, char in enumerate(text):
        if i > 0 and char.isupper():
            prev = text[i - 1]
            nxt = text[i + 1] if i + 1 < len(text) else ""
            if (not prev.isupper() and prev != " ") or (
                nxt and not nxt.isupper() and nxt != " " and prev != " "
            ):
                human.append(" ")
        human.append(char)
    return " ".join(word[:1].upper() + word[1:] for word in "".join(human).split(" ") if word)


def _underscore(value: str) -> str:
    return _CAMEL_BOUNDARY.sub(
        lambda m: f"{m.group(1)}_{m.group(2)}" if m.group(1) else f"{m.group(3)}_{m.group(4)}",
        value,
    ).lower()


def to_param_string(value: str) -> str:
    """Normalise a name into its URL parameter form.

    >>> to_param_string("ShipOrder")
    'ship-order'
    >>> to_param_string("Mark as Paid")
    'mark-as-paid'
    """
    return _NON_PARAM_CHARS.sub("-", _underscore(value.strip())).strip("-")


def to_array(value: object) -> list[str]:
    """Coerce a form value into a list of non-empty strings.

    Accepts a list/tuple of values or a comma-separated string.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        items = [str(v).strip() for v in value]
    else:
        items = [part.strip() for part in str(value).split(",")]
    return [item for item in items if item]
