"""Turn attribute names and values into valid DOT tokens."""

from __future__ import annotations

import re
from collections.abc import Mapping

AttrValue = str | bool | int | float

RESERVED_WORDS = frozenset({"node", "edge", "graph", "digraph", "subgraph", "strict"})
HTML_LABEL_KEYS = frozenset({"label", "headlabel", "taillabel"})

_BARE_ID = re.compile(r"[a-zA-Z_][a-zA-Z_0-9]*|-?(\.[0-9]+|[0-9]+(\.[0-9]*)?)")
_LINE_BREAK = re.compile(r"\r\n|\n|\r")


def escape(value: AttrValue, html: bool = False) -> str:
    """Return ``value`` as an ID token: bare, quoted, or as an HTML-like ``<...>`` label."""
    if isinstance(value, bool):
        return "true" if value else "false"

    text = str(value)
    if text.lower() in RESERVED_WORDS:
        return f'"{text}"'

    if html and ("</" in text or "/>" in text):
        return f"<{text}>"

    if _BARE_ID.fullmatch(text):
        return text

    quoted = _LINE_BREAK.sub(r"\\n", text).replace('"', '\\"')
    return f'"{quoted}"'


def escape_attributes(attributes: Mapping[str, AttrValue]) -> dict[str, str]:
    escaped: dict[str, str] = {}
    for key, value in attributes.items():
        if key in HTML_LABEL_KEYS:
            escaped[key] = escape(value, html=True)
        else:
            escaped[escape(key)] = escape(value)
    return escaped
