"""
Deterministic front-matter encoder.

Renders a value tree into the receipt dialect. Receipts are diffed and
audited as plain text, so the same tree always renders to the same bytes:
insertion order is kept, indentation is two spaces per level, and there is
no trailing newline.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Dict, Iterator, List

from .rules import (
    INDENT_STEP,
    KEY_DELIMITER,
    LITERAL_BLOCK,
    NULL_TOKEN,
    SEQUENCE_MARKER,
)
from .scalars import Value, is_quoted

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class EncodeError(TypeError):
    """Raised for values the dialect cannot represent."""


def encode(value: Value, indent_level: int = 0) -> str:
    return "\n".join(_render(value, indent_level, "$"))


def _pad(level: int) -> str:
    return " " * (INDENT_STEP * level)


def _is_multiline(value: object) -> bool:
    return isinstance(value, str) and _LINE_BREAK.search(value) is not None


def _is_empty_container(value: object) -> bool:
    return isinstance(value, (dict, list)) and not value


def _render(value: Value, level: int, path: str) -> Iterator[str]:
    if isinstance(value, dict):
        yield from _render_mapping(value, level, path)
    elif isinstance(value, list):
        yield from _render_sequence(value, level, path)
    elif _is_multiline(value):
        yield _pad(level) + LITERAL_BLOCK
        yield from _literal_lines(value, level + 1)
    else:
        yield _pad(level) + _token(value, path, in_list=False)


def _render_mapping(obj: Dict[str, Value], level: int, path: str) -> Iterator[str]:
    pad = _pad(level)
    for key, item in obj.items():
        if not isinstance(key, str):
            raise EncodeError(
                f"mapping keys must be str, got {type(key).__name__} at {path}"
            )
        if not _is_plain_key(key):
            raise EncodeError(f"mapping key {key!r} cannot be written as a key line at {path}")
        item_path = f"{path}.{key}"

        if item is None or _is_empty_container(item):
            yield f"{pad}{key}:"
        elif isinstance(item, (dict, list)):
            yield f"{pad}{key}:"
            yield from _render(item, level + 1, item_path)
        elif _is_multiline(item):
            yield f"{pad}{key}{KEY_DELIMITER}{LITERAL_BLOCK}"
            yield from _literal_lines(item, level + 1)
        else:
            yield f"{pad}{key}{KEY_DELIMITER}{_token(item, item_path, in_list=False)}"


def _is_plain_key(key: str) -> bool:
    return (
        key != ""
        and key == key.strip()
        and _LINE_BREAK.search(key) is None
        and KEY_DELIMITER not in key
        and not key.endswith(":")
        and not key.startswith(SEQUENCE_MARKER)
    )


def _render_sequence(seq: List[Value], level: int, path: str) -> Iterator[str]:
    pad = _pad(level)
    for index, item in enumerate(seq):
        item_path = f"{path}[{index}]"

        if item is None or _is_empty_container(item):
            yield f"{pad}{SEQUENCE_MARKER}{NULL_TOKEN}"
        elif isinstance(item, (dict, list)):
            # the body sits one level deeper; the marker takes the place of
            # the first line's last indent step
            body = list(_render(item, level + 1, item_path))
            yield pad + SEQUENCE_MARKER + body[0][len(_pad(level + 1)):]
            yield from body[1:]
        elif _is_multiline(item):
            yield f"{pad}{SEQUENCE_MARKER}{LITERAL_BLOCK}"
            yield from _literal_lines(item, level + 1)
        else:
            yield f"{pad}{SEQUENCE_MARKER}{_token(item, item_path, in_list=True)}"


def _literal_lines(text: str, level: int) -> Iterator[str]:
    pad = _pad(level)
    for line in _LINE_BREAK.split(text):
        yield pad + line if line else ""


def _token(value: Value, path: str, *, in_list: bool) -> str:
    if value is None:
        return NULL_TOKEN
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value, path)
    if isinstance(value, str):
        return f'"{value}"' if _needs_quotes(value, in_list) else value
    raise EncodeError(
        f"encode does not support value type {type(value).__name__} at {path}"
    )


def _format_float(value: float, path: str) -> str:
    if not math.isfinite(value):
        raise EncodeError(f"cannot encode non-finite number {value!r} at {path}")
    text = repr(value)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    if "." not in text:
        text += ".0"
    return text


def _needs_quotes(text: str, in_list: bool) -> bool:
    """
    True when bare text would decode to a different string.

    Text spelling a literal (true, 42, null) decodes as that literal with or
    without quotes, so it is left bare.
    """
    if text == "" or text != text.strip() or text == LITERAL_BLOCK or is_quoted(text):
        return True
    if in_list:
        return (
            KEY_DELIMITER in text
            or text.endswith(":")
            or text.startswith(SEQUENCE_MARKER)
        )
    return False

