"""
Front-matter envelope handling.

A receipt document opens with a block fenced by two lines that hold only the
delimiter:

    ---
    <front matter>
    ---
    <narrative body>
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from .rules import ENVELOPE_DELIMITER

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def split_document(document_text: str) -> Tuple[Optional[str], str]:
    """
    Split a document into (front matter, body).

    The front matter is the text strictly between the first two delimiter
    lines. Without a well-formed pair the front matter is None and the body
    is the whole document.
    """
    lines = _LINE_BREAK.split(document_text)
    fences = [i for i, line in enumerate(lines) if line == ENVELOPE_DELIMITER][:2]
    if len(fences) < 2:
        return None, document_text

    start, end = fences
    markup = "\n".join(lines[start + 1:end])
    body = "\n".join(lines[end + 1:])
    return markup, body


def extract_envelope(document_text: str) -> Optional[str]:
    return split_document(document_text)[0]


def wrap_envelope(markup: str, body: str = "") -> str:
    return f"{ENVELOPE_DELIMITER}\n{markup}\n{ENVELOPE_DELIMITER}\n{body}"
