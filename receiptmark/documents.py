"""
Document text decoding.

Responsibilities:
- encoding detection for uploaded receipt documents
- newline normalization so the envelope and decoder see LF only
- reporting what was detected and changed
"""

from __future__ import annotations

import hashlib
from typing import Any, Dict, Tuple

from charset_normalizer import from_bytes


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def decode_document_bytes(raw: bytes) -> Tuple[str, Dict[str, Any]]:
    """
    Decode receipt document bytes to text.

    Rules:
    - Detect encoding best-effort via charset-normalizer.
    - If decode with the detected encoding fails, try UTF-8.
    - If that fails too, decode with replacement characters and report it.
    - A UTF-8 BOM is dropped; CRLF/CR become LF.
    """
    detected = None
    match = from_bytes(raw).best()
    if match is not None:
        detected = match.encoding

    decode_used = detected or "utf-8"
    # Decode BOM-prefixed UTF-8 with utf-8-sig so the BOM never reaches the envelope check.
    if raw.startswith(b"\xef\xbb\xbf") and (decode_used.lower().replace("-", "_") in ("utf_8", "utf8")):
        decode_used = "utf-8-sig"

    decode_fallback = False

    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        try:
            text = raw.decode("utf-8")
            decode_used = "utf-8"
            decode_fallback = True
        except UnicodeDecodeError:
            text = raw.decode("utf-8", errors="replace")
            decode_used = "utf-8"
            decode_fallback = True

    if text.startswith("\ufeff"):
        text = text[1:]

    nl_before = {
        "crlf": text.count("\r\n"),
        "cr": text.count("\r") - text.count("\r\n"),
        "lf": text.count("\n"),
    }

    text = text.replace("\r\n", "\n").replace("\r", "\n")

    report = {
        "sha256": sha256_hex(raw),
        "encoding": {
            "detected": detected,
            "decode_used": decode_used,
            "decode_fallback": decode_fallback,
        },
        "newlines": {
            "policy": "lf",
            "before": nl_before,
            "changed": (nl_before["crlf"] > 0) or (nl_before["cr"] > 0),
        },
    }
    return text, report
