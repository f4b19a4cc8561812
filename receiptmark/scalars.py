from __future__ import annotations

import re
from typing import Dict, List, Union

from .rules import NULL_TOKEN

Value = Union[None, bool, int, float, str, List["Value"], Dict[str, "Value"]]

_INTEGER = re.compile(r"^-?[0-9]+$")
_DECIMAL = re.compile(r"^-?[0-9]+\.[0-9]+$")


def is_quoted(token: str) -> bool:
    return len(token) >= 2 and token[0] == token[-1] and token[0] in ("'", '"')


def coerce_scalar(token: str) -> Value:
    """
    Turn a raw token into a typed scalar.

    Rules (first match wins):
    - one layer of matching single or double quotes is stripped, no escapes
    - "" or null -> None
    - true / false -> bool
    - integral digits -> int, digits.digits -> float
    - anything else is kept verbatim
    """
    s = token.strip()
    if is_quoted(s):
        s = s[1:-1]

    if s == "" or s == NULL_TOKEN:
        return None
    if s == "true":
        return True
    if s == "false":
        return False
    if _INTEGER.match(s):
        return int(s)
    if _DECIMAL.match(s):
        return float(s)
    return s
