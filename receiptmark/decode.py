"""
Front-matter decoder.

Turns the receipt dialect (an indentation-based key/value notation) into a
tree of plain Python values.

Supports:
  key: value
  key:
    sub: value
  list:
    - item
    - key: value
      another: value
  narrative: |-
    literal block lines

Notes:
- Leading tabs count as 4 spaces each; indentation is otherwise spaces only.
- The decoder never raises on odd input. Lines it cannot place are skipped,
  and list items with no key to hang from land under SENTINEL_KEY.
- Checking the tree against the Receipt shape is left to the caller.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from .rules import (
    INDENT_STEP,
    KEY_DELIMITER,
    LITERAL_BLOCK,
    SENTINEL_KEY,
    SEQUENCE_MARKER,
    TAB_WIDTH,
)
from .scalars import Value, coerce_scalar, is_quoted

logger = logging.getLogger(__name__)

_LEADING_WS = re.compile(r"^[ \t]*")
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass
class _Frame:
    container: Union[Dict[str, Value], List[Value]]
    indent: int
    # most recently assigned key (mapping frames only)
    pending: Optional[str] = None
    # pending key was written as "key:" and its block has not started yet
    awaiting_block: bool = False
    key_indent: int = 0

    @property
    def is_mapping(self) -> bool:
        return isinstance(self.container, dict)


def expand_indent(line: str) -> str:
    """Expand tabs in the leading whitespace only; interior tabs are content."""
    lead = _LEADING_WS.match(line).group(0)
    return lead.replace("\t", " " * TAB_WIDTH) + line[len(lead):]


def _measure(line: str) -> tuple[int, str]:
    expanded = expand_indent(line)
    content = expanded.lstrip(" ")
    return len(expanded) - len(content), content


def _split_key_line(content: str) -> Optional[tuple[str, str]]:
    if KEY_DELIMITER in content:
        key, value = content.split(KEY_DELIMITER, 1)
    elif content.endswith(":"):
        key, value = content[:-1], ""
    else:
        return None
    key = key.strip()
    if not key:
        return None
    return key, value.strip()


class _Decoder:
    """One decode call: owns the line cursor and the frame stack."""

    def __init__(self, markup_text: str):
        self.lines = _LINE_BREAK.split(markup_text)
        self.pos = 0
        self.root: Dict[str, Value] = {}
        self.stack: List[_Frame] = [_Frame(self.root, 0)]

    @property
    def top(self) -> _Frame:
        return self.stack[-1]

    def run(self) -> Dict[str, Value]:
        while self.pos < len(self.lines):
            raw = self.lines[self.pos]
            self.pos += 1
            if not raw.strip():
                continue

            indent, content = _measure(raw.rstrip())
            is_item = content.startswith(SEQUENCE_MARKER)

            self._open_pending_block(indent, is_item)
            self._dedent(indent)

            if is_item:
                self._item_line(indent, content[len(SEQUENCE_MARKER):].strip())
            else:
                self._key_line(indent, content)
        return self.root

    # ------------------------------------------------------------------
    # Stack handling
    # ------------------------------------------------------------------

    def _open_pending_block(self, indent: int, is_item: bool) -> None:
        frame = self.top
        if not frame.awaiting_block:
            return
        frame.awaiting_block = False

        deeper = indent > frame.key_indent
        compact_list = is_item and indent == frame.key_indent
        if not (deeper or compact_list):
            # "key:" with nothing under it stays None
            return

        child: Union[Dict[str, Value], List[Value]] = [] if is_item else {}
        frame.container[frame.pending] = child
        self.stack.append(_Frame(child, indent))

    def _dedent(self, indent: int) -> None:
        popped = False
        while len(self.stack) > 1 and self.top.indent > indent:
            self.stack.pop()
            popped = True
        if popped:
            # the block owned by the uncovered frame's pending key has closed
            self.top.pending = None

    def _push(self, container, indent: int) -> _Frame:
        frame = _Frame(container, indent)
        self.stack.append(frame)
        return frame

    # ------------------------------------------------------------------
    # Line shapes
    # ------------------------------------------------------------------

    def _item_line(self, indent: int, item: str) -> None:
        frame = self.top
        if frame.is_mapping:
            key = frame.pending
            if key is None:
                logger.debug("list item with no parent key, using %s", SENTINEL_KEY)
                key = SENTINEL_KEY
            existing = frame.container.get(key)
            seq = existing if isinstance(existing, list) else []
            frame.container[key] = seq
            frame.pending = key
            frame = self._push(seq, indent)

        seq = frame.container
        # "- - x": one nested list per extra marker
        while not is_quoted(item) and item.startswith(SEQUENCE_MARKER):
            indent += INDENT_STEP
            nested: List[Value] = []
            seq.append(nested)
            self._push(nested, indent)
            seq = nested
            item = item[len(SEQUENCE_MARKER):].strip()
        child_indent = indent + INDENT_STEP

        if is_quoted(item):
            seq.append(coerce_scalar(item))
        elif item == LITERAL_BLOCK:
            seq.append(self._literal_block(indent))
        elif _split_key_line(item) is not None:
            obj: Dict[str, Value] = {}
            seq.append(obj)
            self._push(obj, child_indent)
            self._key_line(child_indent, item)
        else:
            seq.append(coerce_scalar(item))

    def _key_line(self, indent: int, content: str) -> None:
        parts = _split_key_line(content)
        if parts is None:
            logger.debug("ignoring unrecognized line: %r", content)
            return
        key, value = parts

        frame = self.top
        if not frame.is_mapping:
            if frame.indent >= indent and len(self.stack) > 1:
                # compact list ("key:" then "- item" at the same indent) ended
                self.stack.pop()
                frame = self.top
                frame.pending = None
            if not frame.is_mapping:
                obj: Dict[str, Value] = {}
                frame.container.append(obj)
                frame = self._push(obj, indent)

        if value == "":
            frame.container[key] = None
            frame.awaiting_block = True
            frame.key_indent = indent
        elif value == LITERAL_BLOCK:
            frame.container[key] = self._literal_block(indent)
        else:
            frame.container[key] = coerce_scalar(value)
        frame.pending = key

    def _literal_block(self, owner_indent: int) -> str:
        block_indent = owner_indent + INDENT_STEP
        body: List[str] = []
        while self.pos < len(self.lines):
            raw = self.lines[self.pos]
            expanded = expand_indent(raw)
            if expanded.strip():
                indent = len(expanded) - len(expanded.lstrip(" "))
                if indent < block_indent:
                    break
            # tabs past the block indent are content
            if raw[:block_indent].strip(" "):
                body.append(expanded[block_indent:])
            else:
                body.append(raw[block_indent:])
            self.pos += 1
        while body and not body[-1].strip():
            body.pop()
        return "\n".join(body)


def decode(markup_text: str) -> Dict[str, Value]:
    """
    Decode a front-matter block into a mapping.

    A fresh frame stack is built for every call; nothing outlives it.
    """
    return _Decoder(markup_text).run()
