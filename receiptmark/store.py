"""
Receipt files on disk.

Layout: <root>/<entity-slug>/<YYYY-MM-DD>.md with an optional .json sibling.
The JSON sibling wins when it parses; otherwise the Markdown envelope is
decoded.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from .decode import decode
from .envelope import extract_envelope

logger = logging.getLogger(__name__)

_RECEIPT_FILE = re.compile(r"\.(md|json)$", re.IGNORECASE)


def walk(root: Path) -> Iterator[Path]:
    """Yield every file under root, depth first, in name order."""
    if not root.is_dir():
        return
    for entry in sorted(root.iterdir()):
        if entry.is_dir():
            yield from walk(entry)
        else:
            yield entry


def read_front_matter(path: Path) -> Optional[Dict[str, Any]]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeError) as exc:
        logger.warning("unreadable receipt %s: %s", path, exc)
        return None
    markup = extract_envelope(text)
    if markup is None:
        return None
    return decode(markup)


def load_receipt_pair(directory: Path, stem: str) -> Optional[Dict[str, Any]]:
    json_path = directory / f"{stem}.json"
    md_path = directory / f"{stem}.md"

    if json_path.exists():
        try:
            payload = json.loads(json_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeError, json.JSONDecodeError) as exc:
            logger.warning("unreadable receipt JSON %s: %s", json_path, exc)
        else:
            if isinstance(payload, dict):
                return payload
            logger.warning("receipt JSON %s is not an object", json_path)

    if md_path.exists():
        return read_front_matter(md_path)
    return None


def is_complete(tree: Dict[str, Any]) -> bool:
    inspection = tree.get("inspection")
    entity = tree.get("entity")
    return (
        isinstance(inspection, dict)
        and bool(inspection.get("date"))
        and isinstance(entity, dict)
        and bool(entity.get("name"))
    )


def load_all_receipts(root: Path) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    if not root.is_dir():
        return out

    for entity_dir in sorted(root.iterdir()):
        if not entity_dir.is_dir():
            continue
        # .md/.json pairs share a stem
        stems = sorted({
            _RECEIPT_FILE.sub("", p.name)
            for p in entity_dir.iterdir()
            if _RECEIPT_FILE.search(p.name)
        })
        for stem in stems:
            tree = load_receipt_pair(entity_dir, stem)
            if tree is not None and is_complete(tree):
                out.append(tree)
    return out


def markdown_to_json(root: Path) -> int:
    """Write a .json sibling next to every Markdown receipt under root."""
    wrote = 0
    for path in walk(root):
        if path.suffix.lower() != ".md":
            continue
        tree = read_front_matter(path)
        if tree is None:
            logger.warning("no front matter in %s", path)
            continue
        path.with_suffix(".json").write_text(
            json.dumps(tree, indent=2, ensure_ascii=False), encoding="utf-8"
        )
        wrote += 1

    if wrote == 0:
        logger.warning("found no Markdown receipts to convert under %s", root)
    else:
        logger.info("wrote %d JSON files next to Markdown receipts", wrote)
    return wrote


def safe_write_json(out_path: Path, rows: List[Any], label: str) -> bool:
    """Write rows as JSON unless there are none; an empty run keeps the old file."""
    if not rows:
        logger.warning("no %s found, keeping existing file intact: %s", label, out_path)
        return False
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(rows, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("wrote %s (%d %s)", out_path, len(rows), label)
    return True
