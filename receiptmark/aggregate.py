"""
Derived views over many receipts: the newest-first feed, the per-school
leaderboard, and source URL repair.

Inputs are decoded receipt trees; a tree missing inspection.date or
entity.name is skipped.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .store import is_complete

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value):
        return 0
    return value


def _count(value: Any) -> int:
    return int(_number(value))


def build_feed(receipts: Iterable[Dict[str, Any]], limit: int = 20) -> List[Dict[str, Any]]:
    items = []
    for r in receipts:
        if not is_complete(r):
            continue
        inspection = r["inspection"]
        entity = r["entity"]
        source = r.get("source") or {}
        proof = r.get("proof") or {}
        items.append({
            "id": _text(inspection.get("id")),
            "school": _text(entity["name"]),
            "address": _text(entity.get("address")),
            "date": _text(inspection["date"]),
            "score": _number(inspection.get("score")),
            "critical_count": _count(inspection.get("critical_violations")),
            "noncritical_count": _count(inspection.get("noncritical_violations")),
            "source_url": _text(source.get("url")),
            "receipt_cid": _text(proof.get("cid")),
        })

    items.sort(key=lambda item: item["date"], reverse=True)
    return items[:limit]


def build_leaderboard(
    receipts: Iterable[Dict[str, Any]],
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """
    One row per school: latest score, trailing 12-month average and
    criticals since January 1st. Sorted by latest score, best first.
    """
    today = today or date.today()
    year_start = f"{today.year}-01-01"
    try:
        last_12mo = today.replace(year=today.year - 1).isoformat()
    except ValueError:
        # Feb 29th
        last_12mo = today.replace(year=today.year - 1, day=28).isoformat()

    schools: Dict[str, Dict[str, Any]] = {}
    for r in receipts:
        if not is_complete(r):
            continue
        entity = r["entity"]
        inspection = r["inspection"]
        acc = schools.setdefault(_text(entity["name"]), {
            "parent": _text(entity.get("parent")),
            "address": _text(entity.get("address")),
            "rows": [],
        })
        acc["rows"].append({
            "date": _text(inspection["date"]),
            "score": _number(inspection.get("score")),
            "criticals": _count(inspection.get("critical_violations")),
        })

    out = []
    for school, acc in schools.items():
        rows = sorted(acc["rows"], key=lambda row: row["date"], reverse=True)
        latest = rows[0]

        pool = [row for row in rows if row["date"] >= last_12mo]
        avg12mo = sum(row["score"] for row in pool) / len(pool) if pool else latest["score"]
        criticals_ytd = sum(row["criticals"] for row in rows if row["date"] >= year_start)

        out.append({
            "school": school,
            "parent": acc["parent"],
            "address": acc["address"],
            "latestDate": latest["date"],
            "latestScore": latest["score"],
            "avg12mo": round(avg12mo, 1),
            "criticalsYTD": criticals_ytd,
        })

    out.sort(key=lambda row: row["latestScore"], reverse=True)
    return out


def normalize_url(url: Optional[str]) -> str:
    """Coerce a source URL to https; empty input stays empty."""
    s = (url or "").strip()
    if not s:
        return ""
    if s.startswith("https://"):
        return s
    if s.startswith("http://"):
        return "https://" + s[len("http://"):]
    if s.startswith("//"):
        return "https:" + s
    return "https://" + s.lstrip("/")


def patch_source_url(
    tree: Dict[str, Any],
    overrides: Mapping[str, str],
    default_url: str,
) -> bool:
    """
    Point source.url at the best known URL. Returns True when it changed.

    Preference: override by inspection id, override by entity name, the
    existing URL normalized to https, then default_url.
    """
    inspection = tree.get("inspection") if isinstance(tree.get("inspection"), dict) else {}
    entity = tree.get("entity") if isinstance(tree.get("entity"), dict) else {}
    source = tree.get("source") if isinstance(tree.get("source"), dict) else {}

    inspection_id = _text(inspection.get("id")).strip()
    name = _text(entity.get("name")).strip()

    override = (inspection_id and overrides.get(inspection_id)) or (name and overrides.get(name)) or ""
    candidate = override or normalize_url(_text(source.get("url"))) or default_url

    if source.get("url") == candidate:
        return False
    source["url"] = candidate
    tree["source"] = source
    logger.debug("patched source url for %s -> %s", inspection_id or name, candidate)
    return True
