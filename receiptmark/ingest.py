"""
UCR (upstream certified record) -> receipt document.

Civic grammar for who/where:
- ADDRESS_BOOK: known mailing addresses
- ALIASES: fold messy venue names to one canonical label
- PARENT_OF: parent facility for sub-sites such as concessions
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional

from .aggregate import patch_source_url
from .config import Settings
from .encode import encode
from .envelope import wrap_envelope
from .models import Ucr

logger = logging.getLogger(__name__)

RECEIPT_VERSION = 1
RECEIPT_KIND = "food_inspection"

ADDRESS_BOOK: Dict[str, str] = {
    "Hazelwood Central Sr High School": "15875 New Halls Ferry Rd, Florissant, MO 63031",
    "Clayton High School": "1 Mark Twain Cir, Saint Louis, MO 63105-1613",
    "Clayton High School — Stuber Gymnasium Concession": "1 Mark Twain Cir, Saint Louis, MO 63105-1613",
    "Ladue Horton Watkins High School": "1201 Warson Rd, Ladue, MO 63124",
}

ALIASES: Dict[str, str] = {
    "Clayton HS - Stuber Concession": "Clayton High School — Stuber Gymnasium Concession",
    "Clayton High School - Stuber Concession": "Clayton High School — Stuber Gymnasium Concession",
    "Clayton High School - Concession": "Clayton High School — Stuber Gymnasium Concession",
    "Clayton High School - Cafeteria": "Clayton High School",
}

PARENT_OF: Dict[str, str] = {
    "Clayton High School — Stuber Gymnasium Concession": "Clayton High School",
}


def canon(name: str) -> str:
    return ALIASES.get(name, name)


def slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def payload_checksum(ucr: Ucr) -> str:
    if ucr.evidence.checksum_sha256:
        return ucr.evidence.checksum_sha256
    payload = ucr.payload.model_dump(mode="json")
    data = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def build_receipt(ucr: Ucr, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Assemble the receipt tree; key order here is the order written to disk.

    The source URL is coerced to https, or replaced by DEFAULT_SOURCE_URL
    when the record has none.
    """
    settings = settings or Settings()
    venue = canon(ucr.subject.id)

    # Stable ids: <venue-slug>-<YYYY-MM-DD>-<rt|fu>
    type_key = "fu" if "follow" in ucr.payload.inspection_type.lower() else "rt"
    inspection_id = ucr.payload.inspection_id or f"{slug(venue)}-{ucr.time.observed}-{type_key}"

    violations = ucr.payload.violations
    tree = {
        "receipt_version": RECEIPT_VERSION,
        "kind": RECEIPT_KIND,
        "jurisdiction": settings.JURISDICTION,
        "issuer": settings.ISSUER,
        "entity": {
            "type": "school",
            "name": venue,
            "parent": PARENT_OF.get(venue),
            "address": ADDRESS_BOOK.get(venue),
        },
        "source": {
            "system": ucr.evidence.source_system,
            "url": ucr.evidence.source_url,
            "fetched_at": ucr.time.ingested,
        },
        "inspection": {
            "id": inspection_id,
            "type": ucr.payload.inspection_type,
            "date": ucr.time.observed,
            "score": ucr.payload.score_100,
            "grade_raw": ucr.payload.grade_raw,
            "critical_violations": sum(1 for v in violations if v.critical),
            "noncritical_violations": sum(1 for v in violations if not v.critical),
            "violations": [
                {
                    "code": v.code,
                    "title": v.title,
                    "critical": v.critical,
                    "corrected_on_site": v.corrected_on_site,
                    "narrative": v.narrative,
                }
                for v in violations
            ],
        },
        "proof": {
            "method": "human-transcribed",
            "payload_checksum_sha256": payload_checksum(ucr),
            "cid": ucr.cid,
            "schema": ucr.schema_,
        },
    }
    patch_source_url(tree, {}, settings.DEFAULT_SOURCE_URL)
    return tree


def render_receipt(tree: Dict[str, Any]) -> str:
    return wrap_envelope(encode(tree))


def receipt_path(root: Path, tree: Dict[str, Any]) -> Path:
    """<root>/<entity-slug>/<date>.md; raises ValueError if that leaves root."""
    path = root / slug(tree["entity"]["name"]) / f"{tree['inspection']['date']}.md"
    if not path.resolve().is_relative_to(root.resolve()):
        raise ValueError(f"receipt path {path} is outside {root}")
    return path


def write_receipt(root: Path, tree: Dict[str, Any]) -> Path:
    path = receipt_path(root, tree)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_receipt(tree), encoding="utf-8")
    logger.info("wrote receipt %s", path)
    return path
