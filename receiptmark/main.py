import logging
from typing import List

from fastapi import Depends, FastAPI, UploadFile, File, HTTPException
from pydantic import ValidationError

from .aggregate import build_feed, build_leaderboard
from .config import Settings
from .decode import decode
from .documents import decode_document_bytes
from .encode import EncodeError, encode
from .envelope import extract_envelope, wrap_envelope
from .ingest import build_receipt, render_receipt, write_receipt
from .models import (
    DecodeResponse,
    EncodeRequest,
    EncodeResponse,
    FeedItem,
    HealthResponse,
    IngestResponse,
    LeaderboardRow,
    Receipt,
    Ucr,
)
from .store import load_all_receipts

_settings = Settings.from_env()
logging.basicConfig(
    level=_settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

DOCUMENT_SUFFIXES = (".md", ".markdown", ".txt")

app = FastAPI(
    title="receiptmark",
    description="Front-matter decoding and deterministic encoding for inspection receipts",
    version="0.1.0",
)


def get_settings() -> Settings:
    return _settings


def receipt_errors(tree) -> List[str]:
    try:
        Receipt.model_validate(tree)
    except ValidationError as exc:
        return [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        ]
    return []


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/decode", response_model=DecodeResponse)
async def decode_document(file: UploadFile = File(...)):
    if not file.filename.lower().endswith(DOCUMENT_SUFFIXES):
        raise HTTPException(status_code=422, detail="Only Markdown or text documents are supported")

    raw = await file.read()
    text, report = decode_document_bytes(raw)

    markup = extract_envelope(text)
    if markup is None:
        logger.info("no front matter in %s", file.filename)
        return {"envelope_found": False, "front_matter": None, "document": report}

    tree = decode(markup)
    return {
        "envelope_found": True,
        "front_matter": tree,
        "receipt_errors": receipt_errors(tree),
        "document": report,
    }


@app.post("/encode", response_model=EncodeResponse)
def encode_document(request: EncodeRequest):
    try:
        markup = encode(request.value)
    except EncodeError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return {"markup": markup, "document": wrap_envelope(markup, request.body)}


@app.post("/ingest", response_model=IngestResponse)
def ingest(ucr: Ucr, settings: Settings = Depends(get_settings)):
    tree = build_receipt(ucr, settings)
    path = write_receipt(settings.RECEIPTS_ROOT, tree)
    return {"path": str(path), "document": render_receipt(tree), "front_matter": tree}


@app.get("/feed", response_model=List[FeedItem])
def feed(settings: Settings = Depends(get_settings)):
    return build_feed(load_all_receipts(settings.RECEIPTS_ROOT), settings.FEED_LIMIT)


@app.get("/leaderboard", response_model=List[LeaderboardRow])
def leaderboard(settings: Settings = Depends(get_settings)):
    return build_leaderboard(load_all_receipts(settings.RECEIPTS_ROOT))
