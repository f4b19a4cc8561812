import pytest
from fastapi.testclient import TestClient

from receiptmark.config import Settings
from receiptmark.main import app, get_settings

client = TestClient(app)

DOC = (
    "---\n"
    "jurisdiction: St. Louis County, MO\n"
    "issuer: St. Louis County Department of Public Health\n"
    "entity:\n"
    "  type: school\n"
    "  name: Hazelwood Central Sr High School\n"
    "source:\n"
    "  system: county-portal\n"
    "  url: https://example.org/i/9\n"
    "inspection:\n"
    "  id: hz-2025-02-02-rt\n"
    "  type: Routine\n"
    "  date: 2025-02-02\n"
    "  score: 88\n"
    "  critical_violations: 0\n"
    "  noncritical_violations: 0\n"
    "---\n"
    "Inspector notes follow.\n"
)


@pytest.fixture
def receipts_root(tmp_path):
    app.dependency_overrides[get_settings] = lambda: Settings(RECEIPTS_ROOT=tmp_path)
    yield tmp_path
    app.dependency_overrides.clear()


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_decode_receipt_document():
    files = {"file": ("2025-02-02.md", DOC.encode("utf-8"), "text/markdown")}
    r = client.post("/decode", files=files)
    assert r.status_code == 200

    data = r.json()
    assert data["envelope_found"] is True
    assert data["receipt_errors"] == []
    assert data["front_matter"]["entity"] == {
        "type": "school",
        "name": "Hazelwood Central Sr High School",
    }
    assert data["front_matter"]["inspection"]["score"] == 88


def test_decode_reports_shape_problems():
    files = {"file": ("x.md", b"---\nentity:\n  name: x\n---\n", "text/markdown")}
    data = client.post("/decode", files=files).json()
    assert data["envelope_found"] is True
    assert any(err.startswith("inspection") for err in data["receipt_errors"])


def test_decode_without_envelope():
    files = {"file": ("notes.md", b"# Just notes\n", "text/markdown")}
    data = client.post("/decode", files=files).json()
    assert data["envelope_found"] is False
    assert data["front_matter"] is None


def test_decode_rejects_other_files():
    files = {"file": ("data.csv", b"a,b\n", "text/csv")}
    r = client.post("/decode", files=files)
    assert r.status_code == 422


def test_encode():
    body = {"value": {"entity": {"name": "x"}, "tags": ["a", "b"]}, "body": "Notes.\n"}
    r = client.post("/encode", json=body)
    assert r.status_code == 200
    assert r.json() == {
        "markup": "entity:\n  name: x\ntags:\n  - a\n  - b",
        "document": "---\nentity:\n  name: x\ntags:\n  - a\n  - b\n---\nNotes.\n",
    }


def test_encode_rejects_non_finite_numbers():
    r = client.post(
        "/encode",
        content=b'{"value": {"score": NaN}}',
        headers={"content-type": "application/json"},
    )
    assert r.status_code == 422


def test_ingest_then_feed_and_leaderboard(receipts_root, ucr_record):
    r = client.post("/ingest", json=ucr_record)
    assert r.status_code == 200
    data = r.json()
    assert data["path"].endswith("2025-03-14.md")
    assert data["document"].startswith("---\n")

    feed = client.get("/feed").json()
    assert len(feed) == 1
    assert feed[0]["school"] == "Clayton High School — Stuber Gymnasium Concession"
    assert feed[0]["critical_count"] == 1
    assert feed[0]["receipt_cid"] == "bafybeigdyrzt"

    board = client.get("/leaderboard").json()
    assert board[0]["parent"] == "Clayton High School"
    assert board[0]["latestScore"] == 92


def test_ingest_rejects_observed_outside_date_form(receipts_root, ucr_record):
    ucr_record["time"]["observed"] = "../../escaped"
    r = client.post("/ingest", json=ucr_record)
    assert r.status_code == 422
    assert not (receipts_root.parent / "escaped.md").exists()
    assert list(receipts_root.rglob("*.md")) == []
