from __future__ import annotations

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


# ----------------------------------------------------------------------
# Receipt contract shared with ingest and aggregation code
# ----------------------------------------------------------------------

class Entity(BaseModel):
    type: str
    name: str
    parent: Optional[str] = None
    address: Optional[str] = None


class Source(BaseModel):
    system: str
    url: str
    fetched_at: Optional[str] = None


class Violation(BaseModel):
    code: str
    title: str
    narrative: str
    critical: bool
    corrected_on_site: bool


class Inspection(BaseModel):
    id: str
    type: str
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    score: Union[int, float]
    grade_raw: Optional[str] = None
    critical_violations: int
    noncritical_violations: int
    violations: Optional[List[Violation]] = None


class Proof(BaseModel):
    # attestation fields vary by how the receipt was produced
    model_config = ConfigDict(extra="allow")

    cid: Optional[str] = None


class Receipt(BaseModel):
    model_config = ConfigDict(extra="allow")

    jurisdiction: str
    issuer: str
    entity: Entity
    source: Source
    inspection: Inspection
    proof: Optional[Proof] = None


# ----------------------------------------------------------------------
# Upstream certified record (ingest input)
# ----------------------------------------------------------------------

class UcrSubject(BaseModel):
    type: str = "venue"
    id: str


class UcrPayload(BaseModel):
    inspection_id: Optional[str] = None
    inspection_type: str
    score_100: Union[int, float]
    grade_raw: Optional[str] = None
    violations: List[Violation] = Field(default_factory=list)


class UcrEvidence(BaseModel):
    source_system: str
    source_url: str
    checksum_sha256: Optional[str] = None


class UcrTime(BaseModel):
    # becomes the receipt file name
    observed: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    ingested: str


class Ucr(BaseModel):
    schema_: str = Field(alias="schema")
    subject: UcrSubject
    payload: UcrPayload
    evidence: UcrEvidence
    time: UcrTime
    cid: str


# ----------------------------------------------------------------------
# HTTP responses
# ----------------------------------------------------------------------

class DecodeResponse(BaseModel):
    envelope_found: bool
    front_matter: Optional[Dict[str, Any]] = None
    receipt_errors: List[str] = Field(default_factory=list)
    document: Dict[str, Any] = Field(default_factory=dict)


class EncodeRequest(BaseModel):
    value: Dict[str, Any]
    body: str = ""


class EncodeResponse(BaseModel):
    markup: str
    document: str


class IngestResponse(BaseModel):
    path: str
    document: str
    front_matter: Dict[str, Any]


class FeedItem(BaseModel):
    id: str
    school: str
    address: str = ""
    date: str
    score: Union[int, float]
    critical_count: int = 0
    noncritical_count: int = 0
    source_url: str = ""
    receipt_cid: str = ""


class LeaderboardRow(BaseModel):
    school: str
    parent: str = ""
    address: str = ""
    latestDate: str = ""
    latestScore: float = 0
    avg12mo: float = 0
    criticalsYTD: int = 0


class HealthResponse(BaseModel):
    ok: bool = True
