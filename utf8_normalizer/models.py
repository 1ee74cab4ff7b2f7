from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field


class NormalizedText(BaseModel):
    sha256: str
    encoding: str = Field(default="UTF-8")
    content_b64: str
    text: str


class CoercionReport(BaseModel):
    source_encoding: Optional[str] = Field(default=None, examples=["Windows-1252"])
    bom: bool = False
    changed: bool = False
    input_bytes: int
    output_bytes: int


class CoerceReport(CoercionReport):
    lossy: bool = False
    tried: List[str] = Field(default_factory=list)


class EnsureResponse(BaseModel):
    text: NormalizedText
    report: CoercionReport


class CoerceResponse(BaseModel):
    text: NormalizedText
    report: CoerceReport


class CoercionFailureDetail(BaseModel):
    issue: str = "utf8_coercion_failed"
    tried: List[str] = Field(default_factory=list)
    suggested: Optional[str] = None


class HealthResponse(BaseModel):
    ok: bool = True
