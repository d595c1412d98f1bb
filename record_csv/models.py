from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field


class DecodeSummary(BaseModel):
    rows: int = 0
    columns: int = 0
    ragged_rows: List[int] = Field(default_factory=list, examples=[[3]])


class DecodeResponse(BaseModel):
    headers: List[str]
    rows: List[List[str]]
    summary: DecodeSummary


class DecodeTextRequest(BaseModel):
    text: str = Field(examples=["name,city\nPaul,Montreal"])


class EncodeRequest(BaseModel):
    headers: List[str]
    records: List[Dict[str, Any]] = Field(default_factory=list)


class ExportRequest(BaseModel):
    records: List[Dict[str, Any]] = Field(default_factory=list)
    # used verbatim in the Content-Disposition header
    filename: str = Field(default="export", pattern=r"^[\w.-]+$", examples=["contacts"])
    scope: Literal["all", "selected", "filtered"] = "all"
    selected_ids: List[str] = Field(default_factory=list)


class TableColumnsResponse(BaseModel):
    table: str
    columns: List[str]
    required: List[str]


class HeaderMapping(BaseModel):
    header: str
    column: Optional[str] = None


class ImportPreviewResponse(BaseModel):
    table: str
    mappings: List[HeaderMapping]
    ignored: List[str] = Field(default_factory=list)
    records: List[Dict[str, str]] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list, examples=[["Row 2: Missing required field: start_time"]])


class HealthResponse(BaseModel):
    ok: bool = True
