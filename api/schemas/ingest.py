# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-16
# Description: ingest.py
# -----------------------------------------------------------------------------
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class RawRecordModel(BaseModel):
    id: str = Field(..., min_length=1)
    source_text: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


class IngestRequest(BaseModel):
    collection: Optional[str] = None
    records: List[RawRecordModel]


class SkippedRecordModel(BaseModel):
    id: str
    reason: str


class IngestResponse(BaseModel):
    collection: Optional[str] = None
    succeeded: int
    skipped: List[SkippedRecordModel]
