# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-12
# Description: VMRecord
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

MetadataValue = Union[str, int, float, bool]

# IngestReport skip reasons
EMBEDDING_FAILED = "embedding_failed"
STORE_FAILED = "store_failed"
CANCELLED = "cancelled"


@dataclass(frozen=True)
class RawRecord:
    """A caller-supplied record, exactly as it enters the pipeline."""
    id: str
    source_text: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ExtractedFields:
    """
    Caller attributes derived from the transcript text.
    Derived data only: any of them may be missing.
    """
    name: Optional[str] = None
    company: Optional[str] = None
    phone_numbers: List[str] = field(default_factory=list)

    def to_metadata(self) -> Dict[str, MetadataValue]:
        # Absent fields are left out entirely; the store only takes scalar values
        meta: Dict[str, MetadataValue] = {}
        if self.name:
            meta["from_name"] = self.name
        if self.company:
            meta["from_company"] = self.company
        if self.phone_numbers:
            meta["phone"] = ", ".join(self.phone_numbers)
        return meta


@dataclass
class Record:
    """
    A RawRecord enriched by extraction and embedding.
    Once persisted it is only ever replaced by a later upsert of the same id.
    """
    id: str
    source_text: str
    extracted: ExtractedFields
    embedding: Optional[List[float]] = None
    indexed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def indexed_at_iso(self) -> str:
        # Fixed-width UTC stamp so string order == time order
        return self.indexed_at.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")

    def short_preview(self, n: int = 80) -> str:
        """Return a compact text preview for logging/debugging."""
        clean = " ".join(self.source_text.split())
        preview = (clean[:n] + "...") if len(clean) > n else clean
        return f"[{self.id}] {preview}"


@dataclass(frozen=True)
class VMCollection:
    name: str
    dimension: Optional[int] = None
    count: int = 0


@dataclass(frozen=True)
class StoreHit:
    id: str
    document: Optional[str]
    metadata: Dict[str, Any]
    distance: float


@dataclass(frozen=True)
class Match:
    id: str
    document: Optional[str]
    metadata: Dict[str, Any]
    score: float


@dataclass(frozen=True)
class SkippedRecord:
    id: str
    reason: str


@dataclass
class IngestReport:
    succeeded: int = 0
    skipped: List[SkippedRecord] = field(default_factory=list)
    collection: Optional[str] = None

    @property
    def total(self) -> int:
        return self.succeeded + len(self.skipped)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collection": self.collection,
            "succeeded": self.succeeded,
            "skipped": [{"id": s.id, "reason": s.reason} for s in self.skipped],
        }
