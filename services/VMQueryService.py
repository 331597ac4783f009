# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-15
# Description: VMQueryService
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from embedding.VMEmbedder import VMEmbedder
from record.VMRecord import Match, VMCollection
from utility.logging_utils import get_class_logger
from vectorstore.VMRecordStore import VMRecordStore


@dataclass
class VMQueryService:
    """
    Free text -> embedding -> nearest records.

    Nothing is caught here: embedding or store failures propagate to the
    caller, since a partial answer to a single query means nothing.
    """
    store: VMRecordStore
    embedder: VMEmbedder
    collection_name: str = "voicemail_transcripts"
    default_top_k: int = 5
    logger: Any = None

    _collections: Dict[str, VMCollection] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

    def _collection(self, name: str) -> VMCollection:
        collection = self._collections.get(name)
        if collection is None:
            collection = self.store.ensure_collection(name)
            self._collections[name] = collection
        return collection

    def search(
        self,
        text: str,
        top_k: Optional[int] = None,
        collection_name: Optional[str] = None,
    ) -> List[Match]:
        if not text or not text.strip():
            raise ValueError("query text must not be empty")
        k = self.default_top_k if top_k is None else top_k
        if k < 1:
            raise ValueError(f"top_k must be >= 1, got {k}")

        name = collection_name or self.collection_name
        self.logger.info("Searching '%s' for %r (top_k=%d)", name, text, k)

        collection = self._collection(name)
        vector = self.embedder.embed(text, expected_dim=self.store.dimension_of(collection))
        hits = self.store.query(collection, vector, k)

        matches = [
            Match(
                id=h.id,
                document=h.document,
                metadata=h.metadata,
                score=self.store.distance_to_score(h.distance),
            )
            for h in hits[:k]
        ]
        self.logger.info("Search on '%s' returned %d matches", name, len(matches))
        return matches

    @staticmethod
    def to_hits(matches: List[Match], include_text: bool = True) -> List[Dict[str, Any]]:
        """Flatten matches into plain dicts for the API layer."""
        hits: List[Dict[str, Any]] = []
        for m in matches:
            hit: Dict[str, Any] = {
                "id": m.id,
                "score": m.score,
                "from_name": m.metadata.get("from_name"),
                "from_company": m.metadata.get("from_company"),
                "metadata": m.metadata,
            }
            if include_text:
                hit["text"] = m.document
            hits.append(hit)
        return hits
