# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-13
# Description: VMRecordStore
# -----------------------------------------------------------------------------

from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from record.VMRecord import StoreHit, VMCollection


@runtime_checkable
class VMRecordStore(Protocol):
    def test_connection(self) -> bool:
        ...

    def ensure_collection(self, name: str) -> VMCollection:
        ...

    def dimension_of(self, collection: VMCollection) -> Optional[int]:
        ...

    def upsert(
            self,
            collection: VMCollection,
            record_id: str,
            vector: Sequence[float],
            document: str,
            metadata: Dict[str, Any],
    ) -> None:
        ...

    def query(
            self,
            collection: VMCollection,
            query_vector: Sequence[float],
            top_k: int,
    ) -> List[StoreHit]:
        ...

    def get(self, collection: VMCollection, record_id: str) -> Optional[StoreHit]:
        ...

    def count(self, collection: VMCollection) -> int:
        ...

    @staticmethod
    def distance_to_score(distance: float) -> float:
        ...
