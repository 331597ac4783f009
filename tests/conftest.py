# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-17
# Description: conftest.py
# -----------------------------------------------------------------------------

import math
import sys
import threading
import time
import zlib
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import pytest

# add project root to sys.path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from record.VMErrors import (  # noqa: E402
    DimensionMismatch,
    EmbeddingMalformed,
    EmbeddingUnavailable,
    StoreUnavailable,
)
from record.VMRecord import StoreHit, VMCollection  # noqa: E402


def bag_of_words_vector(text: str, dim: int) -> List[float]:
    """Deterministic toy embedding: hashed word counts, L2-normalised."""
    vec = [0.0] * dim
    for word in text.lower().split():
        vec[zlib.crc32(word.encode("utf-8")) % dim] += 1.0
    norm = math.sqrt(sum(v * v for v in vec))
    if norm == 0.0:
        vec[0] = 1.0
        return vec
    return [v / norm for v in vec]


class FakeEmbedder:
    """
    Stands in for VMEmbedder.
    Texts containing a marker in `unavailable_on` / `malformed_on` fail;
    `flaky` maps a marker to how many times it fails before succeeding.
    """

    def __init__(
            self,
            dim: int = 16,
            unavailable_on: Iterable[str] = (),
            malformed_on: Iterable[str] = (),
            flaky: Optional[Dict[str, int]] = None,
            delay: Optional[Callable[[str], float]] = None,
            on_call: Optional[Callable[[str], None]] = None,
    ):
        self.dim = dim
        self.unavailable_on = tuple(unavailable_on)
        self.malformed_on = tuple(malformed_on)
        self.flaky = dict(flaky or {})
        self.delay = delay
        self.on_call = on_call
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def embed(self, text: str, expected_dim: Optional[int] = None) -> List[float]:
        with self._lock:
            self.calls.append(text)
            flaky_hit = next((m for m in self.flaky if m in text and self.flaky[m] > 0), None)
            if flaky_hit is not None:
                self.flaky[flaky_hit] -= 1
        if self.on_call is not None:
            self.on_call(text)
        if self.delay is not None:
            time.sleep(self.delay(text))
        if flaky_hit is not None or any(m in text for m in self.unavailable_on):
            raise EmbeddingUnavailable(f"provider down for {text[:20]!r}")
        if any(m in text for m in self.malformed_on):
            raise EmbeddingMalformed(f"bad vector for {text[:20]!r}")
        return bag_of_words_vector(text, self.dim)


class FakeStore:
    """In-memory VMRecordStore with squared-L2 distance and insertion-order ties."""

    def __init__(self, fail_ensure: bool = False, unavailable_ids: Iterable[str] = ()):
        self.fail_ensure = fail_ensure
        self.unavailable_ids = set(unavailable_ids)
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.dimensions: Dict[str, int] = {}
        self.calls: List[tuple] = []
        self._seq = 0
        self._lock = threading.Lock()

    def test_connection(self) -> bool:
        return not self.fail_ensure

    def ensure_collection(self, name: str) -> VMCollection:
        self.calls.append(("ensure_collection", name))
        if self.fail_ensure:
            raise StoreUnavailable("store is down")
        with self._lock:
            records = self.collections.setdefault(name, {})
            return VMCollection(name=name, dimension=self.dimensions.get(name), count=len(records))

    def dimension_of(self, collection: VMCollection) -> Optional[int]:
        return self.dimensions.get(collection.name, collection.dimension)

    def upsert(self, collection, record_id, vector, document, metadata) -> None:
        self.calls.append(("upsert", record_id))
        if record_id in self.unavailable_ids:
            raise StoreUnavailable(f"write failed for {record_id}")
        with self._lock:
            expected = self.dimensions.get(collection.name)
            if expected is not None and len(vector) != expected:
                raise DimensionMismatch(collection.name, expected, len(vector))
            self.dimensions.setdefault(collection.name, len(vector))
            self._seq += 1
            self.collections.setdefault(collection.name, {})[record_id] = {
                "vector": list(vector),
                "document": document,
                "metadata": dict(metadata),
                "seq": self._seq,
            }

    def query(self, collection, query_vector: Sequence[float], top_k: int) -> List[StoreHit]:
        self.calls.append(("query", collection.name))
        with self._lock:
            rows = list(self.collections.get(collection.name, {}).items())
        scored = []
        for record_id, row in rows:
            distance = sum((a - b) ** 2 for a, b in zip(row["vector"], query_vector))
            scored.append((distance, row["seq"], record_id, row))
        scored.sort(key=lambda t: (t[0], t[1]))
        return [
            StoreHit(id=rid, document=row["document"], metadata=dict(row["metadata"]), distance=d)
            for d, _, rid, row in scored[:top_k]
        ]

    def get(self, collection, record_id: str) -> Optional[StoreHit]:
        row = self.collections.get(collection.name, {}).get(record_id)
        if row is None:
            return None
        return StoreHit(id=record_id, document=row["document"], metadata=dict(row["metadata"]), distance=0.0)

    def count(self, collection) -> int:
        return len(self.collections.get(collection.name, {}))

    @staticmethod
    def distance_to_score(distance: float) -> float:
        return 1.0 / (1.0 + max(float(distance), 0.0))


@pytest.fixture
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()
