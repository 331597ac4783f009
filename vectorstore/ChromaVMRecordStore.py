# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-14
# Description: ChromaVMRecordStore
# -----------------------------------------------------------------------------
import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar
from urllib.parse import urlparse

import chromadb
from chromadb.config import Settings

from config.Config import Config
from record.VMErrors import DimensionMismatch, StoreUnavailable, VMIndexError
from record.VMRecord import StoreHit, VMCollection
from utility.logging_utils import get_class_logger
from vectorstore.VMRecordStore import VMRecordStore

T = TypeVar("T")


@dataclass
class ChromaVMRecordStore(VMRecordStore):
    """
    Chroma-backed record store.

    - One Chroma upsert per record id, so a reader never sees half a record.
    - Query results are ordered by ascending distance; equal distances keep
      insertion order (the 'indexed_at' stamp written by the ingest pipeline).
    - score = 1 / (1 + distance): lower distance, higher score.
    - Every Chroma call runs on a worker thread and is bounded by
      cfg.store_timeout_s. A call that times out is reported as
      StoreUnavailable and left to finish on its own thread.
    """

    cfg: Config
    client: Any = None
    max_workers: int = 8
    logger: Any = None

    _collections: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    _dimensions: Dict[str, int] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _executor: Optional[ThreadPoolExecutor] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)
        self.timeout = self.cfg.store_timeout_s
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="vm-store",
        )
        self.logger.info(
            "Chroma record store configured (mode=%s, space=%s, timeout=%.1fs)",
            self.cfg.chroma_mode,
            self.cfg.distance_space,
            self.timeout,
        )

    # ------------------------------------------------------------------
    # Client / plumbing
    # ------------------------------------------------------------------
    def _build_client(self) -> Any:
        cfg = self.cfg
        settings = Settings(anonymized_telemetry=False)

        if cfg.chroma_mode == "cloud":
            self.logger.info(
                "Initialising Chroma Cloud client (tenant=%s, database=%s)",
                cfg.chroma_tenant,
                cfg.chroma_database,
            )
            return chromadb.CloudClient(
                tenant=cfg.chroma_tenant,
                database=cfg.chroma_database,
                api_key=cfg.chroma_api_key,
            )
        if cfg.chroma_mode == "persistent":
            self.logger.info("Initialising persistent Chroma client at '%s'", cfg.chroma_path)
            return chromadb.PersistentClient(path=cfg.chroma_path, settings=settings)
        if cfg.chroma_mode == "ephemeral":
            self.logger.info("Initialising in-memory Chroma client")
            return chromadb.EphemeralClient(settings=settings)

        url = urlparse(cfg.chroma_host if "://" in cfg.chroma_host else f"http://{cfg.chroma_host}")
        ssl = url.scheme == "https"
        port = url.port or (443 if ssl else 8000)
        self.logger.info("Initialising Chroma HTTP client (%s:%d, ssl=%s)", url.hostname, port, ssl)
        return chromadb.HttpClient(
            host=url.hostname or "localhost",
            port=port,
            ssl=ssl,
            settings=settings,
        )

    def _call(self, what: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        if self._executor is None:
            raise StoreUnavailable(f"{what}: record store is closed")
        future = self._executor.submit(fn, *args, **kwargs)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeout as e:
            self.logger.error("%s timed out after %.1fs", what, self.timeout)
            raise StoreUnavailable(f"{what} timed out after {self.timeout:.1f}s") from e
        except VMIndexError:
            raise
        except Exception as e:
            self.logger.error("%s failed: %s", what, e)
            raise StoreUnavailable(f"{what} failed: {e}") from e

    def _get_client(self) -> Any:
        if self.client is None:
            self.client = self._call("Chroma client init", self._build_client)
        return self.client

    def _chroma_collection(self, collection: VMCollection) -> Any:
        col = self._collections.get(collection.name)
        if col is None:
            self.ensure_collection(collection.name)
            col = self._collections[collection.name]
        return col

    def _check_dimension(self, collection: VMCollection, vector: Sequence[float]) -> None:
        expected = self.dimension_of(collection)
        if expected is not None and len(vector) != expected:
            raise DimensionMismatch(collection.name, expected, len(vector))

    @staticmethod
    def _to_list(vector: Sequence[float]) -> List[float]:
        if hasattr(vector, "tolist"):
            return vector.tolist()
        return [float(v) for v in vector]

    # ------------------------------------------------------------------
    # VMRecordStore
    # ------------------------------------------------------------------
    def test_connection(self) -> bool:
        """
        Simple health check: can we talk to Chroma at all?
        """
        try:
            client = self._get_client()
            self._call("Chroma heartbeat", client.heartbeat)
            return True
        except StoreUnavailable as e:
            self.logger.error("Chroma connection failed: %s", e)
            return False

    def ensure_collection(self, name: str) -> VMCollection:
        client = self._get_client()
        col = self._call(
            f"get_or_create_collection('{name}')",
            client.get_or_create_collection,
            name=name,
            metadata={"hnsw:space": self.cfg.distance_space},
        )

        # Learn the dimensionality of anything already stored
        existing = self._call(
            f"peek collection '{name}'",
            col.get,
            limit=1,
            include=["embeddings"],
        )
        embeddings = existing.get("embeddings") if existing else None
        count = self._call(f"count collection '{name}'", col.count)

        with self._lock:
            self._collections[name] = col
            if embeddings is not None and len(embeddings) > 0:
                self._dimensions[name] = len(embeddings[0])
            dimension = self._dimensions.get(name)

        self.logger.info(
            "Chroma collection ready: '%s' (records=%d, dimension=%s)",
            name,
            count,
            dimension,
        )
        return VMCollection(name=name, dimension=dimension, count=count)

    def dimension_of(self, collection: VMCollection) -> Optional[int]:
        with self._lock:
            return self._dimensions.get(collection.name, collection.dimension)

    def upsert(
            self,
            collection: VMCollection,
            record_id: str,
            vector: Sequence[float],
            document: str,
            metadata: Dict[str, Any],
    ) -> None:
        self._check_dimension(collection, vector)
        col = self._chroma_collection(collection)

        # Chroma merges metadata on upsert; None deletes a key left over from the previous version
        existing = self._call(
            f"get '{record_id}' from '{collection.name}'",
            col.get,
            ids=[record_id],
            include=["metadatas"],
        )
        previous = (existing.get("metadatas") or [None])[0] or {}
        payload: Dict[str, Any] = dict(metadata)
        for key in previous:
            payload.setdefault(key, None)

        self._call(
            f"upsert '{record_id}' into '{collection.name}'",
            col.upsert,
            ids=[record_id],
            embeddings=[self._to_list(vector)],
            documents=[document],
            # Chroma rejects an empty metadata dict
            metadatas=[payload] if payload else None,
        )

        with self._lock:
            self._dimensions.setdefault(collection.name, len(vector))
        self.logger.debug("Upserted '%s' into Chroma collection '%s'", record_id, collection.name)

    def query(
            self,
            collection: VMCollection,
            query_vector: Sequence[float],
            top_k: int,
    ) -> List[StoreHit]:
        if top_k < 1:
            raise ValueError(f"top_k must be >= 1, got {top_k}")
        self._check_dimension(collection, query_vector)
        col = self._chroma_collection(collection)

        available = self._call(f"count collection '{collection.name}'", col.count)
        if available == 0:
            self.logger.info("Collection '%s' is empty; nothing to query", collection.name)
            return []

        # Fetch past top_k until the distance at the cut-off changes, so a tied
        # group straddling it is ordered by indexed_at rather than by Chroma
        n_results = min(available, top_k * 2 + 10)
        while True:
            hits = self._nearest(col, collection, query_vector, n_results)
            hits.sort(key=lambda h: (h.distance, str(h.metadata.get("indexed_at", ""))))
            if (
                    n_results >= available
                    or len(hits) <= top_k
                    or hits[-1].distance > hits[top_k - 1].distance
            ):
                break
            n_results = min(available, n_results * 2)

        hits = hits[:top_k]
        self.logger.info(
            "Chroma search complete on '%s': returned %d results (requested %d)",
            collection.name,
            len(hits),
            top_k,
        )
        return hits

    def _nearest(
            self,
            col: Any,
            collection: VMCollection,
            query_vector: Sequence[float],
            n_results: int,
    ) -> List[StoreHit]:
        res = self._call(
            f"query collection '{collection.name}'",
            col.query,
            query_embeddings=[self._to_list(query_vector)],
            n_results=n_results,
            include=["documents", "metadatas", "distances"],
        )

        ids = (res.get("ids") or [[]])[0]
        docs = (res.get("documents") or [[]])[0]
        metas = (res.get("metadatas") or [[]])[0]
        dists = (res.get("distances") or [[]])[0]

        hits: List[StoreHit] = []
        for i, hit_id in enumerate(ids):
            meta = metas[i] if i < len(metas) and metas[i] is not None else {}
            hits.append(StoreHit(
                id=hit_id,
                document=docs[i] if i < len(docs) else None,
                metadata=dict(meta),
                distance=float(dists[i]) if i < len(dists) else float("inf"),
            ))
        return hits

    def get(self, collection: VMCollection, record_id: str) -> Optional[StoreHit]:
        """Fetch one stored record by id; distance is reported as 0.0."""
        col = self._chroma_collection(collection)
        res = self._call(
            f"get '{record_id}' from '{collection.name}'",
            col.get,
            ids=[record_id],
            include=["documents", "metadatas"],
        )
        ids = res.get("ids") or []
        if not ids:
            return None
        docs = res.get("documents") or [None]
        metas = res.get("metadatas") or [None]
        return StoreHit(
            id=ids[0],
            document=docs[0],
            metadata=dict(metas[0] or {}),
            distance=0.0,
        )

    def count(self, collection: VMCollection) -> int:
        col = self._chroma_collection(collection)
        return self._call(f"count collection '{collection.name}'", col.count)

    def drop_collection(self, name: str) -> None:
        """Delete a whole collection (healthcheck cleanup); a missing one is a no-op."""
        client = self._get_client()
        existing = self._call("list_collections", client.list_collections)
        # Older clients return Collection objects, newer ones return names
        names = [getattr(c, "name", c) for c in existing]
        with self._lock:
            self._collections.pop(name, None)
            self._dimensions.pop(name, None)
        if name not in names:
            self.logger.info("Collection '%s' not found, nothing to delete.", name)
            return
        self._call(f"delete_collection('{name}')", client.delete_collection, name)
        self.logger.info("Deleted collection '%s'", name)

    @staticmethod
    def distance_to_score(distance: float) -> float:
        return 1.0 / (1.0 + max(float(distance), 0.0))

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
