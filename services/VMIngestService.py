# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-15
# Description: VMIngestService.py
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Type, TypeVar

from config.Config import Config
from embedding.VMEmbedder import VMEmbedder
from extractor.CallerFieldExtractor import CallerFieldExtractor
from record.VMErrors import (
    EmbeddingError,
    EmbeddingUnavailable,
    PipelineAborted,
    StoreError,
    StoreUnavailable,
    VMIndexError,
)
from record.VMRecord import (
    CANCELLED,
    EMBEDDING_FAILED,
    STORE_FAILED,
    ExtractedFields,
    IngestReport,
    MetadataValue,
    RawRecord,
    Record,
    SkippedRecord,
    VMCollection,
)
from utility.logging_utils import get_class_logger
from vectorstore.VMRecordStore import VMRecordStore

T = TypeVar("T")

BACKOFF_FACTOR = 1.7


def sanitize_metadata(metadata: Optional[Dict[str, Any]]) -> Dict[str, MetadataValue]:
    """
    Flatten caller metadata to the scalar values a vector store accepts:
    None is dropped, sequences are joined with ", ", anything else is str()'d.
    """
    clean: Dict[str, MetadataValue] = {}
    for key, value in (metadata or {}).items():
        if value is None:
            continue
        if isinstance(value, (str, bool, int, float)):
            clean[str(key)] = value
        elif isinstance(value, (list, tuple, set)):
            clean[str(key)] = ", ".join(str(v) for v in value if v is not None)
        else:
            clean[str(key)] = str(value)
    return clean


def merge_metadata(
        caller_metadata: Optional[Dict[str, Any]],
        extracted: ExtractedFields,
        indexed_at: str,
) -> Dict[str, MetadataValue]:
    """
    Derived fields first, caller-supplied keys on top (caller wins on collision).
    indexed_at is always the pipeline's stamp; query tie-breaking reads it.
    """
    merged: Dict[str, MetadataValue] = dict(extracted.to_metadata())
    merged.update(sanitize_metadata(caller_metadata))
    merged["indexed_at"] = indexed_at
    return merged


class VMIngestService:
    """
    Owns the ingest/index pipeline, per record:
      - extract caller fields (never fails)
      - embed source text          -> skipped: embedding_failed
      - merge metadata
      - upsert into record store   -> skipped: store_failed

    One bad record never aborts the batch. Only a collection that cannot be
    created/reached raises (PipelineAborted), before any record is touched.
    """

    def __init__(
        self,
        *,
        store: VMRecordStore,
        embedder: VMEmbedder,
        collection_name: str,
        extractor: CallerFieldExtractor | None = None,
        parallelism: int = 4,
        max_retries: int = 2,
        retry_delay_s: float = 0.8,
        sleep: Callable[[float], None] = time.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        if parallelism < 1:
            raise ValueError(f"parallelism must be >= 1, got {parallelism}")
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        self.store = store
        self.embedder = embedder
        self.extractor = extractor or CallerFieldExtractor()
        self.collection_name = collection_name
        self.parallelism = parallelism
        self.max_retries = max_retries
        self.retry_delay_s = retry_delay_s
        self._sleep = sleep
        self.logger = logger or get_class_logger(self.__class__)

    @classmethod
    def from_config(
        cls,
        cfg: Config,
        *,
        store: VMRecordStore,
        embedder: VMEmbedder,
        extractor: CallerFieldExtractor | None = None,
    ) -> "VMIngestService":
        return cls(
            store=store,
            embedder=embedder,
            extractor=extractor,
            collection_name=cfg.collection_name,
            parallelism=cfg.parallelism,
            max_retries=cfg.max_retries,
            retry_delay_s=cfg.retry_delay_s,
        )

    def ingest(
        self,
        records: Iterable[RawRecord],
        *,
        collection_name: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> IngestReport:
        batch = list(records)
        name = collection_name or self.collection_name

        if not batch:
            self.logger.info("Empty batch for collection '%s'; nothing to do", name)
            return IngestReport(succeeded=0, skipped=[], collection=name)

        try:
            collection = self.store.ensure_collection(name)
        except VMIndexError as e:
            self.logger.error("Cannot establish collection '%s': %s", name, e)
            raise PipelineAborted(f"Collection '{name}' could not be established: {e}") from e

        self.logger.info(
            "Ingesting %d records into '%s' (parallelism=%d, max_retries=%d)",
            len(batch),
            name,
            self.parallelism,
            self.max_retries,
        )
        start = time.time()
        outcomes = self._run_batch(collection, batch, cancel_event)

        report = IngestReport(collection=name)
        for raw, reason in zip(batch, outcomes):
            if reason is None:
                report.succeeded += 1
            else:
                report.skipped.append(SkippedRecord(id=raw.id, reason=reason))

        self.logger.info(
            "Ingest complete for '%s': %d/%d records indexed, %d skipped (%.1f s)",
            name,
            report.succeeded,
            len(batch),
            len(report.skipped),
            time.time() - start,
        )
        return report

    # ------------------------------------------------------------------
    # Batch execution
    # ------------------------------------------------------------------
    def _run_batch(
        self,
        collection: VMCollection,
        batch: List[RawRecord],
        cancel_event: threading.Event | None,
    ) -> List[Optional[str]]:
        """Returns one outcome per input index: None for success, else a skip reason."""
        outcomes: List[Optional[str]] = [None] * len(batch)
        dispatched: List[Tuple[int, Future]] = []
        # A slot is taken before submit, so nothing queues up behind the workers
        slots = threading.BoundedSemaphore(self.parallelism)

        with ThreadPoolExecutor(max_workers=self.parallelism, thread_name_prefix="vm-ingest") as pool:
            for index, raw in enumerate(batch):
                slots.acquire()
                if self._cancelled(cancel_event):
                    slots.release()
                    for j in range(index, len(batch)):
                        outcomes[j] = CANCELLED
                    self.logger.warning(
                        "Ingest cancelled: %d of %d records not dispatched",
                        len(batch) - index,
                        len(batch),
                    )
                    break
                future = pool.submit(self._process_one, collection, raw, cancel_event)
                future.add_done_callback(lambda _f: slots.release())
                dispatched.append((index, future))

            for index, future in dispatched:
                outcomes[index] = future.result()

        return outcomes

    def _process_one(
        self,
        collection: VMCollection,
        raw: RawRecord,
        cancel_event: threading.Event | None,
    ) -> Optional[str]:
        record = Record(
            id=raw.id,
            source_text=raw.source_text,
            extracted=self.extractor.extract(raw.source_text),
        )
        self.logger.debug("Processing %s", record.short_preview())

        try:
            record.embedding = self._with_retry(
                "embed",
                record.id,
                lambda: self.embedder.embed(
                    record.source_text,
                    expected_dim=self.store.dimension_of(collection),
                ),
                EmbeddingUnavailable,
                cancel_event,
            )
        except EmbeddingError as e:
            self.logger.warning("Skipping '%s': embedding failed: %s", record.id, e)
            return EMBEDDING_FAILED
        except Exception as e:
            self.logger.error("Skipping '%s': unexpected embedding error: %s", record.id, e, exc_info=True)
            return EMBEDDING_FAILED

        metadata = merge_metadata(raw.metadata, record.extracted, record.indexed_at_iso())

        try:
            self._with_retry(
                "upsert",
                record.id,
                lambda: self.store.upsert(
                    collection,
                    record.id,
                    record.embedding,
                    record.source_text,
                    metadata,
                ),
                StoreUnavailable,
                cancel_event,
            )
        except StoreError as e:
            self.logger.warning("Skipping '%s': store upsert failed: %s", record.id, e)
            return STORE_FAILED
        except Exception as e:
            self.logger.error("Skipping '%s': unexpected store error: %s", record.id, e, exc_info=True)
            return STORE_FAILED

        self.logger.info(
            "Indexed '%s' (name=%s, company=%s, phones=%d)",
            record.id,
            record.extracted.name,
            record.extracted.company,
            len(record.extracted.phone_numbers),
        )
        return None

    # ------------------------------------------------------------------
    # Retry / cancellation
    # ------------------------------------------------------------------
    def _with_retry(
        self,
        what: str,
        record_id: str,
        fn: Callable[[], T],
        transient: Type[Exception],
        cancel_event: threading.Event | None,
    ) -> T:
        delay = self.retry_delay_s
        attempts = self.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return fn()
            except transient as e:
                if attempt == attempts:
                    raise
                self.logger.warning(
                    "%s for '%s' failed (attempt %d/%d): %s; retrying in %.2fs",
                    what,
                    record_id,
                    attempt,
                    attempts,
                    e,
                    delay,
                )
                if self._wait(delay, cancel_event):
                    self.logger.info("Cancelled while retrying %s for '%s'", what, record_id)
                    raise
                delay *= BACKOFF_FACTOR

        # Unreachable and include for type checkers
        raise RuntimeError(f"retry loop for {what} exited without a result")

    @staticmethod
    def _cancelled(cancel_event: threading.Event | None) -> bool:
        return cancel_event is not None and cancel_event.is_set()

    def _wait(self, delay: float, cancel_event: threading.Event | None) -> bool:
        """Back off for `delay` seconds; True if cancellation arrived meanwhile."""
        if cancel_event is None:
            if delay > 0:
                self._sleep(delay)
            return False
        return cancel_event.wait(delay) if delay > 0 else cancel_event.is_set()
