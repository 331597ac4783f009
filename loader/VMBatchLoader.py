# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-16
# Description: VMBatchLoader
# -----------------------------------------------------------------------------

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List

from record.VMRecord import RawRecord
from utility.logging_utils import get_class_logger

SAMPLE_VOICEMAILS = Path(__file__).resolve().parents[1] / "data" / "sample_voicemails.json"


class VMBatchLoader:
    """
    Loads voicemail batches from local files into RawRecords.

    Accepts a JSON array or JSON Lines (.jsonl). Each object needs an 'id' and a
    'transcript' (or 'source_text'); an optional 'from' is kept as metadata
    unless it is empty or 'Unknown', and an optional 'metadata' object is
    passed through.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or get_class_logger(self.__class__)

    def load_file(self, path: str | Path) -> List[RawRecord]:
        p = Path(path)
        if not p.is_file():
            raise FileNotFoundError(f"Voicemail batch not found: {p}")

        start = time.time()
        text = p.read_text(encoding="utf-8")
        if p.suffix.lower() == ".jsonl":
            items = [
                self._parse_line(line, p, n)
                for n, line in enumerate(text.splitlines(), start=1)
                if line.strip()
            ]
        else:
            try:
                items = json.loads(text)
            except json.JSONDecodeError as e:
                raise ValueError(f"{p}: invalid JSON: {e}") from e
            if not isinstance(items, list):
                raise ValueError(f"{p}: expected a JSON array of voicemail objects")

        records = self.to_records(items)
        self.logger.info(
            "Loaded %d voicemail(s) from '%s' (%.1f ms)",
            len(records),
            p,
            (time.time() - start) * 1000.0,
        )
        return records

    def load_sample(self) -> List[RawRecord]:
        return self.load_file(SAMPLE_VOICEMAILS)

    @staticmethod
    def _parse_line(line: str, path: Path, line_no: int) -> Any:
        try:
            return json.loads(line)
        except json.JSONDecodeError as e:
            raise ValueError(f"{path}:{line_no}: invalid JSON: {e}") from e

    @staticmethod
    def to_records(items: Iterable[Dict[str, Any]]) -> List[RawRecord]:
        records: List[RawRecord] = []
        seen = set()
        for n, item in enumerate(items):
            if not isinstance(item, dict):
                raise ValueError(f"Item {n} is not an object: {item!r}")

            record_id = item.get("id")
            text = item.get("transcript", item.get("source_text"))
            if not isinstance(record_id, str) or not record_id:
                raise ValueError(f"Item {n} must include a string 'id'")
            if not isinstance(text, str):
                raise ValueError(f"Item '{record_id}' must include a 'transcript' string")
            if record_id in seen:
                raise ValueError(f"Duplicate id '{record_id}' in batch")
            seen.add(record_id)

            metadata = dict(item.get("metadata") or {})
            caller = item.get("from")
            if isinstance(caller, str) and caller.strip() and caller.strip().lower() != "unknown":
                metadata.setdefault("from", caller.strip())

            records.append(RawRecord(id=record_id, source_text=text, metadata=metadata))
        return records
