# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-16
# Description: ChromaHealth
# -----------------------------------------------------------------------------

import logging
from typing import Optional

from record.VMErrors import VMIndexError
from utility.logging_utils import get_class_logger
from vectorstore.ChromaVMRecordStore import ChromaVMRecordStore

HEALTHCHECK_COLLECTION = "vmindex-healthcheck"


class ChromaHealth:
    """
    Healthcheck for the Chroma record store.

    run(): heartbeat, then an upsert/read-back round trip through the store
    adapter in a dedicated collection, which is dropped afterwards.
    """

    def __init__(self, store: ChromaVMRecordStore, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or get_class_logger(self.__class__)

    def run(self, index_name: str = HEALTHCHECK_COLLECTION) -> bool:
        self.logger.info("Starting Chroma healthcheck for collection '%s'", index_name)

        if not self.store.test_connection():
            return False

        test_id = "healthcheck-doc-1"
        test_embedding = [0.1] * 10
        try:
            collection = self.store.ensure_collection(index_name)
            self.store.upsert(
                collection,
                test_id,
                test_embedding,
                "This is a Chroma healthcheck document.",
                {"purpose": "healthcheck"},
            )
            hit = self.store.get(collection, test_id)
            if hit is None:
                self.logger.warning(
                    "Chroma healthcheck did NOT read back document '%s'", test_id
                )
                return False
            self.logger.info("Chroma healthcheck for '%s' completed successfully.", index_name)
            return True
        except VMIndexError as e:
            # Common failure: an old healthcheck collection with a different dimension
            self.logger.error("Chroma healthcheck for '%s' failed: %s", index_name, e)
            return False
        finally:
            self._remove_index(index_name)

    def _remove_index(self, index_name: str) -> None:
        try:
            self.store.drop_collection(index_name)
        except VMIndexError as e:
            self.logger.warning("Failed to delete collection '%s': %s", index_name, e)
