# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-16
# Description: TestRunner
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from embedding.VMEmbedder import VMEmbedder
from health.ChromaHealth import ChromaHealth
from utility.logging_utils import get_class_logger
from vectorstore.ChromaVMRecordStore import ChromaVMRecordStore


class TestRunner:
    """
    Orchestrates all smoke tests and reports a consolidated result.

    Tests included:
      - embedding_health (one real embedding call)
      - chroma_health    (heartbeat + R/W round trip)
    """

    __test__ = False  # not a pytest class

    def __init__(
        self,
        embedder: VMEmbedder,
        store: ChromaVMRecordStore,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or get_class_logger(self.__class__)
        self.checks: Dict[str, Callable[[], bool]] = {
            "embedding_health": embedder.test_connection,
            "chroma_health": ChromaHealth(store).run,
        }

    def run_all(self) -> Dict[str, bool]:
        self.logger.info("Starting smoke test suite (%d checks)", len(self.checks))

        results: Dict[str, bool] = {}
        for name, check in self.checks.items():
            try:
                ok = bool(check())
            except Exception as e:
                self.logger.exception("%s raised an exception: %s", name, e)
                ok = False
            results[name] = ok
            self._log_result(name, ok)

        self._log_summary(results)
        return results

    def _log_result(self, name: str, ok: bool) -> None:
        if ok:
            self.logger.info("%s: PASS", name)
        else:
            self.logger.error("%s: FAIL", name)

    def _log_summary(self, results: Dict[str, bool]) -> None:
        total = len(results)
        passed = sum(1 for v in results.values() if v)
        self.logger.info(
            "Smoke test summary: %d total, %d passed, %d failed", total, passed, total - passed
        )


if __name__ == "__main__":
    from config.Config import Config

    cfg = Config.from_env()
    runner = TestRunner(VMEmbedder(cfg), ChromaVMRecordStore(cfg=cfg))
    results = runner.run_all()

    print("\n=== Smoke Test Results ===")
    for name, ok in results.items():
        print(f"{name}: {'PASS' if ok else 'FAIL'}")
    print(f"\nOverall smoke test result: {'PASS' if all(results.values()) else 'FAIL'}")
