# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-16
# Description: VMHealthService.py
# -----------------------------------------------------------------------------
from dataclasses import dataclass

from api.schemas.health import DeepHealthResponse, SmokeTestSummary
from health.TestRunner import TestRunner


@dataclass
class VMHealthService:
    """
    Wraps TestRunner, which runs smoke tests against the embedding
    endpoint and Chroma. Returns DeepHealthResponse for the API layer.
    """

    test_runner: TestRunner

    def deep_health(self) -> DeepHealthResponse:
        results = self.test_runner.run_all()

        total = len(results)
        passed = sum(1 for ok in results.values() if ok)
        failed = total - passed

        return DeepHealthResponse(
            status="ok" if failed == 0 else "error",
            results=results,
            summary=SmokeTestSummary(total=total, passed=passed, failed=failed),
        )
