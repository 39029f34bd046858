import time
import logging
from contextlib import contextmanager
from typing import Dict

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """Tracks elapsed time of the engine's pipeline stages."""

    def __init__(self):
        self.timings: Dict[str, float] = {}
        self.session_start = time.perf_counter()

    @contextmanager
    def measure(self, stage: str):
        """
        Context manager that records how long ``stage`` took.

        Args:
            stage: Name of the stage being measured

        Usage:
            with perf.measure("aggregate"):
                rows = aggregate(rows, "region", ["sales"], "sum")
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            self.timings[stage] = self.timings.get(stage, 0.0) + elapsed
            logger.debug(f"[PERF] {stage}: {elapsed * 1000:.2f}ms")

    def get_report(self) -> str:
        """
        Build a plain-text report of every measured stage, slowest first.

        Returns:
            Formatted report
        """
        total = sum(self.timings.values())

        report = [f"{'=' * 60}", "PERFORMANCE REPORT", f"{'=' * 60}"]

        if not self.timings:
            report.append("No stages measured")
            report.append(f"{'=' * 60}")
            return "\n".join(report)

        for stage, elapsed in sorted(
            self.timings.items(), key=lambda x: x[1], reverse=True
        ):
            percentage = (elapsed / total * 100) if total > 0 else 0
            report.append(f"{stage:40s} {elapsed * 1000:8.2f}ms ({percentage:5.1f}%)")

        report.append(f"{'=' * 60}")
        report.append(f"{'TOTAL (measured stages)':40s} {total * 1000:8.2f}ms")
        report.append(f"{'=' * 60}")

        return "\n".join(report)

    def get_summary_dict(self) -> Dict[str, float]:
        """
        Return timings in milliseconds keyed by stage, plus ``total_ms``.
        """
        summary = {f"{stage}_ms": elapsed * 1000 for stage, elapsed in self.timings.items()}
        summary["total_ms"] = sum(self.timings.values()) * 1000
        return summary

    def reset(self) -> None:
        """Clear every recorded timing."""
        self.timings.clear()
        self.session_start = time.perf_counter()
