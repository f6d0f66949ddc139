"""Performance monitoring utilities for LibShield."""

import os
import time
import logging
import functools
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, TypeVar
from dataclasses import dataclass
from rich.console import Console
from rich.table import Table

F = TypeVar('F', bound=Callable[..., Any])


@dataclass
class PerformanceMetrics:
    """Container for performance metrics."""

    function_name: str
    execution_time: float
    calls: int = 1


class PerformanceMonitor:
    """Timing tracker for named operations."""

    def __init__(self, enabled: bool = True) -> None:
        self.metrics: List[PerformanceMetrics] = []
        self.enabled = enabled
        self.console = Console()

    @contextmanager
    def measure(self, name: str) -> Iterator[None]:
        """Context manager for measuring performance.

        Args:
            name: Name of the operation being measured
        """
        start_time = time.perf_counter()
        try:
            yield
        finally:
            if self.enabled:
                self.metrics.append(PerformanceMetrics(
                    function_name=name,
                    execution_time=time.perf_counter() - start_time,
                ))

    def get_summary(self) -> Dict[str, Any]:
        """Get performance summary.

        Returns:
            Dictionary with performance summary
        """
        if not self.metrics:
            return {}

        total_time = sum(m.execution_time for m in self.metrics)

        return {
            "total_executions": len(self.metrics),
            "total_time": total_time,
            "average_time": total_time / len(self.metrics),
            "metrics": self.metrics,
        }

    def print_summary(self) -> None:
        """Print performance summary to console."""
        summary = self.get_summary()
        if not summary:
            return

        table = Table(title="Performance Summary")
        table.add_column("Operation", style="cyan")
        table.add_column("Time", style="green")

        for metric in summary["metrics"]:
            table.add_row(metric.function_name, f"{metric.execution_time:.4f}s")
        table.add_row("Total", f"{summary['total_time']:.4f}s")

        self.console.print(table)


def benchmark(func: F) -> F:
    """Simple benchmark decorator.

    Timing is logged only when LIBSHIELD_VERBOSE_BENCHMARK is set.
    """
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        end_time = time.perf_counter()

        if os.environ.get('LIBSHIELD_VERBOSE_BENCHMARK'):
            logger = logging.getLogger("Performance")
            logger.info(f"{func.__name__} took {end_time - start_time:.4f} seconds")
        return result
    return wrapper  # type: ignore[return-value]
