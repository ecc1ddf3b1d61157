"""
Operation Timing Utilities

Records how long each document operation took and whether it succeeded,
and summarizes the records per operation name.
"""

import statistics
import time
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class TimingResult(BaseModel):
    """
    Result of a timed operation.

    Attributes:
        operation_name: Name of the operation that was timed
        execution_time: Time taken to execute the operation in seconds
        timestamp: When the operation started
        success: Whether the operation completed successfully
        metadata: Additional metadata about the operation
    """
    operation_name: str
    execution_time: float = Field(0.0, description="Execution time in seconds")
    timestamp: datetime = Field(default_factory=datetime.now)
    success: bool = True
    metadata: Dict[str, Any] = Field(default_factory=dict)


class OperationStats(BaseModel):
    """
    Aggregated timing statistics for one operation name.
    """
    operation_name: str
    total_operations: int = 0
    successful_operations: int = 0
    failed_operations: int = 0
    average_execution_time: float = 0.0
    median_execution_time: float = 0.0
    max_execution_time: float = 0.0

    @property
    def success_rate(self) -> float:
        """Success rate as a percentage."""
        if self.total_operations == 0:
            return 0.0
        return (self.successful_operations / self.total_operations) * 100.0


class OperationTimer:
    """
    Times operations and keeps their results for later summaries.

    An operation counts as failed when it raises, or when the caller sets
    ``success = False`` on the yielded result (e.g. for a failed envelope).
    """

    def __init__(self, enable_logging: bool = True):
        self._enable_logging = enable_logging
        self._history: List[TimingResult] = []

    @asynccontextmanager
    async def time_operation(self, operation_name: str, metadata: Optional[Dict[str, Any]] = None):
        start_time = time.perf_counter()
        result = TimingResult(operation_name=operation_name, metadata=metadata or {})
        try:
            yield result
        except Exception:
            result.success = False
            raise
        finally:
            result.execution_time = time.perf_counter() - start_time
            self._history.append(result)
            if self._enable_logging:
                status = "succeeded" if result.success else "failed"
                logger.debug(
                    f"Operation '{operation_name}' {status} in {result.execution_time * 1000:.2f}ms"
                )

    def get_timing_history(self) -> List[TimingResult]:
        return self._history.copy()

    def get_operation_stats(self, operation_name: str) -> Optional[OperationStats]:
        """
        Get aggregated statistics for one operation name.

        Returns:
            OperationStats, or None if the operation was never timed
        """
        results = [r for r in self._history if r.operation_name == operation_name]
        if not results:
            return None

        times = [r.execution_time for r in results]
        successful = sum(1 for r in results if r.success)
        return OperationStats(
            operation_name=operation_name,
            total_operations=len(results),
            successful_operations=successful,
            failed_operations=len(results) - successful,
            average_execution_time=statistics.mean(times),
            median_execution_time=statistics.median(times),
            max_execution_time=max(times)
        )

    def get_summary(self) -> Dict[str, OperationStats]:
        names = {r.operation_name for r in self._history}
        return {name: self.get_operation_stats(name) for name in names}

    def clear_history(self) -> None:
        self._history.clear()
