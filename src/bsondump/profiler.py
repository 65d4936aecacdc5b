"""Performance profiler for dump runs."""

import time
import psutil
import logging
from typing import Optional, List
from dataclasses import dataclass
from contextlib import contextmanager


@dataclass
class PerformanceMetrics:
    """Performance metrics for a dump operation."""
    operation_name: str
    start_time: float
    end_time: float
    duration: float
    input_size: int
    output_size: int
    memory_peak_mb: float
    memory_start_mb: float
    memory_end_mb: float
    cpu_percent: float
    throughput_mbps: float
    documents_written: int


class PerformanceProfiler:
    """
    Performance profiler for monitoring dump operations.

    Tracks wall time, resident memory, CPU utilization and throughput of the
    process via psutil.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the performance profiler.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.metrics_history: List[PerformanceMetrics] = []
        self.current_operation: Optional[str] = None
        self.start_time: Optional[float] = None
        self.start_memory: Optional[float] = None
        self.input_size = 0
        self.peak_memory: float = 0
        self.cpu_samples: List[float] = []
        self.last_metrics: Optional[PerformanceMetrics] = None
        self._output_size = 0
        self._documents_written = 0

    @contextmanager
    def profile_operation(self, operation_name: str, input_size: int = 0):
        """
        Context manager for profiling operations.

        Callers report output through ``record_output`` while inside the
        block; metrics are collected on exit, even if the block raises.

        Args:
            operation_name: Name of the operation being profiled
            input_size: Size of input data in bytes
        """
        self.start_profiling(operation_name, input_size)
        self._output_size = 0
        self._documents_written = 0
        try:
            yield self
        finally:
            self.stop_profiling(self._output_size, self._documents_written)

    def record_output(self, output_size: int, documents_written: int) -> None:
        self._output_size = output_size
        self._documents_written = documents_written

    def start_profiling(self, operation_name: str, input_size: int = 0):
        """
        Start profiling an operation.

        Args:
            operation_name: Name of the operation
            input_size: Size of input data in bytes
        """
        self.current_operation = operation_name
        self.start_time = time.time()
        self.input_size = input_size

        process = psutil.Process()
        self.start_memory = process.memory_info().rss / 1024 / 1024  # MB
        self.peak_memory = self.start_memory
        self.cpu_samples = []
        process.cpu_percent()  # first call only primes the counter

        self.logger.debug(f"Started profiling: {operation_name}")

    def sample_performance(self):
        """Sample current performance metrics."""
        if not self.current_operation:
            return

        try:
            process = psutil.Process()
            current_memory = process.memory_info().rss / 1024 / 1024  # MB
            cpu_percent = process.cpu_percent()

            self.peak_memory = max(self.peak_memory, current_memory)
            self.cpu_samples.append(cpu_percent)

        except psutil.Error as e:
            self.logger.warning(f"Performance sampling failed: {e}")

    def stop_profiling(self, output_size: int = 0, documents_written: int = 0) -> PerformanceMetrics:
        """
        Stop profiling and return metrics.

        Args:
            output_size: Size of output text in characters
            documents_written: Number of documents rendered

        Returns:
            PerformanceMetrics object with collected data
        """
        if not self.current_operation or not self.start_time:
            raise ValueError("No active profiling session")

        self.sample_performance()
        end_time = time.time()
        duration = end_time - self.start_time

        try:
            process = psutil.Process()
            end_memory = process.memory_info().rss / 1024 / 1024  # MB
        except psutil.Error:
            end_memory = self.start_memory
        avg_cpu = sum(self.cpu_samples) / len(self.cpu_samples) if self.cpu_samples else 0

        throughput = (self.input_size / 1024 / 1024) / duration if duration > 0 else 0  # MB/s

        metrics = PerformanceMetrics(
            operation_name=self.current_operation,
            start_time=self.start_time,
            end_time=end_time,
            duration=duration,
            input_size=self.input_size,
            output_size=output_size,
            memory_peak_mb=self.peak_memory,
            memory_start_mb=self.start_memory,
            memory_end_mb=end_memory,
            cpu_percent=avg_cpu,
            throughput_mbps=throughput,
            documents_written=documents_written
        )

        self.metrics_history.append(metrics)
        self.last_metrics = metrics

        self.logger.info(f"Performance Summary - {self.current_operation}:")
        self.logger.info(f"  Duration: {duration:.2f}s")
        self.logger.info(f"  Throughput: {throughput:.2f} MB/s")
        self.logger.info(f"  Memory Peak: {self.peak_memory:.1f} MB")
        self.logger.info(f"  CPU Average: {avg_cpu:.1f}%")
        self.logger.info(f"  Documents Written: {documents_written}")

        self.current_operation = None
        self.start_time = None
        self.start_memory = None

        return metrics
