"""Measurement driver for benchmark scenarios.

A ``BenchmarkGroup`` runs named routines. Each routine receives a ``Bencher``
and hands it the closure to time, either with ``iter`` (output discarded
inside the timed window) or ``iter_with_large_drop`` (output released only
after the window closes, so deallocation of large results is not timed).
"""

import gc
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from benchmarks.config import BenchmarkResult

logger = logging.getLogger("dictbench.harness")

MIB = 1024 * 1024


@dataclass
class Measurement:
    """Timings collected for one scenario."""

    group: str
    name: str
    timings: list[float] = field(default_factory=list)  # seconds per iteration
    throughput_bytes: int | None = None

    @property
    def benchmark_id(self) -> str:
        return f"{self.group}/{self.name}"

    @property
    def throughput_mib_s(self) -> float | None:
        """Mean throughput, or None when no byte count is attached."""
        if self.throughput_bytes is None or not self.timings:
            return None
        mean = float(np.mean(self.timings))
        if mean <= 0:
            return None
        return self.throughput_bytes / mean / MIB

    def to_result(self) -> BenchmarkResult:
        """Summarize the timings."""
        arr = np.array(self.timings, dtype=np.float64)
        return BenchmarkResult(
            group=self.group,
            scenario_name=self.name,
            iterations=len(self.timings),
            mean_s=float(np.mean(arr)),
            median_s=float(np.median(arr)),
            min_s=float(np.min(arr)),
            max_s=float(np.max(arr)),
            std_s=float(np.std(arr)),
            p95_s=float(np.percentile(arr, 95)),
            throughput_bytes=self.throughput_bytes,
            throughput_mib_s=self.throughput_mib_s,
        )


class Bencher:
    """Times a routine over a fixed number of samples."""

    def __init__(
        self,
        sample_size: int,
        warmup_iterations: int = 0,
        timer: Callable[[], float] = time.perf_counter,
    ):
        self.sample_size = sample_size
        self.warmup_iterations = warmup_iterations
        self.timer = timer
        self.timings: list[float] = []
        self._drop_queue: list[Any] = []

    def iter(self, routine: Callable[[], Any]) -> None:
        """Time ``routine``; its output is discarded inside the timed window."""
        for _ in range(self.warmup_iterations):
            routine()

        for _ in range(self.sample_size):
            gc.collect()
            gc.disable()
            try:
                start = self.timer()
                routine()
                elapsed = self.timer() - start
            finally:
                gc.enable()
            self.timings.append(elapsed)

    def iter_with_large_drop(self, routine: Callable[[], Any]) -> None:
        """Time ``routine``, releasing its output after the timed window."""
        for _ in range(self.warmup_iterations):
            self._drop_queue.append(routine())
            self._drain()

        for _ in range(self.sample_size):
            gc.collect()
            gc.disable()
            try:
                start = self.timer()
                output = routine()
                elapsed = self.timer() - start
                self._drop_queue.append(output)
                del output
            finally:
                gc.enable()
            self.timings.append(elapsed)
            self._drain()

    def _drain(self) -> None:
        self._drop_queue.clear()


class BenchmarkGroup:
    """A named set of scenarios sharing sampling and throughput settings."""

    def __init__(
        self,
        name: str,
        sample_size: int = 10,
        warmup_iterations: int = 1,
        filters: list[str] | None = None,
        timer: Callable[[], float] = time.perf_counter,
    ):
        """Initialize the group.

        Args:
            name: Group name, used as the id prefix
            sample_size: Timed iterations per scenario
            warmup_iterations: Untimed iterations before sampling
            filters: Substrings of ``group/scenario`` ids to run. All run if empty.
            timer: Clock returning seconds
        """
        self.name = name
        self.sample_size = sample_size
        self.warmup_iterations = warmup_iterations
        self.filters = list(filters or [])
        self.timer = timer
        self.measurements: list[Measurement] = []
        self._throughput: int | None = None

    def throughput(self, nbytes: int) -> None:
        """Attach a per-iteration byte count to the scenarios that follow."""
        self._throughput = nbytes

    def is_enabled(self, bench_id: str) -> bool:
        full_id = f"{self.name}/{bench_id}"
        return not self.filters or any(f in full_id for f in self.filters)

    def bench_function(
        self, bench_id: str, routine: Callable[[Bencher], None]
    ) -> Measurement | None:
        """Run one scenario.

        Args:
            bench_id: Scenario name within the group
            routine: Callable that passes the work to ``Bencher.iter`` or
                ``Bencher.iter_with_large_drop``

        Returns:
            The measurement, or None if the scenario is filtered out
        """
        if not self.is_enabled(bench_id):
            logger.debug(f"Skipping {self.name}/{bench_id} (filtered)")
            return None

        bencher = Bencher(self.sample_size, self.warmup_iterations, self.timer)
        routine(bencher)
        if not bencher.timings:
            raise RuntimeError(f"{self.name}/{bench_id}: routine did not call Bencher.iter")

        measurement = Measurement(
            group=self.name,
            name=bench_id,
            timings=bencher.timings,
            throughput_bytes=self._throughput,
        )
        self.measurements.append(measurement)
        logger.info(
            f"{measurement.benchmark_id}: {len(bencher.timings)} samples, "
            f"mean {np.mean(bencher.timings) * 1000:.2f}ms"
        )
        return measurement

    def finish(self) -> list[Measurement]:
        """Close the group and return its measurements."""
        return list(self.measurements)
