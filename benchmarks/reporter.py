"""Benchmark result reporting - console, JSON, and CSV output."""

import csv
import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .config import BenchmarkConfig, BenchmarkResult, DatasetReport


def compression_ratio(uncompressed_size: int, compressed_size: int) -> float:
    """Uncompressed size divided by compressed size."""
    if compressed_size <= 0:
        raise ValueError(f"compressed_size must be positive, got {compressed_size}")
    return uncompressed_size / compressed_size


def format_ratio(uncompressed_size: int, compressed_size: int) -> str:
    """Format a compression ratio as ``x.xx:1``."""
    return f"{compression_ratio(uncompressed_size, compressed_size):.2f}:1"


def format_ratio_line(name: str, uncompressed_size: int, compressed_size: int) -> str:
    """The per-dataset summary line printed after all scenarios."""
    return (
        f"compressed {name} {uncompressed_size} => {compressed_size}B "
        f"(compression factor {format_ratio(uncompressed_size, compressed_size)})"
    )


def format_result(result: BenchmarkResult) -> str:
    """One console line for a scenario."""
    line = (
        f"{result.benchmark_id:<40} "
        f"mean {result.mean_s * 1000:10.3f}ms  "
        f"median {result.median_s * 1000:10.3f}ms  "
        f"p95 {result.p95_s * 1000:10.3f}ms"
    )
    if result.throughput_mib_s is not None:
        line += f"  {result.throughput_mib_s:10.2f} MiB/s"
    return line


class BenchmarkReporter:
    """Generate reports from benchmark results."""

    def __init__(self, config: BenchmarkConfig):
        """Initialize reporter.

        Args:
            config: Benchmark configuration
        """
        self.config = config
        self.output_dir = config.output_dir

    def print_result(self, result: BenchmarkResult) -> None:
        print(format_result(result))

    def print_ratio(self, report: DatasetReport) -> None:
        print(format_ratio_line(report.name, report.uncompressed_size, report.compressed_size))

    def print_console_summary(self, reports: list[DatasetReport]) -> None:
        """Print a table of all datasets.

        Args:
            reports: Per-dataset reports from the runner
        """
        print("\n" + "=" * 60)
        print("BENCHMARK SUMMARY")
        print("=" * 60)

        for report in reports:
            print(f"\n--- {report.name} ---")
            for result in report.results:
                print(f"  {format_result(result)}")
            print(f"  ratio: {format_ratio(report.uncompressed_size, report.compressed_size)}")

        print("\n" + "=" * 60)

    def write_json(self, reports: list[DatasetReport], filename: str = "results.json") -> Path:
        """Write results to JSON file.

        Args:
            reports: Per-dataset reports
            filename: Output filename

        Returns:
            Path to written file
        """
        if self.output_dir is None:
            raise ValueError("write_json requires config.output_dir")

        output: dict[str, Any] = {
            "metadata": {
                "timestamp": datetime.now(UTC).isoformat(),
                "config": {
                    "datasets": [spec.name for spec in self.config.datasets],
                    "sample_size": self.config.sample_size,
                    "warmup_iterations": self.config.warmup_iterations,
                    "filters": self.config.filters,
                },
            },
            "datasets": [r.to_dict() for r in reports],
        }

        output_path = self.output_dir / filename
        with open(output_path, "w") as f:
            json.dump(output, f, indent=2)

        return output_path

    def write_csv(self, reports: list[DatasetReport], filename: str = "results.csv") -> Path:
        """Write one CSV row per scenario.

        Args:
            reports: Per-dataset reports
            filename: Output filename

        Returns:
            Path to written file
        """
        if self.output_dir is None:
            raise ValueError("write_csv requires config.output_dir")

        output_path = self.output_dir / filename

        fieldnames = [
            "group",
            "scenario_name",
            "iterations",
            "mean_s",
            "median_s",
            "min_s",
            "max_s",
            "std_s",
            "p95_s",
            "throughput_bytes",
            "throughput_mib_s",
        ]

        with open(output_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for report in reports:
                for r in report.results:
                    writer.writerow(r.to_csv_row())

        return output_path
