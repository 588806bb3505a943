"""dictcodec benchmark suite: training, compression, and decompression speed on dbtext."""

from .config import BenchmarkConfig, BenchmarkResult, DatasetReport, DatasetSpec

__all__ = ["BenchmarkConfig", "BenchmarkResult", "DatasetReport", "DatasetSpec"]
