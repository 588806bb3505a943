"""Configuration and result types for benchmarks."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DATA_DIR = Path("benchmarks/data")
DBTEXT_BASE_URL = "https://raw.githubusercontent.com/cwida/fsst/4e188a/paper/dbtext"

# Reserved destination size for compress-only; exceeds any dbtext output
DEFAULT_COMPRESS_CAPACITY = 200 * 1024 * 1024


@dataclass(frozen=True)
class DatasetSpec:
    """A remote corpus and where it is cached locally."""

    name: str
    source_url: str
    cache_path: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "cache_path", Path(self.cache_path))


def dbtext_dataset(corpus: str, data_dir: Path = DATA_DIR) -> DatasetSpec:
    """Describe one corpus of the FSST paper's dbtext collection."""
    return DatasetSpec(
        name=f"dbtext/{corpus}",
        source_url=f"{DBTEXT_BASE_URL}/{corpus}",
        cache_path=Path(data_dir) / corpus,
    )


DEFAULT_DATASETS: tuple[DatasetSpec, ...] = (
    dbtext_dataset("wikipedia"),
    dbtext_dataset("l_comment"),
    dbtext_dataset("urls"),
)


@dataclass
class BenchmarkConfig:
    """Configuration for benchmark runs."""

    datasets: tuple[DatasetSpec, ...] = DEFAULT_DATASETS
    sample_size: int = 10
    warmup_iterations: int = 1
    filters: list[str] = field(default_factory=list)
    compress_capacity: int = DEFAULT_COMPRESS_CAPACITY
    output_dir: Path | None = None

    def __post_init__(self) -> None:
        """Freeze the dataset list and validate counts."""
        self.datasets = tuple(self.datasets)
        if self.sample_size < 1:
            raise ValueError(f"sample_size must be >= 1, got {self.sample_size}")
        if self.warmup_iterations < 0:
            raise ValueError(f"warmup_iterations must be >= 0, got {self.warmup_iterations}")
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)
            self.output_dir.mkdir(parents=True, exist_ok=True)


@dataclass
class BenchmarkResult:
    """Result from a single benchmark scenario."""

    group: str
    scenario_name: str
    iterations: int
    mean_s: float
    median_s: float
    min_s: float
    max_s: float
    std_s: float
    p95_s: float
    throughput_bytes: int | None = None
    throughput_mib_s: float | None = None

    @property
    def benchmark_id(self) -> str:
        return f"{self.group}/{self.scenario_name}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "group": self.group,
            "scenario_name": self.scenario_name,
            "iterations": self.iterations,
            "mean_s": self.mean_s,
            "median_s": self.median_s,
            "min_s": self.min_s,
            "max_s": self.max_s,
            "std_s": self.std_s,
            "p95_s": self.p95_s,
            "throughput_bytes": self.throughput_bytes,
            "throughput_mib_s": self.throughput_mib_s,
        }

    def to_csv_row(self) -> dict[str, Any]:
        """Convert to flat dictionary for CSV export."""
        row = self.to_dict()
        row["throughput_bytes"] = self.throughput_bytes or 0
        row["throughput_mib_s"] = self.throughput_mib_s or 0.0
        return row


@dataclass
class DatasetReport:
    """Everything measured for one dataset."""

    name: str
    uncompressed_size: int
    compressed_size: int
    compression_ratio: float
    results: list[BenchmarkResult] = field(default_factory=list)
    compress_only_size: int | None = None  # output length seen during compress-only

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "uncompressed_size": self.uncompressed_size,
            "compressed_size": self.compressed_size,
            "compression_ratio": self.compression_ratio,
            "compress_only_size": self.compress_only_size,
            "results": [r.to_dict() for r in self.results],
        }
