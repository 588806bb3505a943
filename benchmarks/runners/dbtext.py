"""Training, compression, and decompression benchmarks over the dbtext corpora."""

import logging
from collections.abc import Sequence
from typing import Protocol

import httpx

import dictcodec
from benchmarks.config import BenchmarkConfig, DatasetReport, DatasetSpec
from benchmarks.datasets import load_corpus
from benchmarks.harness import Bencher, BenchmarkGroup
from benchmarks.reporter import BenchmarkReporter, compression_ratio
from dictcodec import Compressor, OutputBuffer

logger = logging.getLogger("dictbench.runner")


class Codec(Protocol):
    """The training entry point of the compression component."""

    def train(self, documents: Sequence[bytes]) -> Compressor:
        """Train a compressor over the documents."""
        ...


class DbtextRunner:
    """Run the three timed scenarios and the ratio report for each dataset."""

    def __init__(
        self,
        config: BenchmarkConfig,
        codec: Codec | None = None,
        client: httpx.Client | None = None,
        quiet: bool = False,
    ):
        """Initialize the runner.

        Args:
            config: Benchmark configuration, including the datasets to run
            codec: Compression component. Defaults to ``dictcodec``.
            client: HTTP client used to fetch uncached corpora
            quiet: Only print the per-dataset ratio lines
        """
        self.config = config
        self.codec = codec or dictcodec
        self.client = client
        self.quiet = quiet
        self.reporter = BenchmarkReporter(config)

    def run(self) -> list[DatasetReport]:
        """Benchmark every configured dataset in order.

        Any failure aborts the whole run; nothing is reported for datasets
        after the failing one.
        """
        return [self.run_dataset(spec) for spec in self.config.datasets]

    def run_dataset(self, spec: DatasetSpec) -> DatasetReport:
        """Fetch, load, benchmark, and report one dataset."""
        corpus = load_corpus(spec, client=self.client)
        documents = [corpus]
        logger.info(f"Loaded {spec.name}: {len(corpus)} bytes")

        group = BenchmarkGroup(
            spec.name,
            sample_size=self.config.sample_size,
            warmup_iterations=self.config.warmup_iterations,
            filters=self.config.filters,
        )

        def train_and_compress(b: Bencher) -> None:
            def work():
                compressor = self.codec.train(documents)
                return compressor, compressor.compress_bulk(documents)

            b.iter_with_large_drop(work)

        group.bench_function("train-and-compress", train_and_compress)

        # trained once, shared by compress-only and decompress
        compressor = self.codec.train(documents)
        buffer = OutputBuffer(self.config.compress_capacity)
        group.throughput(len(corpus))

        def compress_only(b: Bencher) -> None:
            def work():
                buffer.clear()
                compressor.compress_into(corpus, buffer)

            b.iter(work)

        group.bench_function("compress-only", compress_only)

        buffer.clear()
        compressor.compress_into(corpus, buffer)
        compressed = buffer.getvalue()
        decompressor = compressor.decompressor()

        def decompress(b: Bencher) -> None:
            b.iter_with_large_drop(lambda: decompressor.decompress(compressed))

        group.bench_function("decompress", decompress)

        results = [m.to_result() for m in group.finish()]
        if not self.quiet:
            for result in results:
                self.reporter.print_result(result)

        report = self._ratio_report(spec.name, documents)
        report.results = results
        report.compress_only_size = len(compressed)
        if report.compressed_size != report.compress_only_size:
            logger.info(
                f"{spec.name}: fresh training compressed to {report.compressed_size}B, "
                f"benchmarked compressor to {report.compress_only_size}B"
            )

        self.reporter.print_ratio(report)
        return report

    def _ratio_report(self, name: str, documents: list[bytes]) -> DatasetReport:
        """Train a fresh compressor and measure how small it makes the corpus."""
        uncompressed_size = sum(len(d) for d in documents)
        compressor = self.codec.train(documents)
        compressed_size = sum(len(c) for c in compressor.compress_bulk(documents))
        return DatasetReport(
            name=name,
            uncompressed_size=uncompressed_size,
            compressed_size=compressed_size,
            compression_ratio=compression_ratio(uncompressed_size, compressed_size),
        )
