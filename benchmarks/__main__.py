"""CLI entry point for benchmark suite."""

import argparse
import logging
import sys
from pathlib import Path

from .config import DEFAULT_DATASETS, BenchmarkConfig
from .datasets import DatasetFetchError
from .reporter import BenchmarkReporter
from .runners import DbtextRunner


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="dictcodec Benchmark Suite",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m benchmarks                            # Run all datasets and scenarios
  python -m benchmarks compress-only              # Only ids containing "compress-only"
  python -m benchmarks --datasets dbtext/urls     # One dataset
  python -m benchmarks --output-dir bench_out     # Also write JSON and CSV
        """,
    )

    parser.add_argument(
        "filters",
        nargs="*",
        default=[],
        help="Run only scenarios whose 'dataset/scenario' id contains one of these",
    )

    parser.add_argument(
        "--datasets",
        nargs="+",
        choices=[spec.name for spec in DEFAULT_DATASETS],
        default=None,
        help="Datasets to benchmark (default: all)",
    )

    parser.add_argument(
        "--sample-size",
        type=int,
        default=10,
        help="Timed iterations per scenario (default: 10)",
    )

    parser.add_argument(
        "--warmup",
        type=int,
        default=1,
        help="Untimed iterations before sampling (default: 1)",
    )

    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for JSON and CSV results (default: none written)",
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only print the compression ratio lines",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log downloads and per-scenario progress",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    datasets = DEFAULT_DATASETS
    if args.datasets:
        datasets = tuple(spec for spec in DEFAULT_DATASETS if spec.name in args.datasets)

    config = BenchmarkConfig(
        datasets=datasets,
        sample_size=args.sample_size,
        warmup_iterations=args.warmup,
        filters=args.filters,
        output_dir=args.output_dir,
    )

    if not args.quiet:
        print("dictcodec Benchmark Suite")
        print(f"  Datasets: {[spec.name for spec in config.datasets]}")
        print(f"  Samples: {config.sample_size} (+{config.warmup_iterations} warmup)")
        print()

    runner = DbtextRunner(config, quiet=args.quiet)
    try:
        reports = runner.run()
    except DatasetFetchError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if config.output_dir is not None:
        reporter = BenchmarkReporter(config)
        json_path = reporter.write_json(reports)
        csv_path = reporter.write_csv(reports)
        if not args.quiet:
            reporter.print_console_summary(reports)
            print("\nResults written to:")
            print(f"  JSON: {json_path}")
            print(f"  CSV:  {csv_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
