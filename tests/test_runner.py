"""Tests for the dbtext benchmark runner, reporting, and CLI."""

import httpx
import pytest

import benchmarks.__main__ as cli
import dictcodec
from benchmarks.config import BenchmarkConfig, DatasetSpec
from benchmarks.datasets import NetworkTransferError
from benchmarks.reporter import compression_ratio, format_ratio, format_ratio_line
from benchmarks.runners import DbtextRunner

CORPUS = b"".join(
    f"order {i % 50} shipped to customer {i % 17} via route {i % 7}\n".encode() for i in range(2000)
)


class RecordingCompressor:
    """Delegates to a real compressor and logs raw entry point calls."""

    def __init__(self, inner: dictcodec.Compressor, log: list):
        self.inner = inner
        self.log = log

    def compress_bulk(self, documents):
        return self.inner.compress_bulk(documents)

    def compress_into(self, data, dest):
        self.log.append(self)
        return self.inner.compress_into(data, dest)

    def decompressor(self):
        return self.inner.decompressor()


class CountingCodec:
    def __init__(self):
        self.trained: list[RecordingCompressor] = []
        self.dicts: list[bytes] = []
        self.compress_into_log: list[RecordingCompressor] = []

    @property
    def train_calls(self) -> int:
        return len(self.trained)

    def train(self, documents):
        inner = dictcodec.train(documents)
        self.dicts.append(inner.dict_bytes)
        compressor = RecordingCompressor(inner, self.compress_into_log)
        self.trained.append(compressor)
        return compressor


def _serve(content: bytes = CORPUS, status_code: int = 200) -> httpx.Client:
    return httpx.Client(
        transport=httpx.MockTransport(lambda request: httpx.Response(status_code, content=content))
    )


def _config(tmp_path, *names: str, **overrides) -> BenchmarkConfig:
    datasets = tuple(
        DatasetSpec(
            name=f"test/{name}",
            source_url=f"https://example.test/{name}",
            cache_path=tmp_path / "data" / name,
        )
        for name in (names or ("orders",))
    )
    settings = {"sample_size": 2, "warmup_iterations": 0, "compress_capacity": 1024 * 1024}
    settings.update(overrides)
    return BenchmarkConfig(datasets=datasets, **settings)


class TestRatioFormatting:
    def test_four_to_one(self):
        assert format_ratio(1_000_000, 250_000) == "4.00:1"

    def test_two_decimals(self):
        assert format_ratio(1000, 300) == "3.33:1"

    def test_ratio_value(self):
        assert compression_ratio(1_000_000, 250_000) == pytest.approx(4.0)

    def test_zero_compressed_size_rejected(self):
        with pytest.raises(ValueError):
            compression_ratio(10, 0)

    def test_ratio_line(self):
        line = format_ratio_line("dbtext/urls", 1_000_000, 250_000)
        assert line == "compressed dbtext/urls 1000000 => 250000B (compression factor 4.00:1)"


class TestDbtextRunner:
    def test_runs_all_scenarios_in_order(self, tmp_path, capsys):
        runner = DbtextRunner(_config(tmp_path), client=_serve())

        reports = runner.run()

        assert len(reports) == 1
        report = reports[0]
        assert [r.scenario_name for r in report.results] == [
            "train-and-compress",
            "compress-only",
            "decompress",
        ]
        assert all(r.iterations == 2 for r in report.results)

        out = capsys.readouterr().out
        assert f"compressed test/orders {len(CORPUS)} => {report.compressed_size}B" in out
        assert "compression factor" in out

    def test_throughput_on_compress_and_decompress(self, tmp_path):
        report = DbtextRunner(_config(tmp_path), client=_serve(), quiet=True).run()[0]

        by_name = {r.scenario_name: r for r in report.results}
        assert by_name["train-and-compress"].throughput_bytes is None
        assert by_name["compress-only"].throughput_bytes == len(CORPUS)
        assert by_name["decompress"].throughput_bytes == len(CORPUS)

    def test_ratio_report(self, tmp_path):
        report = DbtextRunner(_config(tmp_path), client=_serve(), quiet=True).run()[0]

        assert report.uncompressed_size == len(CORPUS)
        assert 0 < report.compressed_size < len(CORPUS)
        assert report.compression_ratio == pytest.approx(len(CORPUS) / report.compressed_size)
        assert report.compress_only_size is not None

    def test_compress_only_trains_once(self, tmp_path):
        codec = CountingCodec()
        config = _config(tmp_path, filters=["compress-only"], sample_size=3, warmup_iterations=1)

        DbtextRunner(config, codec=codec, client=_serve(), quiet=True).run()

        # one for the compress-only scenario, one for the ratio report
        assert codec.train_calls == 2
        benchmarked = codec.trained[0]
        # warmup + samples + the fill before decompress
        assert len(codec.compress_into_log) == 1 + 3 + 1
        assert all(c is benchmarked for c in codec.compress_into_log)
        assert benchmarked.inner.dict_bytes == codec.dicts[0]

    def test_train_and_compress_trains_every_iteration(self, tmp_path):
        codec = CountingCodec()
        config = _config(tmp_path, filters=["train-and-compress"], sample_size=3, warmup_iterations=1)

        DbtextRunner(config, codec=codec, client=_serve(), quiet=True).run()

        assert codec.train_calls == 4 + 2

    def test_datasets_run_sequentially(self, tmp_path, capsys):
        config = _config(tmp_path, "first", "second", sample_size=1)

        reports = DbtextRunner(config, client=_serve(), quiet=True).run()

        assert [r.name for r in reports] == ["test/first", "test/second"]
        lines = [line for line in capsys.readouterr().out.splitlines() if line.startswith("compressed")]
        assert len(lines) == 2
        assert lines[0].startswith("compressed test/first")

    def test_uses_cache_without_network(self, tmp_path):
        config = _config(tmp_path, sample_size=1)
        spec = config.datasets[0]
        spec.cache_path.parent.mkdir(parents=True)
        spec.cache_path.write_bytes(CORPUS)

        def no_network(request):
            raise AssertionError("corpus should come from the cache")

        client = httpx.Client(transport=httpx.MockTransport(no_network))
        report = DbtextRunner(config, client=client, quiet=True).run()[0]

        assert report.uncompressed_size == len(CORPUS)

    def test_fetch_failure_aborts_run(self, tmp_path, capsys):
        config = _config(tmp_path, "first", "second")

        with pytest.raises(NetworkTransferError):
            DbtextRunner(config, client=_serve(status_code=500), quiet=True).run()

        assert "compressed" not in capsys.readouterr().out
        assert not config.datasets[0].cache_path.exists()

    def test_low_entropy_corpus_end_to_end(self, tmp_path):
        phrase_corpus = b"the quick brown fox jumps over the lazy dog. " * 200
        config = _config(tmp_path, sample_size=1)

        report = DbtextRunner(config, client=_serve(phrase_corpus), quiet=True).run()[0]

        assert report.compressed_size < report.uncompressed_size
        assert report.compression_ratio > 1.0


class TestCli:
    def test_defaults(self):
        args = cli.parse_args([])
        assert args.filters == []
        assert args.sample_size == 10
        assert args.datasets is None
        assert args.output_dir is None

    def test_filters_and_datasets(self):
        args = cli.parse_args(["compress-only", "--datasets", "dbtext/urls", "--sample-size", "3"])
        assert args.filters == ["compress-only"]
        assert args.datasets == ["dbtext/urls"]
        assert args.sample_size == 3

    def test_fetch_error_exit_code(self, monkeypatch, capsys):
        class FailingRunner:
            def __init__(self, config, quiet=False):
                self.config = config

            def run(self):
                raise NetworkTransferError("Failed to download https://example.test: 503")

        monkeypatch.setattr(cli, "DbtextRunner", FailingRunner)

        assert cli.main(["--quiet"]) == 1
        assert "ERROR: Failed to download" in capsys.readouterr().err

    def test_writes_reports_to_output_dir(self, tmp_path, monkeypatch):
        seen = {}

        class StubRunner:
            def __init__(self, config, quiet=False):
                seen["config"] = config

            def run(self):
                return []

        monkeypatch.setattr(cli, "DbtextRunner", StubRunner)
        out_dir = tmp_path / "out"

        assert cli.main(["--quiet", "--datasets", "dbtext/urls", "--output-dir", str(out_dir)]) == 0
        assert [spec.name for spec in seen["config"].datasets] == ["dbtext/urls"]
        assert (out_dir / "results.json").exists()
        assert (out_dir / "results.csv").exists()
