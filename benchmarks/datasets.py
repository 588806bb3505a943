"""Benchmark corpus acquisition and local caching.

A corpus is downloaded once and cached on disk. An existing cache file is
trusted as-is: no checksum or freshness check is performed.
"""

import logging
from pathlib import Path
from typing import BinaryIO

import httpx

from benchmarks.config import DatasetSpec

logger = logging.getLogger("dictbench.datasets")


class DatasetFetchError(Exception):
    """Raised when a corpus cannot be fetched or cached."""


class DirectoryCreationError(DatasetFetchError):
    """The cache directory could not be created."""


class NetworkTransferError(DatasetFetchError):
    """The download failed."""


class FileWriteError(DatasetFetchError):
    """The cache file could not be created or written."""


def _download(url: str, client: httpx.Client | None) -> bytes:
    """Fetch ``url`` in a single blocking request, buffering the whole body.

    ``file://`` URLs are read from local disk, so a fixture corpus can stand
    in for a remote one.
    """
    try:
        parsed = httpx.URL(url)
        if parsed.scheme == "file":
            try:
                return Path(parsed.path).read_bytes()
            except OSError as e:
                raise NetworkTransferError(f"Failed to read {url}: {e}") from e
        if client is None:
            with httpx.Client(follow_redirects=True, timeout=None) as owned:
                response = owned.get(url)
        else:
            response = client.get(url)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise NetworkTransferError(f"Failed to download {url}: {e}") from e
    return response.content


def _write_body(file_obj: BinaryIO, body: bytes) -> None:
    file_obj.write(body)


def ensure_cached(
    source_url: str,
    cache_path: Path | str,
    client: httpx.Client | None = None,
) -> None:
    """Make sure ``cache_path`` holds the content of ``source_url``.

    Missing parent directories are created first. If the file already exists
    nothing else happens. Otherwise the body is downloaded and written in one
    go; a failed write removes the file so no partial corpus is left behind.

    Args:
        source_url: Corpus URL
        cache_path: Local cache file
        client: HTTP client to use. A short-lived one is created if None.

    Raises:
        DirectoryCreationError: If the parent directory cannot be created
        NetworkTransferError: If the download fails
        FileWriteError: If the cache file cannot be created or written
    """
    target = Path(cache_path)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationError(f"Cannot create {target.parent}: {e}") from e

    if target.exists():
        logger.debug(f"Using cached corpus {target}")
        return

    logger.info(f"Downloading {source_url} -> {target}")
    body = _download(source_url, client)

    try:
        file_obj = open(target, "wb")
    except OSError as e:
        raise FileWriteError(f"Cannot create {target}: {e}") from e

    # closing flushes, so a failed flush must also clean up
    try:
        with file_obj:
            _write_body(file_obj, body)
    except OSError as e:
        target.unlink(missing_ok=True)
        logger.error(f"Write to {target} failed, removed partial file")
        raise FileWriteError(f"Cannot write {target}: {e}") from e

    logger.info(f"Cached {len(body)} bytes at {target}")


def load_corpus(spec: DatasetSpec, client: httpx.Client | None = None) -> bytes:
    """Ensure the dataset is cached and read it fully into memory.

    Args:
        spec: Dataset to load
        client: HTTP client passed through to ``ensure_cached``

    Returns:
        Raw corpus bytes
    """
    ensure_cached(spec.source_url, spec.cache_path, client=client)
    return spec.cache_path.read_bytes()
