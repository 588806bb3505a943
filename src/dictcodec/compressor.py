"""Dictionary-trained string compression on top of zstandard.

Training derives a shared dictionary (the symbol table) from one or more
documents. A trained ``Compressor`` is immutable; every document it compresses
becomes a standalone zstd frame that its ``Decompressor`` inverts exactly.
"""

import logging
from collections.abc import Sequence

import zstandard as zstd

from .buffer import OutputBuffer

logger = logging.getLogger("dictcodec.compressor")

DEFAULT_DICT_SIZE = 64 * 1024
DEFAULT_LEVEL = 3
MIN_DICT_SIZE = 256

# fastcover parameters; fixing k and d skips zstd's parameter search
SEGMENT_SIZE = 1024
DMER_SIZE = 8


def _split_samples(documents: Sequence[bytes]) -> list[bytes]:
    """Split documents into non-empty line samples for dictionary training."""
    samples: list[bytes] = []
    for doc in documents:
        samples.extend(line for line in bytes(doc).splitlines(keepends=True) if line)
    return samples


def _candidate_sizes(target: int, total_src: int) -> list[int]:
    """Descending dictionary sizes to try.

    Dictionary training fails when the dictionary is large relative to the
    sample bytes, so sizes are capped at 1/8 of the source and halved down to
    ``MIN_DICT_SIZE``.
    """
    if total_src <= 0:
        return []

    cap = max(MIN_DICT_SIZE, min(target, total_src // 8))
    sizes = []
    size = cap
    while size >= MIN_DICT_SIZE:
        sizes.append(size)
        size //= 2
    return sizes


class Decompressor:
    """Inverts the output of the ``Compressor`` it was derived from."""

    def __init__(self, dict_bytes: bytes, dict_type: int):
        self._dctx = zstd.ZstdDecompressor(
            dict_data=zstd.ZstdCompressionDict(dict_bytes, dict_type=dict_type)
        )

    def decompress(self, data: bytes) -> bytes:
        """Reconstruct the original bytes of one compressed document."""
        return self._dctx.decompress(data)


class Compressor:
    """A trained dictionary bound to one corpus.

    Build instances with ``train``. The dictionary never changes after
    construction.
    """

    def __init__(
        self,
        dict_bytes: bytes,
        dict_type: int = zstd.DICT_TYPE_AUTO,
        level: int = DEFAULT_LEVEL,
    ):
        self._dict_bytes = bytes(dict_bytes)
        self._dict_type = dict_type
        self._level = level
        self._cctx = zstd.ZstdCompressor(
            level=level,
            dict_data=zstd.ZstdCompressionDict(self._dict_bytes, dict_type=dict_type),
            write_content_size=True,
        )

    @property
    def dict_bytes(self) -> bytes:
        """The trained dictionary."""
        return self._dict_bytes

    @property
    def dict_type(self) -> int:
        return self._dict_type

    @property
    def level(self) -> int:
        return self._level

    def compress_bulk(self, documents: Sequence[bytes]) -> list[bytes]:
        """Compress each document independently.

        Args:
            documents: Documents to compress

        Returns:
            One compressed buffer per document, in input order
        """
        return [self._cctx.compress(doc) for doc in documents]

    def compress_into(self, data: bytes, dest: OutputBuffer) -> int:
        """Compress ``data`` and append the result to ``dest``.

        ``dest`` must have enough spare capacity for the compressed frame.
        The capacity is checked before anything is written to ``dest``.

        zstandard cannot compress into a caller-owned buffer, so each call
        still allocates the compressed frame and then copies it into
        ``dest``; the capacity check runs after compression. Timings that
        use this entry point include that allocation and copy.

        Args:
            data: Document to compress
            dest: Pre-reserved destination buffer

        Returns:
            Number of bytes appended

        Raises:
            CapacityError: If ``dest`` cannot hold the output. ``dest`` is
                left unchanged.
        """
        return dest.append(self._cctx.compress(data))

    def decompressor(self) -> Decompressor:
        """Return a ``Decompressor`` bound to this dictionary."""
        return Decompressor(self._dict_bytes, self._dict_type)


def train(
    documents: Sequence[bytes],
    dict_size: int = DEFAULT_DICT_SIZE,
    level: int = DEFAULT_LEVEL,
) -> Compressor:
    """Train a ``Compressor`` over one or more documents.

    Tries descending dictionary sizes. When zstd cannot train a dictionary at
    any size (too few or too uniform samples), the tail of the corpus is used
    as a raw-content dictionary instead.

    Args:
        documents: Training documents
        dict_size: Target dictionary size in bytes
        level: zstd compression level

    Returns:
        Trained Compressor

    Raises:
        ValueError: If the documents hold no bytes
    """
    samples = _split_samples(documents)
    total_src = sum(len(s) for s in samples)
    if total_src == 0:
        raise ValueError("train: documents are empty")

    last_err: zstd.ZstdError | None = None
    for size in _candidate_sizes(dict_size, total_src):
        try:
            trained = zstd.train_dictionary(size, samples, k=SEGMENT_SIZE, d=DMER_SIZE, level=level)
        except zstd.ZstdError as e:
            last_err = e
            continue
        logger.debug(f"Trained {len(trained)}B dictionary from {len(samples)} samples")
        return Compressor(trained.as_bytes(), zstd.DICT_TYPE_AUTO, level)

    logger.warning(f"Dictionary training failed ({last_err}), using raw-content dictionary")
    tail = b"".join(bytes(doc) for doc in documents)[-dict_size:]
    return Compressor(tail, zstd.DICT_TYPE_RAWCONTENT, level)
