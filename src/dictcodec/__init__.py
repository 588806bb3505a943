"""dictcodec: dictionary-trained string compression."""

__version__ = "0.1.0"

from .buffer import CapacityError, OutputBuffer
from .compressor import (
    DEFAULT_DICT_SIZE,
    DEFAULT_LEVEL,
    Compressor,
    Decompressor,
    train,
)

__all__ = [
    # Training
    "train",
    "Compressor",
    "Decompressor",
    "DEFAULT_DICT_SIZE",
    "DEFAULT_LEVEL",
    # Raw entry point
    "OutputBuffer",
    "CapacityError",
]
