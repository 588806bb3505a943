"""Benchmark runners for the compression scenarios."""

from .dbtext import Codec, DbtextRunner

__all__ = [
    "Codec",
    "DbtextRunner",
]
