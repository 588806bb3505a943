"""Pre-reserved destination buffer for the raw compression entry point."""


class CapacityError(ValueError):
    """Raised when a destination buffer lacks room for the compressed bytes."""


class OutputBuffer:
    """Fixed-capacity byte buffer with a fill cursor.

    The backing storage is allocated once; ``clear()`` only resets the fill
    length, so the buffer can be reused across benchmark iterations without
    reallocating.
    """

    def __init__(self, capacity: int):
        if capacity < 0:
            raise ValueError(f"capacity must be non-negative, got {capacity}")
        self._data = bytearray(capacity)
        self._length = 0

    @property
    def capacity(self) -> int:
        """Total reserved bytes."""
        return len(self._data)

    @property
    def remaining(self) -> int:
        """Spare capacity after the current fill."""
        return len(self._data) - self._length

    def __len__(self) -> int:
        return self._length

    def clear(self) -> None:
        """Reset the fill length, keeping the reserved storage."""
        self._length = 0

    def append(self, chunk: bytes) -> int:
        """Copy ``chunk`` after the current fill.

        Raises:
            CapacityError: If ``chunk`` does not fit. The buffer is unchanged.
        """
        size = len(chunk)
        if size > self.remaining:
            raise CapacityError(
                f"need {size} bytes but only {self.remaining} of {self.capacity} remain"
            )
        self._data[self._length : self._length + size] = chunk
        self._length += size
        return size

    def view(self) -> memoryview:
        """Zero-copy view of the filled bytes."""
        return memoryview(self._data)[: self._length]

    def getvalue(self) -> bytes:
        """Copy of the filled bytes."""
        return bytes(self._data[: self._length])
