"""The Internet checksum (one's-complement sum of 16-bit words)."""

from __future__ import annotations

from collections.abc import Iterable

_MASK32 = 0xFFFFFFFF


class InternetChecksum:
    """Accumulates bytes and yields the 16-bit Internet checksum."""

    def __init__(self, initial: int = 0) -> None:
        self._sum = initial & _MASK32
        self._parity = False

    def add(self, data: bytes | Iterable[bytes]) -> None:
        """Add a buffer, or each buffer of an iterable, to the running sum."""
        if not isinstance(data, (bytes, bytearray, memoryview)):
            for chunk in data:
                self.add(chunk)
            return
        data = bytes(data)
        # Bytes at even positions in the overall stream are high-order.
        first = 1 if self._parity else 0
        high = sum(data[first::2])
        low = sum(data[1 - first::2])
        self._sum = (self._sum + (high << 8) + low) & _MASK32
        if len(data) % 2:
            self._parity = not self._parity

    def value(self) -> int:
        """The checksum of everything added so far."""
        ret = self._sum
        while ret > 0xFFFF:
            ret = (ret >> 16) + (ret & 0xFFFF)
        return ~ret & 0xFFFF