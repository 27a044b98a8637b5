"""Big-endian parsing and serialization over lists of byte buffers."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import Any, Protocol


class BufferList:
    """A queue of byte buffers that can be consumed from the front."""

    def __init__(self, buffers: Iterable[bytes] = ()) -> None:
        self._size = 0
        self._buffers: deque[bytes] = deque()
        self._skip = 0
        for data in buffers:
            self.append(data)

    @property
    def size(self) -> int:
        """Number of bytes still held."""
        return self._size

    def __len__(self) -> int:
        return self._size

    @property
    def empty(self) -> bool:
        """True when no bytes remain."""
        return self._size == 0

    def peek(self) -> bytes:
        """The unconsumed part of the front buffer."""
        if not self._buffers:
            raise IndexError("peek on empty BufferList")
        return self._buffers[0][self._skip:]

    def remove_prefix(self, length: int) -> None:
        """Drop up to ``length`` bytes from the front."""
        while length and self._buffers:
            now = min(length, len(self._buffers[0]) - self._skip)
            self._skip += now
            length -= now
            self._size -= now
            if self._skip == len(self._buffers[0]):
                self._buffers.popleft()
                self._skip = 0

    def append(self, data: bytes) -> None:
        """Add a buffer at the back."""
        data = bytes(data)
        self._size += len(data)
        self._buffers.append(data)

    def dump_all(self) -> list[bytes]:
        """Remove and return every remaining buffer."""
        if self.empty:
            self._buffers.clear()
            self._skip = 0
            return []
        first = self._buffers.popleft()[self._skip:]
        out = [first, *self._buffers]
        self._buffers.clear()
        self._skip = 0
        self._size = 0
        return out

    def dump_all_joined(self) -> bytes:
        """Remove every remaining byte and return it as one buffer."""
        parts = self.dump_all()
        if len(parts) == 1:
            return parts[0]
        return b"".join(parts)


class Parser:
    """Reads big-endian integers and byte strings, recording an error on underflow."""

    def __init__(self, buffers: Iterable[bytes]) -> None:
        self._input = BufferList(buffers)
        self._error = False

    @property
    def input(self) -> BufferList:
        """The remaining unparsed input."""
        return self._input

    @property
    def has_error(self) -> bool:
        """True once any read has failed or the error was set explicitly."""
        return self._error

    def set_error(self) -> None:
        """Mark the parse as failed."""
        self._error = True

    def remove_prefix(self, n: int) -> None:
        """Skip ``n`` bytes of input."""
        self._input.remove_prefix(n)

    def _check_size(self, size: int) -> None:
        if size > self._input.size:
            self._error = True

    def integer(self, size: int) -> int:
        """Read an unsigned big-endian integer of ``size`` bytes (0 on error)."""
        data = self.string(size)
        if self._error:
            return 0
        return int.from_bytes(data, "big")

    def string(self, size: int) -> bytes:
        """Read exactly ``size`` bytes (empty on error)."""
        self._check_size(size)
        if self._error:
            return b""
        parts = []
        remaining = size
        while remaining:
            view = self._input.peek()[:remaining]
            parts.append(view)
            self._input.remove_prefix(len(view))
            remaining -= len(view)
        return b"".join(parts)

    def all_remaining(self) -> list[bytes]:
        """Take every remaining buffer."""
        return self._input.dump_all()

    def all_remaining_joined(self) -> bytes:
        """Take every remaining byte as a single buffer."""
        return self._input.dump_all_joined()


class Serializer:
    """Writes big-endian integers and whole buffers into a list of buffers."""

    def __init__(self, initial: bytes = b"") -> None:
        self._output: list[bytes] = []
        self._buffer = bytearray(initial)

    def integer(self, value: int, size: int) -> None:
        """Append ``value`` as ``size`` big-endian bytes, truncating higher bits."""
        self._buffer += (value % (1 << (8 * size))).to_bytes(size, "big")

    def buffer(self, data: bytes) -> None:
        """Append a whole buffer after flushing pending integer bytes."""
        self.flush()
        self._output.append(bytes(data))

    def buffers(self, items: Iterable[bytes]) -> None:
        """Append each buffer in turn."""
        for data in items:
            self.buffer(data)

    def flush(self) -> None:
        """Move pending integer bytes into the output as one buffer."""
        self._output.append(bytes(self._buffer))
        self._buffer.clear()

    def output(self) -> list[bytes]:
        """Flush and return the buffers written so far."""
        self.flush()
        return list(self._output)


class _Serializable(Protocol):
    def serialize(self, serializer: Serializer) -> None: ...


class _Parsable(Protocol):
    def parse(self, parser: Parser) -> Any: ...


def serialize(obj: _Serializable) -> list[bytes]:
    """Serialize an object that has a ``serialize(serializer)`` method."""
    s = Serializer()
    obj.serialize(s)
    return s.output()


def parse(obj: _Parsable, buffers: Iterable[bytes]) -> bool:
    """Parse ``buffers`` into ``obj``; return True if no error occurred."""
    p = Parser(buffers)
    obj.parse(p)
    return not p.has_error