"""A reference-counted handle to a kernel file descriptor."""

from __future__ import annotations

import errno
import os
import sys
from collections.abc import Callable, Iterable
from typing import TypeVar

from netkit.errors import UnixError

T = TypeVar("T")

_RETRY_ERRNOS = (errno.EAGAIN, errno.EINPROGRESS)


class _FDWrapper:
    """The shared state of one kernel file descriptor; closes it when discarded."""

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise ValueError(f"invalid fd number:{fd}")
        self.fd = fd
        self.eof = False
        self.closed = False
        self.non_blocking = False
        self.read_count = 0
        self.write_count = 0
        self.non_blocking = not self.check("fcntl", lambda: os.get_blocking(fd), True)

    def check(self, attempt: str, call: Callable[[], T], would_block: T) -> T:
        """Run ``call``; return ``would_block`` if a non-blocking call would block."""
        try:
            return call()
        except OSError as exc:
            if self.non_blocking and exc.errno in _RETRY_ERRNOS:
                return would_block
            raise UnixError(attempt, exc.errno or 0) from exc

    def close(self) -> None:
        self.check("close", lambda: os.close(self.fd), None)
        self.eof = self.closed = True

    def __del__(self) -> None:
        if getattr(self, "closed", True):
            return
        try:
            self.close()
        except Exception as exc:  # never raise from a finalizer
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


class FileDescriptor:
    """A handle on a file descriptor; copies made with duplicate() share it."""

    READ_BUFFER_SIZE = 16384

    def __init__(self, fd: int) -> None:
        self._internal = _FDWrapper(fd)

    @classmethod
    def _from_wrapper(cls, wrapper: _FDWrapper) -> FileDescriptor:
        handle = cls.__new__(cls)
        handle._internal = wrapper
        return handle

    def _check_system_call(self, attempt: str, call: Callable[[], T], would_block: T) -> T:
        return self._internal.check(attempt, call, would_block)

    def _set_eof(self) -> None:
        self._internal.eof = True

    def _register_read(self) -> None:
        self._internal.read_count += 1

    def _register_write(self) -> None:
        self._internal.write_count += 1

    def read(self) -> bytes:
        """Read up to READ_BUFFER_SIZE bytes; empty at EOF or if a non-blocking read would block."""
        data = self._check_system_call("read", lambda: os.read(self.fd_num, self.READ_BUFFER_SIZE), None)
        if data is None:
            return b""
        self._register_read()
        if not data:
            self._set_eof()
        if len(data) > self.READ_BUFFER_SIZE:
            raise RuntimeError("read() read more than requested")
        return data

    def read_into(self, sizes: Iterable[int]) -> list[bytes]:
        """Scatter-read into buffers of the given capacities.

        The last buffer's capacity is always READ_BUFFER_SIZE. The result holds one
        entry per buffer, each trimmed to the bytes it received.
        """
        capacities = list(sizes)
        if not capacities:
            return []
        capacities[-1] = self.READ_BUFFER_SIZE
        buffers = [bytearray(size) for size in capacities]
        bytes_read = self._check_system_call("read", lambda: os.readv(self.fd_num, buffers), None)
        if bytes_read is None:
            return [b""] * len(buffers)
        self._register_read()
        if bytes_read > sum(capacities):
            raise RuntimeError("read() read more than requested")
        result = []
        remaining = bytes_read
        for buf in buffers:
            take = min(remaining, len(buf))
            result.append(bytes(buf[:take]))
            remaining -= take
        return result

    def write(self, data: bytes | Iterable[bytes]) -> int:
        """Write one buffer or a sequence of buffers; return the number of bytes written."""
        if isinstance(data, (bytes, bytearray, memoryview)):
            buffers = [bytes(data)]
        else:
            buffers = [bytes(chunk) for chunk in data]
        total = sum(len(b) for b in buffers)
        written = self._check_system_call("writev", lambda: os.writev(self.fd_num, buffers), 0)
        self._register_write()
        if written == 0 and total != 0:
            raise RuntimeError("write returned 0 given non-empty input buffer")
        if written > total:
            raise RuntimeError("write wrote more than length of input buffer")
        return written

    def close(self) -> None:
        """Close the underlying descriptor."""
        self._internal.close()

    def duplicate(self) -> FileDescriptor:
        """Another handle sharing the same descriptor and its state."""
        return self._from_wrapper(self._internal)

    def set_blocking(self, blocking: bool) -> None:
        """Switch between blocking and non-blocking mode."""
        self._check_system_call("fcntl", lambda: os.set_blocking(self.fd_num, blocking), None)
        self._internal.non_blocking = not blocking

    def size(self) -> int:
        """Size in bytes of the file behind the descriptor."""
        return self._check_system_call("fstat", lambda: os.fstat(self.fd_num).st_size, 0)

    @property
    def fd_num(self) -> int:
        """The underlying descriptor number."""
        return self._internal.fd

    @property
    def eof(self) -> bool:
        """True once a read has reached end of file, or after close."""
        return self._internal.eof

    @property
    def closed(self) -> bool:
        """True once the descriptor has been closed."""
        return self._internal.closed

    @property
    def read_count(self) -> int:
        """Number of reads performed."""
        return self._internal.read_count

    @property
    def write_count(self) -> int:
        """Number of writes performed."""
        return self._internal.write_count

    def __enter__(self) -> FileDescriptor:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.closed:
            self.close()