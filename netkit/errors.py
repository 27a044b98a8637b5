"""Exceptions that carry the attempted operation and an error code."""

from __future__ import annotations

import os
from typing import TypeVar

T = TypeVar("T")


class TaggedError(RuntimeError):
    """An error tagged with the operation that was attempted and a numeric code."""

    def __init__(self, attempt: str, error_code: int, message: str) -> None:
        self.attempt = attempt
        self.message = message
        self._error_code = error_code
        super().__init__(f"{attempt}: {message}")

    @property
    def error_code(self) -> int:
        """The numeric error code reported by the failed operation."""
        return self._error_code


class UnixError(TaggedError):
    """An operating-system error, described with the system's message for its errno."""

    def __init__(self, attempt: str, error_number: int) -> None:
        super().__init__(attempt, error_number, os.strerror(error_number))


def check_system_call(attempt: str, return_value: int) -> int:
    """Return a non-negative result unchanged; raise UnixError for a negative one.

    A negative return value carries the negated error number, as system calls
    report it at the kernel boundary.
    """
    if return_value >= 0:
        return return_value
    raise UnixError(attempt, -return_value)


def notnull(context: str, value: T | None) -> T:
    """Return ``value``, or raise RuntimeError if it is None."""
    if value is None:
        raise RuntimeError(f"{context}: returned null pointer")
    return value