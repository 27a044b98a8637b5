import errno
import os

import pytest

from netkit.errors import TaggedError, UnixError, check_system_call, notnull


def test_tagged_error_message_and_code():
    err = TaggedError("getaddrinfo(host, 80)", 7, "name unknown")
    assert str(err) == "getaddrinfo(host, 80): name unknown"
    assert err.error_code == 7
    assert err.attempt == "getaddrinfo(host, 80)"


def test_unix_error_uses_system_message():
    err = UnixError("open", errno.ENOENT)
    assert str(err) == "open: " + os.strerror(errno.ENOENT)
    assert err.error_code == errno.ENOENT
    assert isinstance(err, TaggedError)


def test_check_system_call_passes_non_negative():
    assert check_system_call("read", 5) == 5
    assert check_system_call("read", 0) == 0


def test_check_system_call_raises_on_negative():
    with pytest.raises(UnixError) as info:
        check_system_call("close", -errno.EBADF)
    assert info.value.error_code == errno.EBADF
    assert str(info.value).startswith("close: ")


def test_notnull_returns_value():
    assert notnull("lookup", 0) == 0
    assert notnull("lookup", "x") == "x"


def test_notnull_raises_on_none():
    with pytest.raises(RuntimeError, match="lookup: returned null pointer"):
        notnull("lookup", None)