from netkit.checksum import InternetChecksum

_IP_HEADER = bytes.fromhex("450000730000400040110000c0a80001c0a800c7")


def _checksum(*chunks):
    c = InternetChecksum()
    for chunk in chunks:
        c.add(chunk)
    return c.value()


def test_rfc1071_example():
    assert _checksum(bytes.fromhex("0001f203f4f5f6f7")) == 0x220D


def test_ipv4_header_example():
    assert _checksum(_IP_HEADER) == 0xB861


def test_empty_data():
    assert _checksum(b"") == 0xFFFF


def test_odd_split_matches_whole():
    whole = _checksum(_IP_HEADER)
    assert _checksum(_IP_HEADER[:3], _IP_HEADER[3:8], _IP_HEADER[8:]) == whole
    assert _checksum(*(bytes([b]) for b in _IP_HEADER)) == whole


def test_list_of_buffers():
    c = InternetChecksum()
    c.add([_IP_HEADER[:5], _IP_HEADER[5:]])
    assert c.value() == _checksum(_IP_HEADER)


def test_including_checksum_verifies_to_zero():
    value = _checksum(_IP_HEADER)
    patched = _IP_HEADER[:10] + value.to_bytes(2, "big") + _IP_HEADER[12:]
    assert _checksum(patched) == 0


def test_initial_sum_is_included():
    data = bytes.fromhex("0001f203")
    rest = bytes.fromhex("f4f5f6f7")
    partial = InternetChecksum()
    partial.add(data)
    carried = InternetChecksum(~partial.value() & 0xFFFF)
    carried.add(rest)
    assert carried.value() == _checksum(data + rest)