import ipaddress

import pytest

from netkit.checksum import InternetChecksum
from netkit.ipv4 import IPv4Datagram, IPv4Header
from netkit.parser import Parser, parse, serialize

SRC = int(ipaddress.IPv4Address("10.0.0.1"))
DST = int(ipaddress.IPv4Address("10.0.0.2"))


def _header(**kwargs):
    fields = dict(src=SRC, dst=DST, length=IPv4Header.LENGTH + 8, identification=7)
    fields.update(kwargs)
    h = IPv4Header(**fields)
    h.compute_checksum()
    return h


def _wire(h):
    return b"".join(serialize(h))


def test_serialized_length():
    assert len(_wire(_header())) == IPv4Header.LENGTH


def test_checksum_over_header_verifies():
    check = InternetChecksum()
    check.add(_wire(_header()))
    assert check.value() == 0


def test_known_header_parses():
    wire = bytes.fromhex("450000730000400040 11b861c0a80001c0a800c7".replace(" ", ""))
    h = IPv4Header()
    assert parse(h, [wire])
    assert h.cksum == 0xB861
    assert h.df and not h.mf
    assert h.ttl == 64
    assert str(ipaddress.IPv4Address(h.src)) == "192.168.0.1"


def test_round_trip():
    h = _header(tos=3, ttl=33, mf=True, offset=5)
    out = IPv4Header()
    assert parse(out, [_wire(h)])
    assert out == h


def test_bad_checksum_fails():
    h = _header()
    h.cksum ^= 0x0101
    out = IPv4Header()
    assert not parse(out, [_wire(h)])


def test_serialize_wrong_version_raises():
    h = IPv4Header(ver=6)
    with pytest.raises(ValueError):
        serialize(h)


def test_parse_wrong_version_raises():
    wire = bytearray(_wire(_header()))
    wire[0] = (6 << 4) | 5
    with pytest.raises(ValueError):
        parse(IPv4Header(), [bytes(wire)])


def test_short_header_length_fails():
    wire = bytearray(_wire(_header()))
    wire[0] = (4 << 4) | 4
    assert not parse(IPv4Header(), [bytes(wire)])


def test_options_are_skipped():
    h = _header(hlen=6)
    wire = _wire(h) + b"\x01\x01\x01\x01" + b"xyz"
    dgram = IPv4Datagram()
    parser = Parser([wire])
    dgram.parse(parser)
    assert not parser.has_error
    assert dgram.header.hlen == 6
    assert b"".join(dgram.payload) == b"xyz"


def test_payload_length():
    h = IPv4Header(length=IPv4Header.LENGTH + 8)
    assert h.payload_length() == 8


def test_pseudo_checksum_symmetric_and_additive():
    a = _header()
    b = _header(src=DST, dst=SRC)
    assert a.pseudo_checksum() == b.pseudo_checksum()
    c = _header(proto=a.proto + 1)
    assert c.pseudo_checksum() == a.pseudo_checksum() + 1


def test_str_format():
    h = IPv4Header(src=SRC, dst=DST, length=0x54, ttl=64)
    assert str(h) == "IPv4, len=54, protocol=6, src=10.0.0.1, dst=10.0.0.2"


def test_str_shows_low_ttl():
    h = IPv4Header(src=SRC, dst=DST, ttl=5)
    assert "ttl=5, " in str(h)
    assert "ttl=" not in str(IPv4Header(ttl=IPv4Header.DEFAULT_TTL))


def test_datagram_round_trip():
    dgram = IPv4Datagram(header=_header(), payload=[b"abcd", b"efgh"])
    out = IPv4Datagram()
    assert parse(out, [b"".join(serialize(dgram))])
    assert out.header == dgram.header
    assert b"".join(out.payload) == b"abcdefgh"