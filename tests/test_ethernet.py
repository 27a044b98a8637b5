import pytest

from netkit.ethernet import (
    ETHERNET_BROADCAST,
    EthernetFrame,
    EthernetHeader,
    format_ethernet_address,
)
from netkit.parser import Parser, parse, serialize

SRC = bytes([0x02, 0, 0, 0, 0, 0x01])
DST = bytes([0x02, 0, 0, 0, 0, 0x0A])


def test_format_broadcast():
    assert format_ethernet_address(ETHERNET_BROADCAST) == "ff:ff:ff:ff:ff:ff"


def test_format_pads_with_zeros():
    assert format_ethernet_address(DST) == "02:00:00:00:00:0a"


def test_str_known_type():
    h = EthernetHeader(dst=ETHERNET_BROADCAST, src=SRC, type=EthernetHeader.TYPE_ARP)
    assert str(h) == "dst=ff:ff:ff:ff:ff:ff, src=02:00:00:00:00:01, type=ARP"


def test_str_ipv4_type():
    h = EthernetHeader(dst=DST, src=SRC, type=EthernetHeader.TYPE_IPv4)
    assert str(h).endswith("type=IPv4")


def test_str_unknown_type():
    h = EthernetHeader(dst=DST, src=SRC, type=0x1234)
    assert "[unknown type" in str(h)
    assert "IPv4" not in str(h) and "ARP" not in str(h)


def test_serialize_wire_bytes():
    h = EthernetHeader(dst=DST, src=SRC, type=EthernetHeader.TYPE_IPv4)
    wire = b"".join(serialize(h))
    assert wire == DST + SRC + b"\x08\x00"
    assert len(wire) == EthernetHeader.LENGTH


def test_header_round_trip():
    h = EthernetHeader(dst=DST, src=SRC, type=EthernetHeader.TYPE_ARP)
    out = EthernetHeader()
    assert parse(out, serialize(h))
    assert out == h


def test_truncated_header_fails():
    h = EthernetHeader(dst=DST, src=SRC, type=EthernetHeader.TYPE_ARP)
    wire = b"".join(serialize(h))
    out = EthernetHeader()
    assert not parse(out, [wire[:10]])


def test_bad_address_length_rejected():
    with pytest.raises(ValueError):
        EthernetHeader(dst=b"\x01\x02", src=SRC)


def test_frame_round_trip():
    frame = EthernetFrame(
        header=EthernetHeader(dst=DST, src=SRC, type=EthernetHeader.TYPE_IPv4),
        payload=[b"hello", b"world"],
    )
    wire = b"".join(serialize(frame))
    out = EthernetFrame()
    assert parse(out, [wire])
    assert out.header == frame.header
    assert b"".join(out.payload) == b"helloworld"


def test_frame_payload_buffers_kept_separate():
    frame = EthernetFrame(
        header=EthernetHeader(dst=DST, src=SRC, type=EthernetHeader.TYPE_IPv4),
        payload=[b"abc", b"def"],
    )
    parser = Parser(serialize(frame))
    out = EthernetFrame()
    out.parse(parser)
    assert not parser.has_error
    assert [p for p in out.payload if p] == [b"abc", b"def"]