"""IPv4 headers and datagrams (IP options are skipped, not interpreted)."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from typing import ClassVar

from netkit.checksum import InternetChecksum
from netkit.parser import Parser, Serializer


@dataclass
class IPv4Header:
    """An IPv4 datagram header."""

    LENGTH: ClassVar[int] = 20
    DEFAULT_TTL: ClassVar[int] = 128
    PROTO_TCP: ClassVar[int] = 6

    ver: int = 4
    hlen: int = 5
    tos: int = 0
    length: int = 0
    identification: int = 0
    df: bool = True
    mf: bool = False
    offset: int = 0
    ttl: int = 128
    proto: int = 6
    cksum: int = 0
    src: int = 0
    dst: int = 0

    def payload_length(self) -> int:
        """Length of the payload: total length minus header length."""
        return (self.length - 4 * self.hlen) & 0xFFFF

    def pseudo_checksum(self) -> int:
        """The pseudo-header's contribution to a TCP checksum."""
        total = (self.src >> 16) + (self.src & 0xFFFF)
        total += (self.dst >> 16) + (self.dst & 0xFFFF)
        total += self.proto
        total += self.payload_length()
        return total & 0xFFFFFFFF

    def compute_checksum(self) -> None:
        """Set ``cksum`` to the correct value for the other fields."""
        self.cksum = 0
        s = Serializer()
        self.serialize(s)
        check = InternetChecksum()
        check.add(s.output())
        self.cksum = check.value()

    def __str__(self) -> str:
        ttl_part = "" if self.ttl >= 10 else f"ttl={self.ttl}, "
        return (
            f"IPv{self.ver:x}, len={self.length:x}, protocol={self.proto:x}, {ttl_part}"
            f"src={ipaddress.IPv4Address(self.src)}, dst={ipaddress.IPv4Address(self.dst)}"
        )

    def parse(self, parser: Parser) -> None:
        """Read the header, skip any options and verify the checksum.

        Raises ValueError if the version read is not 4.
        """
        first_byte = parser.integer(1)
        self.ver = first_byte >> 4
        self.hlen = first_byte & 0x0F
        self.tos = parser.integer(1)
        self.length = parser.integer(2)
        self.identification = parser.integer(2)

        fo_val = parser.integer(2)
        self.df = bool(fo_val & 0x4000)
        self.mf = bool(fo_val & 0x2000)
        self.offset = fo_val & 0x1FFF

        self.ttl = parser.integer(1)
        self.proto = parser.integer(1)
        self.cksum = parser.integer(2)
        self.src = parser.integer(4)
        self.dst = parser.integer(4)

        if self.ver != 4:
            parser.set_error()
        if self.hlen < 5:
            parser.set_error()
            parser.remove_prefix(parser.input.size)
        else:
            parser.remove_prefix(self.hlen * 4 - self.LENGTH)

        given_cksum = self.cksum
        self.compute_checksum()
        if self.cksum != given_cksum:
            parser.set_error()

    def serialize(self, serializer: Serializer) -> None:
        """Write the header as it stands (the checksum is not recomputed)."""
        if self.ver != 4:
            raise ValueError("wrong IP version")
        serializer.integer((self.ver << 4) | (self.hlen & 0xF), 1)
        serializer.integer(self.tos, 1)
        serializer.integer(self.length, 2)
        serializer.integer(self.identification, 2)
        fo_val = (0x4000 if self.df else 0) | (0x2000 if self.mf else 0) | (self.offset & 0x1FFF)
        serializer.integer(fo_val, 2)
        serializer.integer(self.ttl, 1)
        serializer.integer(self.proto, 1)
        serializer.integer(self.cksum, 2)
        serializer.integer(self.src, 4)
        serializer.integer(self.dst, 4)


@dataclass
class IPv4Datagram:
    """An IPv4 header followed by its payload buffers."""

    header: IPv4Header = field(default_factory=IPv4Header)
    payload: list[bytes] = field(default_factory=list)

    def parse(self, parser: Parser) -> None:
        """Read the header and take the rest of the input as payload."""
        self.header.parse(parser)
        self.payload = parser.all_remaining()

    def serialize(self, serializer: Serializer) -> None:
        """Write the header followed by each payload buffer."""
        self.header.serialize(serializer)
        serializer.buffers(self.payload)


InternetDatagram = IPv4Datagram