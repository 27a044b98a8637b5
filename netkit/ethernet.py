"""Ethernet addresses, frame headers and frames."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from netkit.parser import Parser, Serializer

ETHERNET_ADDRESS_LENGTH = 6

#: Ethernet broadcast address (ff:ff:ff:ff:ff:ff).
ETHERNET_BROADCAST = b"\xff" * ETHERNET_ADDRESS_LENGTH

_ZERO_ADDRESS = bytes(ETHERNET_ADDRESS_LENGTH)


def format_ethernet_address(address: bytes) -> str:
    """Colon-separated lower-case hex form of an Ethernet address."""
    return ":".join(f"{b:02x}" for b in address)


def _check_address(name: str, address: bytes) -> bytes:
    address = bytes(address)
    if len(address) != ETHERNET_ADDRESS_LENGTH:
        raise ValueError(f"{name} must be {ETHERNET_ADDRESS_LENGTH} bytes, got {len(address)}")
    return address


def _read_address(parser: Parser, current: bytes) -> bytes:
    data = parser.string(ETHERNET_ADDRESS_LENGTH)
    return data if len(data) == ETHERNET_ADDRESS_LENGTH else current


def _write_address(serializer: Serializer, address: bytes) -> None:
    serializer.integer(int.from_bytes(address, "big"), ETHERNET_ADDRESS_LENGTH)


@dataclass
class EthernetHeader:
    """An Ethernet frame header: destination, source and frame type."""

    LENGTH: ClassVar[int] = 14
    TYPE_IPv4: ClassVar[int] = 0x800
    TYPE_ARP: ClassVar[int] = 0x806

    dst: bytes = _ZERO_ADDRESS
    src: bytes = _ZERO_ADDRESS
    type: int = 0

    def __post_init__(self) -> None:
        self.dst = _check_address("dst", self.dst)
        self.src = _check_address("src", self.src)

    def __str__(self) -> str:
        if self.type == self.TYPE_IPv4:
            type_str = "IPv4"
        elif self.type == self.TYPE_ARP:
            type_str = "ARP"
        else:
            type_str = f"[unknown type {self.type:x}!]"
        return (
            f"dst={format_ethernet_address(self.dst)}, "
            f"src={format_ethernet_address(self.src)}, type={type_str}"
        )

    def parse(self, parser: Parser) -> None:
        """Read the header from ``parser``."""
        self.dst = _read_address(parser, self.dst)
        self.src = _read_address(parser, self.src)
        self.type = parser.integer(2)

    def serialize(self, serializer: Serializer) -> None:
        """Write the header to ``serializer``."""
        _write_address(serializer, self.dst)
        _write_address(serializer, self.src)
        serializer.integer(self.type, 2)


@dataclass
class EthernetFrame:
    """An Ethernet header followed by its payload buffers."""

    header: EthernetHeader = field(default_factory=EthernetHeader)
    payload: list[bytes] = field(default_factory=list)

    def parse(self, parser: Parser) -> None:
        """Read the header and take the rest of the input as payload."""
        self.header.parse(parser)
        self.payload = parser.all_remaining()

    def serialize(self, serializer: Serializer) -> None:
        """Write the header followed by each payload buffer."""
        self.header.serialize(serializer)
        serializer.buffers(self.payload)