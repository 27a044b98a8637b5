"""ARP messages for Ethernet and IPv4."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import ClassVar

from netkit.ethernet import (
    ETHERNET_ADDRESS_LENGTH,
    EthernetHeader,
    format_ethernet_address,
)
from netkit.parser import Parser, Serializer

_IPV4_ADDRESS_LENGTH = 4
_ZERO_ADDRESS = bytes(ETHERNET_ADDRESS_LENGTH)


@dataclass
class ARPMessage:
    """An ARP request or reply."""

    LENGTH: ClassVar[int] = 28
    TYPE_ETHERNET: ClassVar[int] = 1
    OPCODE_REQUEST: ClassVar[int] = 1
    OPCODE_REPLY: ClassVar[int] = 2

    hardware_type: int = 1
    protocol_type: int = EthernetHeader.TYPE_IPv4
    hardware_address_size: int = ETHERNET_ADDRESS_LENGTH
    protocol_address_size: int = _IPV4_ADDRESS_LENGTH
    opcode: int = 0

    sender_ethernet_address: bytes = _ZERO_ADDRESS
    sender_ip_address: int = 0

    target_ethernet_address: bytes = _ZERO_ADDRESS
    target_ip_address: int = 0

    def __post_init__(self) -> None:
        for name in ("sender_ethernet_address", "target_ethernet_address"):
            value = bytes(getattr(self, name))
            if len(value) != ETHERNET_ADDRESS_LENGTH:
                raise ValueError(f"{name} must be {ETHERNET_ADDRESS_LENGTH} bytes")
            setattr(self, name, value)

    def supported(self) -> bool:
        """True for an Ethernet/IPv4 request or reply."""
        return (
            self.hardware_type == self.TYPE_ETHERNET
            and self.protocol_type == EthernetHeader.TYPE_IPv4
            and self.hardware_address_size == ETHERNET_ADDRESS_LENGTH
            and self.protocol_address_size == _IPV4_ADDRESS_LENGTH
            and self.opcode in (self.OPCODE_REQUEST, self.OPCODE_REPLY)
        )

    def __str__(self) -> str:
        if self.opcode == self.OPCODE_REQUEST:
            opcode_str = "REQUEST"
        elif self.opcode == self.OPCODE_REPLY:
            opcode_str = "REPLY"
        else:
            opcode_str = "(unknown type)"
        return (
            f"opcode={opcode_str}, "
            f"sender={format_ethernet_address(self.sender_ethernet_address)}"
            f"/{ipaddress.IPv4Address(self.sender_ip_address)}, "
            f"target={format_ethernet_address(self.target_ethernet_address)}"
            f"/{ipaddress.IPv4Address(self.target_ip_address)}"
        )

    @staticmethod
    def _read_address(parser: Parser, current: bytes) -> bytes:
        data = parser.string(ETHERNET_ADDRESS_LENGTH)
        return data if len(data) == ETHERNET_ADDRESS_LENGTH else current

    def parse(self, parser: Parser) -> None:
        """Read the message; an unsupported combination marks the parse as failed."""
        self.hardware_type = parser.integer(2)
        self.protocol_type = parser.integer(2)
        self.hardware_address_size = parser.integer(1)
        self.protocol_address_size = parser.integer(1)
        self.opcode = parser.integer(2)

        if not self.supported():
            parser.set_error()
            return

        self.sender_ethernet_address = self._read_address(parser, self.sender_ethernet_address)
        self.sender_ip_address = parser.integer(4)
        self.target_ethernet_address = self._read_address(parser, self.target_ethernet_address)
        self.target_ip_address = parser.integer(4)

    def serialize(self, serializer: Serializer) -> None:
        """Write the message; raise ValueError if it is not a supported combination."""
        if not self.supported():
            raise ValueError(
                "ARPMessage: unsupported field combination "
                "(must be Ethernet/IP, and request or reply)"
            )
        serializer.integer(self.hardware_type, 2)
        serializer.integer(self.protocol_type, 2)
        serializer.integer(self.hardware_address_size, 1)
        serializer.integer(self.protocol_address_size, 1)
        serializer.integer(self.opcode, 2)
        serializer.integer(int.from_bytes(self.sender_ethernet_address, "big"), ETHERNET_ADDRESS_LENGTH)
        serializer.integer(self.sender_ip_address, 4)
        serializer.integer(int.from_bytes(self.target_ethernet_address, "big"), ETHERNET_ADDRESS_LENGTH)
        serializer.integer(self.target_ip_address, 4)