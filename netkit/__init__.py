"""Packet formats, checksums, addresses, file descriptors and sockets for small network stacks."""

__version__ = "0.1.0"

__all__ = [
    "address",
    "arp",
    "checksum",
    "errors",
    "ethernet",
    "file_descriptor",
    "ipv4",
    "parser",
    "randomness",
    "sockets",
]