"""Socket addresses: numeric IPv4 construction, name resolution and conversions."""

from __future__ import annotations

import socket
from typing import Any

from netkit.errors import TaggedError

_NUMERIC_FLAGS = socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
_NAMEINFO_FLAGS = socket.NI_NUMERICHOST | socket.NI_NUMERICSERV


def _getaddrinfo(node: str, service: str, flags: int) -> tuple[int, tuple[Any, ...]]:
    """Resolve ``node``/``service`` for IPv4 and return the first result."""
    try:
        results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
    except socket.gaierror as exc:
        raise TaggedError(f"getaddrinfo({node}, {service})", exc.errno or 0, exc.strerror or str(exc)) from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    family, _type, _proto, _canonname, sockaddr = results[0]
    return int(family), tuple(sockaddr)


def _normalize(family: int, sockaddr: tuple[Any, ...]) -> tuple[Any, ...]:
    sockaddr = tuple(sockaddr)
    if family == socket.AF_INET:
        if len(sockaddr) != 2:
            raise ValueError("an AF_INET socket address is a (host, port) pair")
        return (str(sockaddr[0]), int(sockaddr[1]))
    if family == socket.AF_INET6:
        if not 2 <= len(sockaddr) <= 4:
            raise ValueError("an AF_INET6 socket address is (host, port[, flowinfo[, scope_id]])")
        padded = sockaddr + (0,) * (4 - len(sockaddr))
        return (str(padded[0]), int(padded[1]), int(padded[2]), int(padded[3]))
    return sockaddr


class Address:
    """An immutable socket address, usually IPv4."""

    __slots__ = ("_family", "_sockaddr")

    def __init__(self, ip: str, port: int = 0) -> None:
        """Build from a dotted-quad string and a numeric port, without name lookup."""
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        self._family, self._sockaddr = _getaddrinfo(ip, str(port), _NUMERIC_FLAGS)

    @classmethod
    def _make(cls, family: int, sockaddr: tuple[Any, ...]) -> Address:
        address = cls.__new__(cls)
        address._family = family
        address._sockaddr = _normalize(family, sockaddr)
        return address

    @classmethod
    def resolve(cls, hostname: str, service: str) -> Address:
        """Resolve a hostname and a service name (or numeric port) to an IPv4 address."""
        family, sockaddr = _getaddrinfo(hostname, service, socket.AI_ALL)
        return cls._make(family, sockaddr)

    @classmethod
    def from_sockaddr(cls, family: int, sockaddr: tuple[Any, ...]) -> Address:
        """Wrap a socket address tuple as returned by the socket module."""
        return cls._make(family, sockaddr)

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> Address:
        """Build an IPv4 address (port 0) from a 32-bit host-order integer."""
        if not 0 <= ip_address <= 0xFFFFFFFF:
            raise ValueError(f"not a 32-bit address: {ip_address}")
        return cls._make(socket.AF_INET, (socket.inet_ntoa(ip_address.to_bytes(4, "big")), 0))

    def ip_port(self) -> tuple[str, int]:
        """The numeric host string and the port."""
        if self._family not in (socket.AF_INET, socket.AF_INET6):
            raise TaggedError("getnameinfo", socket.EAI_FAMILY, "ai_family not supported")
        try:
            host, port = socket.getnameinfo(self._sockaddr, _NAMEINFO_FLAGS)
        except socket.gaierror as exc:
            raise TaggedError("getnameinfo", exc.errno or 0, exc.strerror or str(exc)) from exc
        return host, int(port)

    @property
    def ip(self) -> str:
        """The numeric host string, e.g. "18.243.0.1"."""
        return self.ip_port()[0]

    @property
    def port(self) -> int:
        """The port number."""
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """The IPv4 address as a 32-bit host-order integer."""
        if self._family != socket.AF_INET:
            raise ValueError("ipv4_numeric called on non-IPV4 address")
        return int.from_bytes(socket.inet_aton(self._sockaddr[0]), "big")

    @property
    def family(self) -> int:
        """The address family, e.g. socket.AF_INET."""
        return self._family

    @property
    def sockaddr(self) -> tuple[Any, ...]:
        """The address as a tuple accepted by the socket module."""
        return self._sockaddr

    def __str__(self) -> str:
        ip, port = self.ip_port()
        return f"{ip}:{port}"

    def __repr__(self) -> str:
        return f"Address(family={self._family!r}, sockaddr={self._sockaddr!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self._family, self._sockaddr))