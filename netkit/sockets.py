"""Network sockets built on FileDescriptor: TCP, UDP and packet sockets."""

from __future__ import annotations

import os
import socket
import struct
from collections.abc import Callable
from typing import TypeVar

from netkit.address import Address
from netkit.errors import UnixError
from netkit.file_descriptor import FileDescriptor

T = TypeVar("T")

_SO_BINDTODEVICE = getattr(socket, "SO_BINDTODEVICE", 25)
_SOL_PACKET = getattr(socket, "SOL_PACKET", 263)
_PACKET_ADD_MEMBERSHIP = getattr(socket, "PACKET_ADD_MEMBERSHIP", 1)
_PACKET_MR_PROMISC = getattr(socket, "PACKET_MR_PROMISC", 1)
_AF_PACKET = getattr(socket, "AF_PACKET", 17)


class Socket(FileDescriptor):
    """A network socket held as a file descriptor."""

    def __init__(self, domain: int, type: int, protocol: int = 0) -> None:
        try:
            created = socket.socket(domain, type, protocol)
        except OSError as exc:
            raise UnixError("socket", exc.errno or 0) from exc
        super().__init__(created.detach())

    @classmethod
    def from_descriptor(
        cls, fd: FileDescriptor, domain: int, type: int, protocol: int = 0
    ) -> Socket:
        """Adopt an existing descriptor, checking its domain, type and protocol."""
        sock = cls._from_wrapper(fd._internal)
        if sock.getsockopt(socket.SOL_SOCKET, socket.SO_DOMAIN) != domain:
            raise RuntimeError("socket domain mismatch")
        if sock.getsockopt(socket.SOL_SOCKET, socket.SO_TYPE) != type:
            raise RuntimeError("socket type mismatch")
        if sock.getsockopt(socket.SOL_SOCKET, socket.SO_PROTOCOL) != protocol:
            raise RuntimeError("socket protocol mismatch")
        return sock

    def _with_socket(self, fn: Callable[[socket.socket], T]) -> T:
        """Run ``fn`` on a temporary socket object that borrows our descriptor."""
        fd = self.fd_num
        sock = socket.socket(fileno=fd)
        try:
            if not os.get_blocking(fd):
                sock.setblocking(False)
            return fn(sock)
        finally:
            sock.detach()

    def _call(self, attempt: str, fn: Callable[[socket.socket], T], would_block: T) -> T:
        return self._check_system_call(attempt, lambda: self._with_socket(fn), would_block)

    def getsockopt(self, level: int, option: int) -> int:
        """Read an integer socket option."""
        return self._call("getsockopt", lambda s: s.getsockopt(level, option), 0)

    def setsockopt(self, level: int, option: int, value: int | bytes) -> None:
        """Set a socket option to an integer or a raw byte string."""
        self._call("setsockopt", lambda s: s.setsockopt(level, option, value), None)

    def bind(self, address: Address) -> None:
        """Bind to a local address."""
        self._call("bind", lambda s: s.bind(address.sockaddr), None)

    def bind_to_device(self, device_name: str) -> None:
        """Restrict the socket to one network device."""
        self.setsockopt(socket.SOL_SOCKET, _SO_BINDTODEVICE, device_name.encode())

    def connect(self, address: Address) -> None:
        """Connect to a peer (returns at once on a non-blocking socket)."""
        self._call("connect", lambda s: s.connect(address.sockaddr), None)

    def shutdown(self, how: int) -> None:
        """Shut down reading, writing or both."""
        self._call("shutdown", lambda s: s.shutdown(how), None)
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise ValueError("Socket.shutdown() called with invalid `how`")

    def _get_address(self, attempt: str, getter: Callable[[socket.socket], object]) -> Address:
        family, name = self._call(attempt, lambda s: (s.family, getter(s)), None)
        return Address.from_sockaddr(int(family), name)

    def local_address(self) -> Address:
        """The address the socket is bound to."""
        return self._get_address("getsockname", lambda s: s.getsockname())

    def peer_address(self) -> Address:
        """The address of the connected peer."""
        return self._get_address("getpeername", lambda s: s.getpeername())

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner."""
        self.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

    def raise_if_error(self) -> None:
        """Raise UnixError if the socket has a pending error."""
        socket_error = self.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        if socket_error:
            raise UnixError("socket error", socket_error)


class DatagramSocket(Socket):
    """A socket that sends and receives whole datagrams."""

    def recv(self) -> tuple[Address, bytes] | None:
        """Receive one datagram and its sender.

        Returns None if the socket is non-blocking and nothing is waiting.
        Raises RuntimeError if the datagram is larger than READ_BUFFER_SIZE.
        """
        buffer = bytearray(self.READ_BUFFER_SIZE)
        result = self._call(
            "recvfrom",
            lambda s: (s.family, *s.recvfrom_into(buffer, 0, socket.MSG_TRUNC)),
            None,
        )
        if result is None:
            return None
        family, length, source = result
        if length > len(buffer):
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return Address.from_sockaddr(int(family), source), bytes(buffer[:length])

    def sendto(self, destination: Address, payload: bytes) -> None:
        """Send a datagram to ``destination``."""
        self._call("sendto", lambda s: s.sendto(payload, destination.sockaddr), 0)
        self._register_write()

    def send(self, payload: bytes) -> None:
        """Send a datagram to the connected peer."""
        self._call("send", lambda s: s.send(payload), 0)
        self._register_write()


class UDPSocket(DatagramSocket):
    """An unbound, unconnected UDP socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM)


class TCPSocket(Socket):
    """An unbound, unconnected TCP socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM)

    def listen(self, backlog: int = 16) -> None:
        """Mark the socket as accepting connections."""
        self._call("listen", lambda s: s.listen(backlog), None)

    def accept(self) -> TCPSocket:
        """Wait for and return a new connection."""
        self._register_read()
        protocol = self.getsockopt(socket.SOL_SOCKET, socket.SO_PROTOCOL)
        new_fd = self._call("accept", lambda s: s.accept()[0].detach(), None)
        if new_fd is None:
            raise UnixError("accept", 11)
        conn = TCPSocket.from_descriptor(
            FileDescriptor(new_fd), socket.AF_INET, socket.SOCK_STREAM, protocol
        )
        assert isinstance(conn, TCPSocket)
        return conn


class PacketSocket(DatagramSocket):
    """A link-layer packet socket."""

    def __init__(self, type: int, protocol: int) -> None:
        super().__init__(_AF_PACKET, type, protocol)

    def set_promiscuous(self) -> None:
        """Receive every frame seen by the bound interface."""
        local = self.local_address()
        if local.family != _AF_PACKET:
            raise RuntimeError("Address::as() conversion failure")
        ifindex = socket.if_nametoindex(local.sockaddr[0])
        membership = struct.pack("iHH8s", ifindex, _PACKET_MR_PROMISC, 0, b"")
        self.setsockopt(_SOL_PACKET, _PACKET_ADD_MEMBERSHIP, membership)