# netkit

Small building blocks for working with network packets and sockets.

## What is inside

- `netkit.parser`: `Parser` reads big-endian integers (`integer(size)`) and byte
  strings (`string(size)`) from a list of buffers. It records an error instead of
  raising when the input runs short. `Serializer` writes integers and whole buffers
  back out. `BufferList` is the queue of buffers underneath. The helpers
  `parse(obj, buffers)` and `serialize(obj)` work with any object that has
  `parse(parser)` and `serialize(serializer)` methods.
- `netkit.checksum`: `InternetChecksum`, the ones'-complement sum used by IP,
  TCP and UDP. `add()` takes one buffer or an iterable of buffers.
- `netkit.ethernet`: `EthernetHeader`, `EthernetFrame`,
  `format_ethernet_address` and `ETHERNET_BROADCAST`.
- `netkit.ipv4`: `IPv4Header`, with `compute_checksum()`, `payload_length()` and
  `pseudo_checksum()`, and `IPv4Datagram`. `InternetDatagram` is another name for
  `IPv4Datagram`.
- `netkit.arp`: `ARPMessage` for Ethernet/IPv4 requests and replies.
- `netkit.address`: `Address`, an immutable socket address. It is built from a
  numeric IPv4 string and port, or with `Address.resolve(hostname, service)`,
  `Address.from_ipv4_numeric(n)` or `Address.from_sockaddr(family, sockaddr)`.
- `netkit.file_descriptor`: `FileDescriptor`, a handle on an OS file descriptor.
  It counts reads and writes, tracks end of file and closes the descriptor when it
  is used as a context manager. Handles made with `duplicate()` share this state.
- `netkit.sockets`: `UDPSocket`, `TCPSocket` and `PacketSocket`, built on
  `FileDescriptor` through `Socket` and `DatagramSocket`.
- `netkit.errors`: `TaggedError` and `UnixError`, plus `check_system_call` and
  `notnull`.
- `netkit.randomness`: `get_random_engine()` returns a `random.Random` seeded
  from system entropy.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example: building and parsing an IPv4 header

```python
from netkit.ipv4 import IPv4Header
from netkit.parser import parse, serialize

header = IPv4Header(length=40, src=0x0A000001, dst=0x0A000002)
header.compute_checksum()
wire = serialize(header)

copy = IPv4Header()
assert parse(copy, wire)
print(copy)  # IPv4, len=28, protocol=6, src=10.0.0.1, dst=10.0.0.2
```

`parse` returns `False` in these cases: the input is too short, the version is
not 4, the header length is below 5, or the checksum does not match.
`IPv4Header.serialize` raises `ValueError` for a version other than 4.
`ARPMessage.serialize` raises `ValueError` for an unsupported message.

## Example: an ARP request in an Ethernet frame

```python
from netkit.arp import ARPMessage
from netkit.ethernet import ETHERNET_BROADCAST, EthernetFrame, EthernetHeader
from netkit.parser import serialize

request = ARPMessage(
    opcode=ARPMessage.OPCODE_REQUEST,
    sender_ethernet_address=bytes.fromhex("020000000001"),
    sender_ip_address=0x0A000001,
    target_ip_address=0x0A000002,
)
frame = EthernetFrame(
    header=EthernetHeader(
        dst=ETHERNET_BROADCAST,
        src=bytes.fromhex("020000000001"),
        type=EthernetHeader.TYPE_ARP,
    ),
    payload=[b"".join(serialize(request))],
)
wire = serialize(frame)
```

## Example: a UDP round trip

```python
from netkit.address import Address
from netkit.sockets import UDPSocket

server = UDPSocket()
server.bind(Address("127.0.0.1", 0))

client = UDPSocket()
client.sendto(server.local_address(), b"hello")

source, payload = server.recv()
print(source, payload)
```

On a blocking socket, `DatagramSocket.recv()` returns `(Address, bytes)`. On a
non-blocking socket with nothing waiting, it returns `None`.

Socket and descriptor failures raise `netkit.errors.UnixError`. The error carries
the name of the failed call and the error number, which is available as
`error_code`.

## What it does not do

netkit has wire formats, a checksum and descriptor/socket wrappers, and nothing
more. It has no TCP sender, receiver or byte stream, no routing or network
interface logic, and no command-line program.

Packet sockets and promiscuous mode need Linux and suitable privileges.