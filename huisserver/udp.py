"""UDP broadcasting of status messages and relaying of received packets."""

from __future__ import annotations

import socket

DEFAULT_TARGET = ("192.168.179.255", 1235)
DEFAULT_BIND = ("192.168.179.19", 1236)
PACKET_SIZE = 32


class UdpBroadcaster:
    """A UDP socket that sends to one target and can relay what it receives."""

    def __init__(self, target=DEFAULT_TARGET, bind_address=DEFAULT_BIND):
        self.target = target
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        try:
            self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            if bind_address is not None:
                self._sock.bind(bind_address)
        except OSError:
            self._sock.close()
            raise
        self.address = self._sock.getsockname()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def send(self, data):
        """Send one packet to the target."""
        if isinstance(data, str):
            data = data.encode("latin-1")
        self._sock.sendto(data, self.target)

    def receive(self, size=PACKET_SIZE):
        """Wait for the next non-empty packet and return it."""
        while True:
            data, _ = self._sock.recvfrom(size)
            if data:
                return data

    def close(self):
        """Close the socket."""
        self._sock.close()

    def relay(self, count=None):
        """Pass received packets on to the target; forever when count is None.

        Returns the number of packets relayed.
        """
        relayed = 0
        while count is None or relayed < count:
            self.send(self.receive())
            relayed += 1
        return relayed