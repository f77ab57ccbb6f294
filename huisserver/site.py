"""Web front end: connection slots, request reading and stale-connection checks."""

from __future__ import annotations

import logging
import socket
import threading
from collections import deque
from datetime import datetime

from .request import GET_PREFIX, parse_request

log = logging.getLogger(__name__)

SEND_CHUNK = 100_000
GET_LIMIT = 1024
SLOTS = 100

_PREFIX_BYTES = GET_PREFIX.encode("ascii")


def _header_complete(data):
    """True once a line break follows an earlier line break."""
    seen_cr = after_break = False
    for byte in data:
        if byte == 0x0D:
            if after_break:
                return True
            seen_cr = True
        elif byte == 0x0A:
            if after_break:
                return True
            after_break = True
            seen_cr = False
        elif seen_cr:
            seen_cr = False
            after_break = True
    return False


class Connection:
    """One client socket with a buffered writer."""

    def __init__(self, slot, sock):
        self.slot = slot
        self.sock = sock
        self.closed = False
        self._buffer = bytearray()
        self._lock = threading.Lock()

    def write(self, data):
        """Queue data for the client, sending it in large chunks."""
        if isinstance(data, str):
            data = data.encode("latin-1")
        with self._lock:
            self._buffer += data
            while len(self._buffer) >= SEND_CHUNK:
                chunk = bytes(self._buffer[:SEND_CHUNK])
                del self._buffer[:SEND_CHUNK]
                self._send(chunk)

    def _send(self, chunk):
        if self.closed:
            return
        try:
            self.sock.sendall(chunk)
        except OSError:
            self._shut()

    def _shut(self):
        if self.closed:
            return
        self.closed = True
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.sock.close()

    def close(self):
        """Send what is still buffered and close the socket."""
        with self._lock:
            if self._buffer:
                chunk = bytes(self._buffer)
                self._buffer.clear()
                self._send(chunk)
        self._shut()

    def read_request(self):
        """Read a GET request from the client.

        Returns None when the client goes away, sends something else than a
        GET request or sends too much; the connection is then closed for
        those last two cases.
        """
        data = bytearray()
        while not self.closed:
            try:
                chunk = self.sock.recv(GET_LIMIT - len(data))
            except OSError:
                return None
            if not chunk:
                return None
            data += chunk
            if len(data) >= len(_PREFIX_BYTES) and not data.startswith(_PREFIX_BYTES):
                self._shut()
                return None
            if len(data) >= GET_LIMIT:
                self._shut()
                return None
            if _header_complete(data):
                try:
                    return parse_request(bytes(data))
                except ValueError:
                    return None
        return None


class SiteServer:
    """Serves accepted sockets on a fixed number of slots.

    ``handler(connection, request)`` writes the response. Sockets arriving
    while every slot is busy wait in order for the next free slot.
    """

    def __init__(self, handler, slots=SLOTS, clock_minute=None):
        if slots < 1:
            raise ValueError("at least one slot is needed")
        self.handler = handler
        self.slots = slots
        self._clock_minute = clock_minute or (lambda: datetime.now().minute)
        self._lock = threading.Lock()
        self._free = list(range(slots))
        self._waiting = deque()
        self._connections = {}
        self._stamp_lock = threading.Lock()
        self._stamps = {}
        self.check_pending = False

    def accept(self, sock):
        """Serve a socket; returns its slot, or None when it has to wait."""
        with self._lock:
            if not self._free:
                if sock not in self._waiting:
                    self._waiting.append(sock)
                return None
            slot = self._free.pop()
        threading.Thread(target=self._serve, args=(slot, sock), daemon=True).start()
        return slot

    def _serve(self, slot, sock):
        while True:
            self.touch(slot, self._clock_minute())
            self._handle(slot, sock)
            with self._lock:
                if not self._waiting:
                    self._free.append(slot)
                    return
                sock = self._waiting.popleft()

    def _handle(self, slot, sock):
        connection = Connection(slot, sock)
        with self._lock:
            self._connections[slot] = connection
        try:
            request = connection.read_request()
            self.release(slot)
            if request is not None:
                self.handler(connection, request)
        except Exception:
            log.exception("handling slot %d failed", slot)
        finally:
            connection.close()
            with self._lock:
                self._connections.pop(slot, None)

    def release(self, slot):
        """Stop watching a slot for staleness."""
        with self._stamp_lock:
            self._stamps.pop(slot, None)

    def touch(self, slot, minute):
        """Start watching a slot that became busy at ``minute``."""
        with self._stamp_lock:
            self._stamps[slot] = (minute + 1) % 60
            self.check_pending = True

    def check_addresses(self, minute):
        """Close the connections watched for too long; return their slots."""
        limit = 59 if minute == 0 else minute - 1
        expired = []
        with self._stamp_lock:
            for slot, stamp in list(self._stamps.items()):
                if stamp <= limit or stamp > limit + 2:
                    del self._stamps[slot]
                    expired.append(slot)
            if not expired:
                self.check_pending = False
        for slot in expired:
            with self._lock:
                connection = self._connections.get(slot)
            if connection is not None:
                connection._shut()
        return sorted(expired)