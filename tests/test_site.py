import socket
import threading
import time

import pytest

from huisserver.request import ContentKind, response_header
from huisserver.site import SEND_CHUNK, Connection, SiteServer


def _read_all(sock):
    sock.settimeout(5)
    chunks = []
    while True:
        chunk = sock.recv(65536)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def test_write_and_close_flushes():
    a, b = socket.socketpair()
    connection = Connection(0, a)
    connection.write("hello")
    connection.write(b" world")
    connection.close()
    assert _read_all(b) == b"hello world"
    assert connection.closed is True
    b.close()


def test_large_write_arrives_whole():
    a, b = socket.socketpair()
    connection = Connection(0, a)
    payload = b"x" * (SEND_CHUNK * 2 + 500)

    def writer():
        connection.write(payload)
        connection.close()

    thread = threading.Thread(target=writer)
    thread.start()
    received = _read_all(b)
    thread.join(5)
    assert received == payload
    assert connection.closed is True
    b.close()


def test_read_request():
    a, b = socket.socketpair()
    b.sendall(b"GET /id=5&x.htm HTTP/1.1\r\nHost: h\r\n")
    request = Connection(0, a).read_request()
    assert request.target == "id=5&x.htm"
    assert request.segments == ("id=5", "x.htm")
    a.close()
    b.close()


def test_read_request_rejects_other_methods():
    a, b = socket.socketpair()
    b.sendall(b"POST / HTTP/1.1\r\n\r\n")
    connection = Connection(0, a)
    assert connection.read_request() is None
    assert connection.closed is True
    b.close()


def test_read_request_peer_gone():
    a, b = socket.socketpair()
    b.sendall(b"GET / HTTP/1.1\r\n")
    b.close()
    assert Connection(0, a).read_request() is None
    a.close()


def test_read_request_too_long():
    a, b = socket.socketpair()
    b.sendall(b"GET /" + b"a" * 1100)
    connection = Connection(0, a)
    assert connection.read_request() is None
    assert connection.closed is True
    b.close()


def test_server_serves_request():
    def handler(connection, request):
        connection.write(response_header(ContentKind.PLAIN) + request.target)

    server = SiteServer(handler, slots=2, clock_minute=lambda: 10)
    a, b = socket.socketpair()
    b.sendall(b"GET /index.htm HTTP/1.1\r\n\r\n")
    assert server.accept(a) == 1
    expected = (response_header(ContentKind.PLAIN) + "index.htm").encode("latin-1")
    assert _read_all(b) == expected
    b.close()


def test_server_queues_when_full():
    gate = threading.Event()

    def handler(connection, request):
        gate.wait(5)
        connection.write(request.target)

    server = SiteServer(handler, slots=1, clock_minute=lambda: 10)
    a1, b1 = socket.socketpair()
    a2, b2 = socket.socketpair()
    b1.sendall(b"GET /one HTTP/1.1\r\n\r\n")
    b2.sendall(b"GET /two HTTP/1.1\r\n\r\n")
    assert server.accept(a1) == 0
    assert server.accept(a2) is None
    gate.set()
    assert _read_all(b1) == b"one"
    assert _read_all(b2) == b"two"
    b1.close()
    b2.close()


def test_check_addresses_expires_after_window():
    server = SiteServer(lambda c, r: None, slots=4)
    server.touch(3, 10)
    assert server.check_pending is True
    assert server.check_addresses(11) == []
    assert server.check_pending is False
    assert server.check_addresses(12) == [3]
    assert server.check_addresses(12) == []


def test_release_stops_watching():
    server = SiteServer(lambda c, r: None, slots=4)
    server.touch(1, 10)
    server.release(1)
    assert server.check_addresses(50) == []


def test_check_closes_stale_connection():
    server = SiteServer(lambda c, r: None, slots=1, clock_minute=lambda: 10)
    a, b = socket.socketpair()
    assert server.accept(a) == 0
    result = []
    for _ in range(500):
        result = server.check_addresses(12)
        if result:
            break
        time.sleep(0.01)
    assert result == [0]
    assert _read_all(b) == b""
    b.close()


def test_server_needs_a_slot():
    with pytest.raises(ValueError):
        SiteServer(lambda c, r: None, slots=0)