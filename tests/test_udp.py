import socket

import pytest

from huisserver.udp import UdpBroadcaster


@pytest.fixture
def listener():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(5)
    yield sock
    sock.close()


@pytest.fixture
def broadcaster(listener):
    with UdpBroadcaster(target=listener.getsockname(), bind_address=("127.0.0.1", 0)) as caster:
        yield caster


def test_send_reaches_target(broadcaster, listener):
    broadcaster.send(b"@TU12+")
    data, source = listener.recvfrom(64)
    assert data == b"@TU12+"
    assert source == broadcaster.address


def test_send_text(broadcaster, listener):
    broadcaster.send("abc")
    data, source = listener.recvfrom(64)
    assert data == b"abc"
    assert source == broadcaster.address


def test_receive(broadcaster, listener):
    listener.sendto(b"ping", broadcaster.address)
    assert broadcaster.receive() == b"ping"


def test_receive_limits_size(broadcaster, listener):
    listener.sendto(b"abcdef", broadcaster.address)
    assert broadcaster.receive(3) == b"abc"


def test_relay_forwards_packets(broadcaster, listener):
    sender = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sender.sendto(b"one", broadcaster.address)
        sender.sendto(b"two", broadcaster.address)
        assert broadcaster.relay(2) == 2
    finally:
        sender.close()
    assert listener.recvfrom(64)[0] == b"one"
    assert listener.recvfrom(64)[0] == b"two"


def test_send_after_close_fails(listener):
    caster = UdpBroadcaster(target=listener.getsockname(), bind_address=("127.0.0.1", 0))
    caster.close()
    with pytest.raises(OSError):
        caster.send(b"x")


def test_without_bind_has_address(listener):
    with UdpBroadcaster(target=listener.getsockname(), bind_address=None) as caster:
        caster.send(b"hi")
        data, _ = listener.recvfrom(64)
    assert data == b"hi"