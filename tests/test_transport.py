import pytest
import serial

from tosr0x import protocol
from tosr0x.transport import MockTransport, SerialTransport


def test_mock_version_and_state():
    t = MockTransport(size=4, version=b"\x0a\x02")
    t.write(b"Z")
    assert t.read(2) == b"\x0a\x02"
    t.write(b"[")
    assert t.read(1) == b"\x00"


def test_mock_enable_disable():
    t = MockTransport(size=8)
    t.write(b"d")
    assert t.relay_mask == 0xFF
    t.write(bytes([0x6E + 1]))
    assert t.relay_mask == 0xFE
    t.write(b"n")
    assert t.relay_mask == 0
    t.write(bytes([0x64 + 8]))
    assert t.relay_mask == 0x80


def test_mock_enable_all_respects_size():
    t = MockTransport(size=2)
    t.write(b"d")
    assert t.relay_mask == 0x03


def test_mock_ignores_unknown_bytes():
    t = MockTransport(size=2)
    t.write(b"\x00")
    assert t.relay_mask == 0
    assert t.read(1) == b""


def test_mock_queue_only():
    t = MockTransport(auto_respond=False)
    t.queue_response(b"\x05")
    assert t.read(1) == b""
    t.write(b"[")
    assert t.read(1) == b"\x05"
    t.write(b"[")
    assert t.read(1) == b""


def test_mock_inject_input():
    t = MockTransport(size=8)
    t.inject_input(b"\x07")
    assert t.read(1) == b"\x07"
    t.inject_input(b"\x07")
    t.reset_input_buffer()
    assert t.read(1) == b""


def test_mock_write_log():
    t = MockTransport()
    t.write(b"d")
    t.write(b"[")
    assert t.writes == [b"d", b"["]
    t.reset_output_buffer()
    assert t.writes == []


def test_mock_failure_switches():
    t = MockTransport()
    t.fail_writes = True
    with pytest.raises(OSError):
        t.write(b"[")
    t.fail_writes = False
    t.fail_reads = True
    with pytest.raises(OSError):
        t.read(1)


class FakeSerial:
    def __init__(self, port, baudrate, timeout=None):
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.is_open = True
        self.written = []

    def write(self, data):
        self.written.append(data)
        return len(data)

    def read(self, size=1):
        return b"\x01"[:size]

    def reset_input_buffer(self):
        pass

    def close(self):
        self.is_open = False


def test_serial_transport_opens_at_9600(monkeypatch):
    monkeypatch.setattr(serial, "Serial", FakeSerial)
    t = SerialTransport("/dev/ttyUSB3")
    assert t._ser.port == "/dev/ttyUSB3"
    assert t._ser.baudrate == protocol.BAUDRATE
    assert t._ser.timeout == protocol.READ_TIMEOUT

    assert t.write(b"[") == 1
    assert t.read(1) == b"\x01"
    t.set_timeout(0.5)
    assert t._ser.timeout == 0.5
    t.close()
    assert t._ser.is_open is False


def test_serial_transport_open_failure(monkeypatch):
    def broken(*args, **kwargs):
        raise serial.SerialException("could not open port /dev/nope")

    monkeypatch.setattr(serial, "Serial", broken)
    with pytest.raises(ConnectionError):
        SerialTransport("/dev/nope")
