"""Transport abstractions for the TOSRx protocol (Serial + Mock)

Keep this small and explicit. Real SerialTransport wraps pyserial. MockTransport
is for unit tests and mock-device runs: it behaves like a TOSRx board, keeping
a relay bitmask and answering VERSION/STATE byte-at-a-time.
"""

from __future__ import annotations
import logging

from .protocol import (
    BAUDRATE,
    DISABLE_ALL,
    ENABLE_ALL,
    MAX_RELAYS,
    READ_TIMEOUT,
    STATE,
    VERSION,
)

logger = logging.getLogger(__name__)


class TransportBase:
    def write(self, data: bytes) -> int:  # returns bytes written
        raise NotImplementedError

    def read(self, size: int = 1) -> bytes:
        raise NotImplementedError

    def set_timeout(self, timeout: float):
        raise NotImplementedError

    def reset_input_buffer(self):
        raise NotImplementedError

    def close(self):
        raise NotImplementedError


class SerialTransport(TransportBase):
    def __init__(
        self, port: str = "/dev/ttyUSB0", baudrate: int = BAUDRATE, timeout: float = READ_TIMEOUT
    ):
        import serial

        self.port = port
        try:
            self._ser = serial.Serial(port, baudrate, timeout=timeout)
        except (serial.SerialException, ValueError) as e:
            raise ConnectionError(f"Could not open relay board on {port}: {e}") from e
        logger.info("Opened %s at %d baud", port, baudrate)

    def write(self, data: bytes) -> int:
        return self._ser.write(data)

    def read(self, size: int = 1) -> bytes:
        return self._ser.read(size)

    def set_timeout(self, timeout: float):
        self._ser.timeout = timeout

    def reset_input_buffer(self):
        self._ser.reset_input_buffer()

    def close(self):
        if self._ser.is_open:
            self._ser.close()
            logger.info("Closed %s", self.port)


class MockTransport(TransportBase):
    """Mock transport for unit tests and mock-device runs.

    If auto_respond is True, the transport acts like a TOSRx board with
    `size` relays: enable/disable bytes update `relay_mask`, and VERSION /
    STATE requests queue their replies. Otherwise it only replays bytes
    queued with `queue_response`, which the device sends after the next
    write. `inject_input` puts bytes straight into the input buffer, like a
    reply arriving after its request timed out.

    Usage:
        m = MockTransport(size=4)
        m.write(b"f")   # enable relay 2
        m.write(b"[")
        m.read(1)       # b"\\x02"
    """

    def __init__(
        self, size: int = MAX_RELAYS, version: bytes = b"\x0f\x01", auto_respond: bool = True
    ):
        self._write_log = []
        self._resp = bytearray()  # input buffer
        self._pending = bytearray()  # reply to the next write
        self._timeout = READ_TIMEOUT
        self._auto = auto_respond
        self._size = size
        self._version = bytes(version)
        self.relay_mask = 0
        self.fail_writes = False  # raise OSError on write (unplugged device)
        self.fail_reads = False  # raise OSError on read
        self.closed = False

    def queue_response(self, data: bytes):
        self._pending.extend(data)

    def inject_input(self, data: bytes):
        self._resp.extend(data)

    def write(self, data: bytes) -> int:
        if self.fail_writes:
            raise OSError("mock device write failure")
        self._write_log.append(bytes(data))

        if self._auto:
            for opcode in data:
                self._apply(opcode)

        self._resp.extend(self._pending)
        self._pending = bytearray()

        return len(data)

    def _apply(self, opcode: int):
        enable_base = ENABLE_ALL[0]
        disable_base = DISABLE_ALL[0]

        if opcode == VERSION[0]:
            self._resp.extend(self._version)
        elif opcode == STATE[0]:
            self._resp.append(self.relay_mask)
        elif opcode == enable_base:
            self.relay_mask = (1 << self._size) - 1
        elif opcode == disable_base:
            self.relay_mask = 0
        elif enable_base < opcode <= enable_base + self._size:
            self.relay_mask |= 1 << (opcode - enable_base - 1)
        elif disable_base < opcode <= disable_base + self._size:
            self.relay_mask &= ~(1 << (opcode - disable_base - 1))
        else:
            # Real boards ignore unknown bytes
            logger.debug("mock: ignoring unknown opcode 0x%02x", opcode)

    def read(self, size: int = 1) -> bytes:
        if self.fail_reads:
            raise OSError("mock device read failure")
        if not self._resp:
            return b""
        out = bytes(self._resp[:size])
        del self._resp[:size]
        return out

    def set_timeout(self, timeout: float):
        self._timeout = timeout

    def reset_input_buffer(self):
        self._resp = bytearray()

    def reset_output_buffer(self):
        self._write_log = []

    def close(self):
        self._resp = bytearray()
        self._pending = bytearray()
        self.closed = True

    @property
    def writes(self):
        return list(self._write_log)
