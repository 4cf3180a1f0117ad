"""TOSRx protocol utilities: command bytes, state decoding, index checks and send/receive.

This module contains pure helpers and a `send_cmd` helper that works with
TransportBase objects (see `transport.py`). Every exchange with the board is
one command byte written, then a bounded read of a fixed-size reply.
"""

from __future__ import annotations
import logging
import time
from enum import Enum, IntEnum
from typing import List, Sequence, Union

logger = logging.getLogger(__name__)

# Base commands (single ASCII byte each)
VERSION = b"Z"
STATE = b"["
ENABLE_ALL = b"d"
DISABLE_ALL = b"n"

BAUDRATE = 9600
READ_TIMEOUT = 1.0  # seconds
VERSION_LEN = 2
STATE_LEN = 1

# One state byte; enable 'd'+10 would also collide with DISABLE_ALL 'n'
MAX_RELAYS = 8


class RelayState(IntEnum):
    DEENERGIZED = 0
    ENERGIZED = 1


class Group(Enum):
    """Symbolic relay indexes."""

    ALL = "all"
    NONE = "none"  # only meaningful for enable/disable


ALL = Group.ALL
NONE = Group.NONE

Index = Union[int, str, Group]


# Exceptions for protocol-level errors
class TOSRError(Exception):
    """Base class for TOSRx errors."""


class InvalidIndexError(TOSRError, ValueError):
    """Raised for a relay index outside [0, size] or an unknown symbol.

    Always raised before anything is written to the transport.
    """


class TOSRTimeoutError(TOSRError, TimeoutError):
    """Raised when the board does not reply in time.

    Recoverable: the caller may retry, but should re-query the state.
    """


class TOSRTransportError(TOSRError, OSError):
    """Raised when the serial connection fails (unplugged, permissions...).

    Fatal for the Board instance; reopen the transport and build a new Board.
    """


def enable_command(index: int) -> bytes:
    """Command byte enabling relay `index` (0 enables every relay)."""
    return _relay_command(ENABLE_ALL, index)


def disable_command(index: int) -> bytes:
    """Command byte disabling relay `index` (0 disables every relay)."""
    return _relay_command(DISABLE_ALL, index)


def _relay_command(base: bytes, index: int) -> bytes:
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidIndexError(f"Invalid index {index!r}, expected an integer")
    if not 0 <= index <= MAX_RELAYS:
        raise InvalidIndexError(f"Invalid index {index}, valid values [0 - {MAX_RELAYS}]")
    return bytes([base[0] + index])


def decode_state(reply: bytes, size: int) -> List[RelayState]:
    """Decode the STATE reply byte into one entry per relay.

    Bit p (LSB first) is relay p+1, so element 0 of the result is relay 1.
    """
    if len(reply) != STATE_LEN:
        raise ValueError(f"Expected {STATE_LEN} state byte, got {len(reply)}")
    mask = reply[0]
    return [RelayState((mask >> pos) & 0x01) for pos in range(size)]


def encode_state(states: Sequence[int]) -> int:
    """Inverse of `decode_state`: pack relay states (relay 1 first) into a bitmask."""
    mask = 0
    for pos, value in enumerate(states):
        if value:
            mask |= 0x01 << pos
    return mask


def resolve_index(index: Index, size: int, allow_none: bool = False) -> Union[int, Group]:
    """Check `index` and map it onto the board.

    Returns:
        0 for the all-sentinel (``ALL``, ``"all"`` or ``0``), ``1..size``
        for a concrete relay, or ``NONE`` when ``allow_none`` is set.

    Raises:
        InvalidIndexError: for anything else.
    """
    if isinstance(index, str):
        try:
            index = Group(index.lower())
        except ValueError:
            raise InvalidIndexError(
                f"Invalid index {index!r}, valid values [0 - {size}], 'all'"
                + (" or 'none'" if allow_none else "")
            ) from None

    if isinstance(index, Group):
        if index is ALL:
            return 0
        if allow_none:
            return NONE
        raise InvalidIndexError("Index 'none' is only valid for enable/disable")

    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidIndexError(f"Invalid index {index!r}, expected an integer")
    if index < 0 or index > size:
        raise InvalidIndexError(f"Invalid index {index}, valid values [1 - {size}]")
    return index


def send_cmd(
    transport,
    name: str,
    data: bytes,
    response_len: int = 0,
    timeout: float = READ_TIMEOUT,
    csv_logger=None,
    byte_logger=None,
) -> bytes:
    """Write one command and read exactly `response_len` reply bytes.

    Commands that have no reply (enable/disable) pass ``response_len=0``
    and return after the write.

    Args:
        transport: TransportBase instance
        name: Operation name for logging (VERSION, STATE, ENABLE 3, ...)
        data: Command bytes
        response_len: Number of reply bytes to wait for
        timeout: Upper bound in seconds for the whole reply
        csv_logger: Optional CSVLogger instance for logging the operation
        byte_logger: Optional ByteDumpLogger instance for raw I/O capture

    Raises:
        TOSRTimeoutError: fewer than `response_len` bytes arrived in time
        TOSRTransportError: the transport failed
    """
    t_start = time.time()
    rx = bytearray()
    state = "COMPLETE"

    if byte_logger:
        byte_logger.log_send(data, name)

    try:
        transport.set_timeout(timeout)
        if response_len:
            # drop late bytes from an earlier timed-out exchange
            transport.reset_input_buffer()
        transport.write(data)

        deadline = time.time() + timeout
        while len(rx) < response_len and time.time() < deadline:
            b = transport.read(1)
            if b:
                rx.extend(b)
            else:
                # avoid busy spin
                time.sleep(0.01)
    except TimeoutError as e:
        state = "TIMEOUT"
        if byte_logger:
            byte_logger.log_error(f"{name}: timeout: {e}")
        raise TOSRTimeoutError(f"Timeout talking to board during {name}: {e}") from e
    except OSError as e:
        state = "ERROR"
        if byte_logger:
            byte_logger.log_error(f"{name}: {e}")
        raise TOSRTransportError(f"Transport failure during {name}: {e}") from e
    finally:
        if byte_logger and rx:
            byte_logger.log_recv(bytes(rx))
        if len(rx) < response_len and state == "COMPLETE":
            state = "TIMEOUT"
        if csv_logger:
            csv_logger.log_operation(
                operation=name,
                command=data,
                duration_ms=(time.time() - t_start) * 1000,
                bytes_sent=len(data),
                response=bytes(rx),
                state=state,
            )

    if len(rx) < response_len:
        logger.warning("%s: expected %d byte(s), got %d", name, response_len, len(rx))
        if byte_logger:
            byte_logger.log_error(f"{name}: timeout, {len(rx)}/{response_len} bytes received")
        raise TOSRTimeoutError(
            f"Timeout waiting for response to {name} "
            f"({len(rx)}/{response_len} bytes in {timeout}s)"
        )

    logger.debug("%s: sent %s, received %s", name, data.hex(), bytes(rx).hex() or "-")
    return bytes(rx)
