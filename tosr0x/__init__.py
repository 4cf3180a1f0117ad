"""TOSRx relay board library.

Pure-Python protocol implementation for TOSR0x serial relay boards.
Uses a transport abstraction, so the board can be driven by pyserial or
by the MockTransport in tests.
"""

from .board import Board
from .relay import Relay
from .protocol import (
    ALL,
    NONE,
    Group,
    RelayState,
    TOSRError,
    InvalidIndexError,
    TOSRTimeoutError,
    TOSRTransportError,
)
from .transport import SerialTransport, MockTransport
from .csv_logger import CSVLogger
from .byte_logger import ByteDumpLogger

__all__ = [
    "Board",
    "Relay",
    "ALL",
    "NONE",
    "Group",
    "RelayState",
    "TOSRError",
    "InvalidIndexError",
    "TOSRTimeoutError",
    "TOSRTransportError",
    "SerialTransport",
    "MockTransport",
    "CSVLogger",
    "ByteDumpLogger",
]
__version__ = "0.1.0"
