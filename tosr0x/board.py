"""TOSRx board driver.

Owns the transport and the wire protocol: every public method is a
synchronous write + bounded read through `protocol.send_cmd`. The board
holds no relay state in memory, so a failed call never leaves anything to
roll back; re-query with `state()` after a timeout.

Not thread safe. Callers sharing one Board between threads must serialize
access themselves (a lock per Board).
"""

from __future__ import annotations
import logging
from typing import List, Tuple, Union

from . import protocol
from .protocol import (
    ALL,
    NONE,
    READ_TIMEOUT,
    Index,
    InvalidIndexError,
    RelayState,
)
from .relay import Relay
from .transport import SerialTransport, TransportBase

logger = logging.getLogger(__name__)


class Board:
    """A TOSRx relay board with `size` relays.

    Usage:
        board = Board("/dev/ttyUSB0", 8)
        board.enable(3)
        board.state()        # [0, 0, 1, 0, 0, 0, 0, 0]
        board.get(3).toggle()
    """

    def __init__(
        self,
        port: Union[str, TransportBase],
        size: int,
        timeout: float = READ_TIMEOUT,
        csv_logger=None,
        byte_logger=None,
    ):
        """Create the board and its relay handles.

        Args:
            port: Serial device path, or an already open TransportBase
            size: Number of relays on the board (1 - MAX_RELAYS)
            timeout: Reply timeout in seconds for every request
            csv_logger: Optional CSVLogger instance for logging operations
            byte_logger: Optional ByteDumpLogger instance for raw I/O capture
        """
        if isinstance(size, bool) or not isinstance(size, int) or not 1 <= size <= protocol.MAX_RELAYS:
            raise InvalidIndexError(
                f"Invalid relay count {size!r}, valid values [1 - {protocol.MAX_RELAYS}]"
            )

        if isinstance(port, str):
            port = SerialTransport(port, timeout=timeout)
        self._transport = port
        self._size = size
        self.timeout = timeout
        self.csv_logger = csv_logger
        self.byte_logger = byte_logger
        self._relays: Tuple[Relay, ...] = tuple(Relay(self, index) for index in range(size + 1))

        logger.debug("Board with %d relays on %r", size, port)

    @property
    def transport(self) -> TransportBase:
        return self._transport

    @property
    def size(self) -> int:
        return self._size

    @property
    def relays(self) -> Tuple[Relay, ...]:
        """All handles, index 0 (every relay) through `size`."""
        return self._relays

    def version(self) -> bytes:
        """Two bytes of firmware version information, not interpreted."""
        return self._cmd("VERSION", protocol.VERSION, protocol.VERSION_LEN)

    def state(self, index: Index = ALL) -> Union[RelayState, List[RelayState]]:
        """Retrieve the state of one relay, or of every relay for 0/ALL.

        Returns:
            RelayState for a single relay, else a list of `size` RelayStates
            where element 0 is relay 1.
        """
        index = protocol.resolve_index(index, self._size)
        reply = self._cmd("STATE", protocol.STATE, protocol.STATE_LEN)
        states = protocol.decode_state(reply, self._size)
        if index:
            return states[index - 1]
        return states

    def get(self, index: Index = ALL) -> Union[Relay, List[Relay]]:
        """Relay handle for `index`; ALL returns relays 1..size, 0 the virtual relay."""
        symbolic = isinstance(index, (str, protocol.Group))
        index = protocol.resolve_index(index, self._size)
        if symbolic:
            return list(self._relays[1:])
        return self._relays[index]

    def enable(self, index: Index):
        """Enable a relay; 0/ALL enables every relay, NONE disables every relay."""
        index = protocol.resolve_index(index, self._size, allow_none=True)
        if index is NONE:
            return self.disable(ALL)
        self._relays[index].enable()

    def disable(self, index: Index):
        """Disable a relay; 0/ALL disables every relay, NONE enables every relay."""
        index = protocol.resolve_index(index, self._size, allow_none=True)
        if index is NONE:
            return self.enable(ALL)
        self._relays[index].disable()

    def is_enabled(self, index: Index) -> bool:
        index = protocol.resolve_index(index, self._size)
        return self._relays[index].is_enabled()

    def is_disabled(self, index: Index) -> bool:
        index = protocol.resolve_index(index, self._size)
        return self._relays[index].is_disabled()

    def toggle(self, index: Index):
        """Toggle a relay. 0/ALL flips each relay from its own current state."""
        index = protocol.resolve_index(index, self._size)
        if index:
            return self._relays[index].toggle()
        for relay in self._relays[1:]:
            relay.toggle()

    def _cmd(self, name: str, data: bytes, count: int) -> bytes:
        return protocol.send_cmd(
            self._transport,
            name,
            data,
            response_len=count,
            timeout=self.timeout,
            csv_logger=self.csv_logger,
            byte_logger=self.byte_logger,
        )

    def __repr__(self) -> str:
        return f"Board(size={self._size}, transport={self._transport!r})"
