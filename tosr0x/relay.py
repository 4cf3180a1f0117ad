"""Single relay handle bound to a Board."""

from __future__ import annotations
from typing import TYPE_CHECKING, List, Union

from . import protocol
from .protocol import InvalidIndexError, RelayState

if TYPE_CHECKING:
    from .board import Board


class Relay:
    """A relay in the TOSRx board.

    Holds no state of its own: every read re-queries the board. Index 0 is
    the virtual relay standing for every relay on the board.
    """

    def __init__(self, board: "Board", index: int):
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index <= board.size:
            raise InvalidIndexError(
                f"Invalid index for relay : {index}, valid values [0-{board.size}]"
            )
        self._index = index
        self._board = board

    @property
    def index(self) -> int:
        return self._index

    @property
    def board(self) -> "Board":
        return self._board

    def state(self) -> Union[RelayState, List[RelayState]]:
        """Return ENERGIZED (1) or DEENERGIZED (0); the full list for relay 0."""
        return self.board.state(self._index)

    def enable(self):
        board = self.board
        protocol.send_cmd(
            board.transport,
            self._label("ENABLE"),
            protocol.enable_command(self._index),
            timeout=board.timeout,
            csv_logger=board.csv_logger,
            byte_logger=board.byte_logger,
        )

    def disable(self):
        board = self.board
        protocol.send_cmd(
            board.transport,
            self._label("DISABLE"),
            protocol.disable_command(self._index),
            timeout=board.timeout,
            csv_logger=board.csv_logger,
            byte_logger=board.byte_logger,
        )

    def is_enabled(self) -> bool:
        state = self.state()
        if self._index == 0:
            return all(s is RelayState.ENERGIZED for s in state)
        return state is RelayState.ENERGIZED

    def is_disabled(self) -> bool:
        state = self.state()
        if self._index == 0:
            return all(s is RelayState.DEENERGIZED for s in state)
        return state is RelayState.DEENERGIZED

    def toggle(self):
        """Flip the relay: read its state, then write the opposite command.

        Not atomic on the device. Relay 0 toggles every relay independently.
        """
        if self._index == 0:
            return self.board.toggle(protocol.ALL)
        if self.is_enabled():
            self.disable()
        else:
            self.enable()

    def _label(self, action: str) -> str:
        return f"{action} ALL" if self._index == 0 else f"{action} {self._index}"

    def __repr__(self) -> str:
        return f"Relay(index={self._index})"
