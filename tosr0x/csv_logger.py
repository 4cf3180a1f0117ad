"""CSV logging of relay board exchanges.

One row per command sent, with timing and the raw reply, so a session can
be replayed or inspected after the fact.
"""

from __future__ import annotations
import csv
import time
from datetime import datetime
from pathlib import Path

FIELDS = [
    "session_start",
    "timestamp",
    "elapsed_s",
    "operation",
    "command_hex",
    "duration_ms",
    "bytes_sent",
    "bytes_received",
    "cumulative_bytes",
    "response_hex",
    "state",
]


class CSVLogger:
    """Logs protocol operations to a CSV file.

    Usage:
        with CSVLogger("relays.csv") as log:
            board = Board(transport, 8, csv_logger=log)
            board.enable(3)
    """

    def __init__(self, csv_path: str):
        """Create (or overwrite) `csv_path` and write the header row."""
        self.csv_path = Path(csv_path)
        self.csv_file = open(self.csv_path, "w", newline="")
        self.csv_writer = csv.writer(self.csv_file)
        self.csv_writer.writerow(FIELDS)

        self.start_time = time.time()
        self.session_start_str = datetime.fromtimestamp(self.start_time).strftime(
            "%Y-%m-%d %H:%M:%S"
        )
        self.cumulative_bytes = 0

    def log_operation(
        self,
        operation: str,
        command: bytes,
        duration_ms: float,
        bytes_sent: int = 0,
        response: bytes = b"",
        state: str = "COMPLETE",
    ):
        """Log one exchange.

        Args:
            operation: Operation name (VERSION, STATE, ENABLE 3, ...)
            command: Bytes written to the board
            duration_ms: Time from write to last reply byte
            bytes_sent: Bytes written
            response: Bytes read back
            state: COMPLETE, TIMEOUT or ERROR
        """
        self.cumulative_bytes += bytes_sent + len(response)
        elapsed_s = time.time() - self.start_time
        now_str = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

        self.csv_writer.writerow(
            [
                self.session_start_str,
                now_str,
                f"{elapsed_s:.3f}",
                operation,
                command.hex(),
                f"{duration_ms:.0f}",
                bytes_sent,
                len(response),
                self.cumulative_bytes,
                response.hex(),
                state,
            ]
        )
        self.csv_file.flush()

    def close(self):
        if self.csv_file and not self.csv_file.closed:
            self.csv_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
