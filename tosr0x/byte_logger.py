"""Raw byte logger for serial I/O inspection

Captures every byte sent to and received from the board, like `tee`.
Outgoing command bytes are annotated with their meaning (STATE, ENABLE 3...).
"""

from datetime import datetime, timezone
from pathlib import Path

from .protocol import DISABLE_ALL, ENABLE_ALL, MAX_RELAYS, STATE, VERSION


def describe_command(opcode: int) -> str:
    """Human-readable name for a TOSRx command byte."""
    if opcode == VERSION[0]:
        return "VERSION"
    if opcode == STATE[0]:
        return "STATE"
    for base, action in ((ENABLE_ALL[0], "ENABLE"), (DISABLE_ALL[0], "DISABLE")):
        if opcode == base:
            return f"{action} ALL"
        if base < opcode <= base + MAX_RELAYS:
            return f"{action} {opcode - base}"
    return "UNKNOWN"


class ByteDumpLogger:
    """Log raw serial I/O for protocol analysis.

    Creates two files:
    - .dump: Binary dump of all I/O
    - .dump.txt: Human-readable hex/binary format
    """

    @staticmethod
    def _iso_timestamp() -> str:
        """UTC ISO-8601 timestamp with millisecond precision."""
        return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def __init__(self, base_path: str):
        """Open `{base_path}.dump` and `{base_path}.dump.txt`."""
        self.base_path = Path(base_path)
        self.binary_file = open(f"{base_path}.dump", "wb")
        self.text_file = open(f"{base_path}.dump.txt", "w")

        self.text_file.write(f"TOSRx Serial I/O Dump - {self._iso_timestamp()}\n")
        self.text_file.write("=" * 70 + "\n\n")
        self.text_file.flush()

    def log_send(self, data: bytes, description: str = ""):
        timestamp = self._iso_timestamp()

        self.binary_file.write(b">>> SEND " + data + b"\n")
        self.binary_file.flush()

        self.text_file.write(f"[{timestamp}] SEND ({len(data)} bytes)")
        if description:
            self.text_file.write(f": {description}")
        self.text_file.write("\n")
        self.text_file.write("  HEX: " + " ".join(f"{b:02x}" for b in data) + "\n")
        for opcode in data:
            self.text_file.write(f"  → {describe_command(opcode)}\n")
        self.text_file.write("\n")
        self.text_file.flush()

    def log_recv(self, data: bytes):
        if not data:
            return

        timestamp = self._iso_timestamp()

        self.binary_file.write(b"<<< RECV " + data + b"\n")
        self.binary_file.flush()

        self.text_file.write(f"[{timestamp}] RECV ({len(data)} bytes)\n")
        self.text_file.write("  HEX: " + " ".join(f"{b:02x}" for b in data) + "\n")
        # State replies read best as relay bits, relay 1 rightmost
        self.text_file.write("  BIN: " + " ".join(f"{b:08b}" for b in data) + "\n\n")
        self.text_file.flush()

    def log_error(self, message: str):
        timestamp = self._iso_timestamp()
        self.text_file.write(f"[{timestamp}] ERROR: {message}\n\n")
        self.text_file.flush()

    def close(self):
        """Close log files."""
        if not self.binary_file.closed:
            self.binary_file.close()
        if not self.text_file.closed:
            self.text_file.write(f"\nLog closed: {self._iso_timestamp()}\n")
            self.text_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
