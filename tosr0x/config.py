"""Environment configuration for tools built on the library.

    TOSR0X_PORT          serial device path (default /dev/ttyUSB0)
    TOSR0X_RELAY_COUNT   relays on the board (default 8)
    TOSR0X_TIMEOUT       reply timeout in seconds (default 1.0)
    TOSR0X_MOCK_DEVICE   "true" to use MockTransport instead of hardware
"""

from __future__ import annotations
import os
from dataclasses import dataclass

from .protocol import MAX_RELAYS, READ_TIMEOUT

DEFAULT_PORT = "/dev/ttyUSB0"


@dataclass(frozen=True)
class Settings:
    port: str = DEFAULT_PORT
    relay_count: int = MAX_RELAYS
    timeout: float = READ_TIMEOUT
    mock: bool = False

    def __post_init__(self):
        if not 1 <= self.relay_count <= MAX_RELAYS:
            raise ValueError(
                f"relay count must be between 1 and {MAX_RELAYS}, got {self.relay_count}"
            )
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        try:
            relay_count = int(env.get("TOSR0X_RELAY_COUNT", MAX_RELAYS))
            timeout = float(env.get("TOSR0X_TIMEOUT", READ_TIMEOUT))
        except ValueError as e:
            raise ValueError(f"Invalid TOSR0X_* environment value: {e}") from e
        return cls(
            port=env.get("TOSR0X_PORT", DEFAULT_PORT),
            relay_count=relay_count,
            timeout=timeout,
            mock=env.get("TOSR0X_MOCK_DEVICE", "false").lower() == "true",
        )
