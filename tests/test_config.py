import pytest

from tosr0x.config import Settings


def test_defaults():
    s = Settings.from_env({})
    assert s.port == "/dev/ttyUSB0"
    assert s.relay_count == 8
    assert s.timeout == 1.0
    assert s.mock is False


def test_from_env():
    s = Settings.from_env(
        {
            "TOSR0X_PORT": "/dev/ttyACM1",
            "TOSR0X_RELAY_COUNT": "4",
            "TOSR0X_TIMEOUT": "0.5",
            "TOSR0X_MOCK_DEVICE": "TRUE",
        }
    )
    assert s == Settings(port="/dev/ttyACM1", relay_count=4, timeout=0.5, mock=True)


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("TOSR0X_RELAY_COUNT", "2")
    assert Settings.from_env().relay_count == 2


@pytest.mark.parametrize(
    "env",
    [
        {"TOSR0X_RELAY_COUNT": "nine"},
        {"TOSR0X_RELAY_COUNT": "9"},
        {"TOSR0X_RELAY_COUNT": "0"},
        {"TOSR0X_TIMEOUT": "0"},
    ],
)
def test_invalid_values(env):
    with pytest.raises(ValueError):
        Settings.from_env(env)
