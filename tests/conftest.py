"""Pytest configuration and fixtures for payguard tests."""

import pytest

# Add the project root to the Python path
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from payguard import config as config_module
from payguard.config import Config
from payguard.models import Message

BASE_TS = 1735740000000  # 2025-01-01 14:00:00 UTC in epoch ms

SAMPLE_TEXT = "Confirmed. KES 5,000 from John 0712345678 on 01/01/2025 at 14:30 ref QAB123ABC"


@pytest.fixture(autouse=True)
def reset_global_config(monkeypatch):
    """Keep the lazily-created global config from leaking between tests."""
    monkeypatch.setattr(config_module, "_config", None)
    yield


@pytest.fixture
def config():
    """Default configuration, ignoring any local .env file."""
    return Config(_env_file=None)


@pytest.fixture
def base_ts():
    return BASE_TS


@pytest.fixture
def sample_text():
    """Genuine-looking payment notification."""
    return SAMPLE_TEXT


@pytest.fixture
def clean_text():
    """Payment notification whose phone has no suspicious digit runs."""
    return (
        "RKT81QX2PL Confirmed. Ksh 1,250.00 received from JANE W 0722918264 "
        "on 02/01/2025 at 9:15 AM. New M-PESA balance is Ksh 8,430.00"
    )


@pytest.fixture
def sample_message(sample_text, base_ts):
    return Message(raw_text=sample_text, sender_address="MPESA", arrival_timestamp=base_ts)


class FakeSleep:
    """Records requested sleeps instead of waiting."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)

    @property
    def delays_ms(self):
        return [round(s * 1000) for s in self.calls]


@pytest.fixture
def fake_sleep():
    return FakeSleep()
