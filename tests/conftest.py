"""Root-level pytest fixtures for all tests.

Provides shared fixtures:
- A fully configured AppConfig with zero-delay polling
- The in-memory assistant service double
- Sample raw documents and assistant replies
"""

import os

import pytest

from src.config import AppConfig
from src.services.assistant_client import RawFile
from tests.helpers import FakeAssistantService

_ENV_PREFIXES = ("WIRING_ANALYST_", "OPENAI_")


# ============================================================================
# Pytest Markers
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests requiring the remote assistant service"
    )


# ============================================================================
# Environment Isolation
# ============================================================================


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Remove config-related env vars and run from an empty directory."""
    for key in list(os.environ):
        if key.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


# ============================================================================
# Config and Service Fixtures
# ============================================================================


@pytest.fixture
def app_config() -> AppConfig:
    """Config with both assistants set and polling that never waits."""
    return AppConfig.model_validate({
        "openai": {
            "api_key": "sk-test-key-000000",
            "analyze_assistant_id": "asst_analyze",
            "chat_assistant_id": "asst_chat",
        },
        "runs": {"poll_interval_seconds": 0, "max_poll_attempts": 5},
        "uploads": {"max_files": 3, "max_file_bytes": 1024},
    })


@pytest.fixture
def fake_service() -> FakeAssistantService:
    """Assistant service double that completes every run immediately."""
    return FakeAssistantService()


# ============================================================================
# Sample Data
# ============================================================================


SAMPLE_TABLE = {
    "controller": "Carel",
    "assumptions": "Pump P1 runs on 230V.",
    "rows": [
        {
            "signal": "Supply temperature",
            "category": "Sensor",
            "ioType": "AnalogIn",
            "module": "c.pCO",
            "slot": "1",
            "terminal": "B1",
            "voltage": "0-10V",
            "cable": "LiYCY 2x0.75",
            "article": "NTC015",
            "source": "schema.pdf p.3",
        },
        {
            "signal": "Pump P1",
            "category": "Load",
            "ioType": "DigitalOut",
            "module": "c.pCO",
            "slot": "1",
            "terminal": "NO1",
            "voltage": "230V",
            "cable": "NYM 3x1.5",
            "article": "",
            "source": "schema.pdf p.4",
        },
    ],
}


@pytest.fixture
def sample_table() -> dict:
    """A valid two-row terminal table."""
    return {**SAMPLE_TABLE, "rows": [dict(r) for r in SAMPLE_TABLE["rows"]]}


@pytest.fixture
def raw_files() -> list[RawFile]:
    """Two small documents."""
    return [
        RawFile(name="schema.pdf", content=b"%PDF", mime_type="application/pdf"),
        RawFile(name="notes.txt", content=b"P1 230V", mime_type="text/plain"),
    ]
