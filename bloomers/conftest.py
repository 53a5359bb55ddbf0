"""pytest fixtures for bloomers tests."""

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog():
    """The CLI reconfigures structlog; undo it after every test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove any BLOOMERS_* variables inherited from the shell."""
    for name in ("BLOOMERS_FALSE_POSITIVE_RATE", "BLOOMERS_FILTER_PATH", "BLOOMERS_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
