import pytest


@pytest.fixture(autouse=True)
def plain_diagnostics(monkeypatch):
    # keep termcolor from wrapping labels in ANSI codes when run from a terminal
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.delenv("FORCE_COLOR", raising=False)
