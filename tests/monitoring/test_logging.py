"""Tests for structlog configuration."""

from __future__ import annotations

import logging

import pytest

from zer0_agent.monitoring.logging import LEVEL_ENV_VAR, _resolve_level, configure_logging, get_logger


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    configure_logging(force=True)


@pytest.mark.parametrize(
    "level,env,expected",
    [
        (None, None, logging.WARNING),
        ("debug", None, logging.DEBUG),
        (None, "INFO", logging.INFO),
        ("ERROR", "DEBUG", logging.ERROR),
        ("loud", None, logging.WARNING),
    ],
)
def test_resolve_level(monkeypatch: pytest.MonkeyPatch, level, env, expected: int) -> None:
    if env is None:
        monkeypatch.delenv(LEVEL_ENV_VAR, raising=False)
    else:
        monkeypatch.setenv(LEVEL_ENV_VAR, env)

    assert _resolve_level(level) == expected


def test_events_go_to_stderr(capsys: pytest.CaptureFixture) -> None:
    configure_logging("DEBUG", force=True)

    get_logger("tests").debug("context.test.event", files=2)

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "context.test.event" in captured.err
    assert "files=2" in captured.err


def test_debug_hidden_by_default(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    monkeypatch.delenv(LEVEL_ENV_VAR, raising=False)
    configure_logging(force=True)

    get_logger("tests").debug("context.test.hidden")

    assert "context.test.hidden" not in capsys.readouterr().err
