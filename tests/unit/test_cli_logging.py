"""Log level selection and the command line logging bootstrap."""

from __future__ import annotations

import logging

import pytest

from batchqa._logging import LOG_LEVEL_VAR, configure_logging, resolve_level

pytestmark = pytest.mark.unit


def test_default_level_is_warning() -> None:
    assert resolve_level() == logging.WARNING


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("DEBUG", logging.DEBUG),
        ("info", logging.INFO),
        (" error ", logging.ERROR),
        ("chatty", logging.WARNING),
        ("", logging.WARNING),
    ],
)
def test_environment_selects_level(monkeypatch, value: str, expected: int) -> None:
    monkeypatch.setenv(LOG_LEVEL_VAR, value)

    assert resolve_level() == expected


@pytest.mark.parametrize(
    ("verbosity", "expected"),
    [(1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
)
def test_verbosity_wins_over_environment(
    monkeypatch, verbosity: int, expected: int
) -> None:
    monkeypatch.setenv(LOG_LEVEL_VAR, "ERROR")

    assert resolve_level(verbosity) == expected


def test_configure_logging_replaces_its_own_handler(monkeypatch) -> None:
    monkeypatch.setenv(LOG_LEVEL_VAR, "ERROR")
    logger = logging.getLogger("batchqa")

    first = configure_logging()
    second = configure_logging(1)

    assert first not in logger.handlers
    assert second in logger.handlers
    assert [h.get_name() for h in logger.handlers].count("batchqa-cli") == 1
    assert logger.level == logging.INFO


def test_configured_handler_writes_to_stderr(capsys) -> None:
    configure_logging()

    logging.getLogger("batchqa.runner").warning("batch %s looks odd", "B-42")
    logging.getLogger("batchqa.runner").info("not shown")

    err = capsys.readouterr().err
    assert "WARNING batchqa.runner: batch B-42 looks odd" in err
    assert "not shown" not in err
