"""Pytest configuration and fixtures.

Provides environment isolation, batch directory builders and a resolved
configuration. Environment fixtures are autouse.
"""

from __future__ import annotations

from contextlib import suppress
import hashlib
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from batchqa.config import resolve_config

if TYPE_CHECKING:
    from collections.abc import Callable

    from batchqa.config import FrozenConfig

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\n%%EOF\n"
ARTICLE_XML = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    "<article><headline>Harbour reopens</headline></article>\n"
)

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_config_env(monkeypatch, tmp_path_factory):
    """Clear BATCHQA_* variables and point config files at empty locations."""
    for key in list(os.environ):
        if key.startswith("BATCHQA_"):
            monkeypatch.delenv(key, raising=False)
    missing = tmp_path_factory.mktemp("no-config")
    monkeypatch.setenv("BATCHQA_PYPROJECT_PATH", str(missing / "pyproject.toml"))
    monkeypatch.setenv("BATCHQA_CONFIG_HOME", str(missing / "batchqa.toml"))


@pytest.fixture(autouse=True)
def reset_batchqa_logger():
    """Drop handlers the CLI attaches so tests don't leak them."""
    yield
    logger = logging.getLogger("batchqa")
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# =============================================================================
# Batch builders
# =============================================================================


def md5_hex(data: bytes) -> str:
    return hashlib.md5(data, usedforsecurity=False).hexdigest()


def write_page(
    directory: Path,
    stem: str,
    *,
    pdf: bytes = PDF_BYTES,
    xml: str | None = ARTICLE_XML,
    checksum: str | None = "auto",
) -> Path:
    """Write ``<stem>.pdf`` plus its checksum and metadata companions."""
    directory.mkdir(parents=True, exist_ok=True)
    pdf_path = directory / f"{stem}.pdf"
    pdf_path.write_bytes(pdf)
    if checksum is not None:
        value = md5_hex(pdf) if checksum == "auto" else checksum
        (directory / f"{stem}.pdf.md5").write_text(f"{value}  {stem}.pdf\n")
    if xml is not None:
        (directory / f"{stem}.xml").write_text(xml, encoding="utf-8")
    return pdf_path


@pytest.fixture
def make_batch(tmp_path) -> Callable[..., Path]:
    """Return a factory building a valid batch directory under ``tmp_path``."""

    def _make(name: str = "B-42", pages: tuple[str, ...] = ("page1", "page2")) -> Path:
        batch_dir = tmp_path / "data" / "batches" / name
        batch_dir.mkdir(parents=True, exist_ok=True)
        for stem in pages:
            write_page(batch_dir, stem)
        return batch_dir

    return _make


@pytest.fixture
def batch_dir(make_batch) -> Path:
    return make_batch()


@pytest.fixture
def config(batch_dir, tmp_path) -> FrozenConfig:
    return resolve_config(
        batch_dir,
        overrides={
            "structure_storage_dir": tmp_path / "structure",
            "threads_per_batch": 2,
        },
    )
