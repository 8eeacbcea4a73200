"""Structure check findings and manifest."""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path

import pytest

from batchqa.batch import identify
from batchqa.collector import ResultCollector
from batchqa.components import StructureChecker
from batchqa.components.structure import md5_digest, read_checksum
from tests.conftest import PDF_BYTES, md5_hex, write_page

pytestmark = pytest.mark.unit


def _check(batch_dir: Path, config) -> ResultCollector:
    collector = ResultCollector(StructureChecker.name, StructureChecker.version)
    StructureChecker(config).execute(identify(batch_dir), collector)
    return collector


def _details(collector: ResultCollector) -> list[tuple[str, str]]:
    return [(e.subject_id, e.detail) for e in collector.entries]


def test_valid_batch_passes_and_writes_manifest(batch_dir: Path, config) -> None:
    collector = _check(batch_dir, config)

    assert collector.is_success()
    manifest = json.loads(
        (config.structure_storage_dir / "B-42.structure.json").read_text()
    )
    assert manifest["batch"] == "B-42"
    by_path = {f["path"]: f for f in manifest["files"]}
    assert by_path["page1.pdf"]["role"] == "data"
    assert by_path["page1.pdf"]["md5"] == md5_hex(PDF_BYTES)
    assert by_path["page1.pdf.md5"]["role"] == "checksum"
    assert by_path["page1.xml"]["role"] == "metadata"
    assert by_path["page1.xml"]["md5"] is None
    assert list(by_path) == sorted(by_path)


def test_empty_batch(tmp_path: Path, config) -> None:
    empty = tmp_path / "EMPTY"
    empty.mkdir()

    collector = _check(empty, config)

    assert _details(collector) == [("EMPTY", "empty-batch")]
    assert collector.entries[0].category == "structure"


def test_missing_checksum(batch_dir: Path, config) -> None:
    (batch_dir / "page2.pdf.md5").unlink()

    assert _details(_check(batch_dir, config)) == [("B-42/page2.pdf", "missing-checksum")]


def test_checksum_mismatch(batch_dir: Path, config) -> None:
    write_page(batch_dir, "page3", checksum="0" * 32)

    collector = _check(batch_dir, config)

    (entry,) = collector.entries
    assert (entry.subject_id, entry.category, entry.detail) == (
        "B-42/page3.pdf",
        "checksum",
        "checksum-mismatch",
    )
    assert md5_hex(PDF_BYTES) in entry.message


def test_uppercase_checksum_is_accepted(batch_dir: Path, config) -> None:
    write_page(batch_dir, "page3", checksum=md5_hex(PDF_BYTES).upper())

    assert _check(batch_dir, config).is_success()


def test_orphan_checksum(batch_dir: Path, config) -> None:
    (batch_dir / "page2.pdf").unlink()
    (batch_dir / "page2.xml").unlink()

    assert _details(_check(batch_dir, config)) == [
        ("B-42/page2.pdf.md5", "orphan-checksum")
    ]


def test_missing_metadata_companion(batch_dir: Path, config) -> None:
    write_page(batch_dir / "section", "page9", xml=None)

    assert _details(_check(batch_dir, config)) == [
        ("B-42/section/page9.pdf", "missing-metadata")
    ]


def test_companion_must_share_directory(batch_dir: Path, config) -> None:
    write_page(batch_dir / "a", "page9", xml=None)
    (batch_dir / "b").mkdir()
    (batch_dir / "b" / "page9.xml").write_text("<article>x</article>")

    assert ("B-42/a/page9.pdf", "missing-metadata") in _details(_check(batch_dir, config))


def test_ignored_files_are_skipped(batch_dir: Path, config) -> None:
    (batch_dir / "Thumbs.db").write_bytes(b"\x00")
    (batch_dir / "stray.pdf").write_bytes(PDF_BYTES)
    ignoring = dataclasses.replace(config, ignored_files=r"Thumbs\.db|stray\.pdf")

    assert _check(batch_dir, ignoring).is_success()


def test_grouping_char_defines_companions(tmp_path: Path, config) -> None:
    batch_dir = tmp_path / "B-9"
    batch_dir.mkdir()
    (batch_dir / "0001_page.pdf").write_bytes(PDF_BYTES)
    (batch_dir / "0001_page.pdf.md5").write_text(md5_hex(PDF_BYTES))
    (batch_dir / "0001_article.xml").write_text("<article>x</article>")

    assert not _check(batch_dir, config).is_success()
    underscore = dataclasses.replace(config, grouping_char="_")
    assert _check(batch_dir, underscore).is_success()


def test_digest_helpers(tmp_path: Path) -> None:
    data = tmp_path / "x.pdf"
    data.write_bytes(PDF_BYTES)
    checksum = tmp_path / "x.pdf.md5"
    checksum.write_text(f"  {md5_hex(PDF_BYTES).upper()}  x.pdf\n")
    blank = tmp_path / "blank.md5"
    blank.write_text("\n")

    assert md5_digest(data) == md5_hex(PDF_BYTES)
    assert read_checksum(checksum) == md5_hex(PDF_BYTES)
    assert read_checksum(blank) == ""


def test_unwritable_storage_dir_raises(batch_dir: Path, config, tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")
    broken = dataclasses.replace(config, structure_storage_dir=blocker / "sub")

    with pytest.raises(OSError):
        _check(batch_dir, broken)


def test_manifests_stored_inside_the_batch_are_not_rescanned(
    batch_dir: Path, config
) -> None:
    inside = dataclasses.replace(config, structure_storage_dir=batch_dir / "qa")

    _check(batch_dir, inside)
    second = _check(batch_dir, inside)

    assert second.is_success()
    manifest = json.loads((batch_dir / "qa" / "B-42.structure.json").read_text())
    assert [f["path"] for f in manifest["files"] if f["path"].startswith("qa/")] == []
