"""Batch structure check.

Verifies that the batch directory holds what a delivery must hold:

- at least one file,
- a checksum file next to every data file, whose MD5 digest matches,
- no checksum file without its data file,
- a metadata companion (same group prefix, same directory) for every data file.

A JSON manifest of the scanned structure is written to the configured
structure storage directory for later inspection.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import hashlib
import json
import logging
from typing import TYPE_CHECKING, Any

from batchqa._version import __version__

from ._files import BatchFile, FileRole, scan_batch

if TYPE_CHECKING:
    from pathlib import Path

    from batchqa.batch import Batch
    from batchqa.collector import ResultCollector
    from batchqa.config import FrozenConfig

log = logging.getLogger(__name__)

_CHUNK_SIZE = 1 << 20


def md5_digest(path: Path) -> str:
    """Return the hex MD5 digest of a file, read in chunks."""
    digest = hashlib.md5(usedforsecurity=False)
    with path.open("rb") as f:
        while chunk := f.read(_CHUNK_SIZE):
            digest.update(chunk)
    return digest.hexdigest()


def read_checksum(path: Path) -> str:
    """Return the first whitespace-separated token of a checksum file, lowercased."""
    tokens = path.read_text(encoding="ascii", errors="replace").split()
    return tokens[0].lower() if tokens else ""


class StructureChecker:
    """Check file layout and checksums of a batch."""

    name = "structure-checker"
    version = __version__

    def __init__(self, config: FrozenConfig) -> None:
        self.config = config

    def execute(self, batch: Batch, collector: ResultCollector) -> None:
        files = scan_batch(batch, self.config)
        if not files:
            collector.add_failure(
                batch.id,
                "structure",
                "empty-batch",
                f"Batch {batch.id} contains no files",
            )
            self._write_manifest(batch, files, {})
            return

        by_rel = {f.rel: f for f in files}
        data_files = [f for f in files if f.role is FileRole.DATA]
        digests = self._digest_all(data_files)
        log.debug("Computed %d digests for batch %s", len(digests), batch.id)

        postfix = self.config.checksum_postfix
        for f in data_files:
            checksum_file = by_rel.get(f.rel + postfix)
            if checksum_file is None:
                collector.add_failure(
                    f.subject_id(batch),
                    "checksum",
                    "missing-checksum",
                    f"Data file has no checksum file {f.path.name + postfix}",
                )
            else:
                expected = read_checksum(checksum_file.path)
                if expected != digests[f.rel]:
                    collector.add_failure(
                        f.subject_id(batch),
                        "checksum",
                        "checksum-mismatch",
                        f"Expected MD5 {expected or '<empty>'}, computed {digests[f.rel]}",
                    )

            if not self._has_metadata_companion(f, files):
                collector.add_failure(
                    f.subject_id(batch),
                    "structure",
                    "missing-metadata",
                    f"No metadata file for group {f.group!r} next to data file",
                )

        for f in files:
            if f.role is not FileRole.CHECKSUM:
                continue
            target = by_rel.get(f.rel[: -len(postfix)])
            if target is None or target.role is not FileRole.DATA:
                collector.add_failure(
                    f.subject_id(batch),
                    "checksum",
                    "orphan-checksum",
                    "Checksum file has no corresponding data file",
                )

        self._write_manifest(batch, files, digests)

    def _digest_all(self, data_files: list[BatchFile]) -> dict[str, str]:
        if not data_files:
            return {}
        workers = min(self.config.threads_per_batch, len(data_files))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = pool.map(md5_digest, (f.path for f in data_files))
            return {f.rel: digest for f, digest in zip(data_files, results, strict=True)}

    @staticmethod
    def _has_metadata_companion(data_file: BatchFile, files: list[BatchFile]) -> bool:
        return any(
            other.role is FileRole.METADATA
            and other.group == data_file.group
            and other.path.parent == data_file.path.parent
            for other in files
        )

    def _write_manifest(
        self, batch: Batch, files: list[BatchFile], digests: dict[str, str]
    ) -> Path:
        manifest: dict[str, Any] = {
            "batch": batch.id,
            "generated_by": f"{self.name} {self.version}",
            "files": [
                {
                    "path": f.rel,
                    "role": f.role.value,
                    "group": f.group,
                    "size": f.path.stat().st_size,
                    "md5": digests.get(f.rel),
                }
                for f in files
            ],
        }
        target_dir = self.config.structure_storage_dir
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / f"{batch.id}.structure.json"
        target.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
        log.debug("Wrote structure manifest %s", target)
        return target
