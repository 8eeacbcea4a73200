"""Metadata check: XML metadata must parse, data files must be PDFs."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from xml.etree import ElementTree as ET

from batchqa._version import __version__

from ._files import BatchFile, FileRole, scan_batch

if TYPE_CHECKING:
    from batchqa.batch import Batch
    from batchqa.collector import ResultCollector
    from batchqa.config import FrozenConfig

log = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF-"


class MetadataChecker:
    """Validate the metadata and data files of a batch.

    The PDF signature check only runs when ``at_ninestars`` is set; outside
    that environment data files are validated upstream.
    """

    name = "metadata-checker"
    version = __version__

    def __init__(self, config: FrozenConfig) -> None:
        self.config = config

    def execute(self, batch: Batch, collector: ResultCollector) -> None:
        checked = 0
        for f in scan_batch(batch, self.config):
            if f.role is FileRole.METADATA and f.path.suffix.lower() == ".xml":
                self._check_xml(batch, f, collector)
                checked += 1
            elif f.role is FileRole.DATA and self.config.at_ninestars:
                self._check_pdf(batch, f, collector)
                checked += 1
        log.debug("Checked metadata of %d files in batch %s", checked, batch.id)

    @staticmethod
    def _check_xml(batch: Batch, f: BatchFile, collector: ResultCollector) -> None:
        try:
            root = ET.parse(f.path).getroot()
        except ET.ParseError as e:
            collector.add_failure(
                f.subject_id(batch),
                "metadata",
                "malformed-xml",
                f"Metadata is not well-formed XML: {e}",
            )
            return
        if len(root) == 0 and not (root.text or "").strip():
            collector.add_failure(
                f.subject_id(batch),
                "metadata",
                "empty-metadata",
                f"Metadata root element <{root.tag}> is empty",
            )

    @staticmethod
    def _check_pdf(batch: Batch, f: BatchFile, collector: ResultCollector) -> None:
        with f.path.open("rb") as fh:
            head = fh.read(len(PDF_SIGNATURE))
        if head != PDF_SIGNATURE:
            collector.add_failure(
                f.subject_id(batch),
                "metadata",
                "not-a-pdf",
                "Data file does not start with the PDF signature",
            )
