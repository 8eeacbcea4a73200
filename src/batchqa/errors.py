"""Exception hierarchy for batch-qa-tool."""

from __future__ import annotations


class BatchQAError(Exception):
    """Base exception for all batch-qa-tool errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint

    def __str__(self) -> str:
        """Return the message including the hint, when one is attached."""
        msg = super().__str__()
        return f"{msg}. {self.hint}" if self.hint else msg


class UsageError(BatchQAError):
    """The tool was invoked with missing or invalid arguments."""


class NotABatchDirectoryError(UsageError):
    """The batch path does not denote an existing directory."""

    def __init__(self, path: str, *, hint: str | None = None) -> None:
        super().__init__(
            f"Must have first argument as existing directory: {path}", hint=hint
        )
        self.path = path


class ConfigurationError(BatchQAError):
    """Configuration validation or provisioning failed."""


HINTS = {
    "not_a_directory": "Pass the path of a batch directory, e.g. /data/batches/B-42",
    "invalid_pattern": "Regex fields must compile with Python's re module.",
    "temp_dir": (
        "Set BATCHQA_STRUCTURE_STORAGE_DIR to a writable directory "
        "or check the system temp directory."
    ),
}
