"""Canonical trigger-run error codes and job-layer failure types."""

from __future__ import annotations

from enum import Enum
from typing import Final


class RunErrorCode(str, Enum):
    """Stable error codes recorded on run timelines and results."""

    AUTH_ERROR = "AUTH_ERROR"
    FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"
    RESOLUTION_DEGRADED = "RESOLUTION_DEGRADED"
    RESOLUTION_MISSING = "RESOLUTION_MISSING"
    SESSION_LOOKUP_FAILED = "SESSION_LOOKUP_FAILED"
    LAUNCH_ERROR = "LAUNCH_ERROR"
    STATUS_CHECK_ERROR = "STATUS_CHECK_ERROR"
    JOB_FAILED = "JOB_FAILED"
    TIMEOUT = "TIMEOUT"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


# Recovered locally; the run continues.
RUN_NON_FATAL_CODES: Final[frozenset[str]] = frozenset(
    {
        RunErrorCode.RESOLUTION_DEGRADED.value,
        RunErrorCode.RESOLUTION_MISSING.value,
        RunErrorCode.SESSION_LOOKUP_FAILED.value,
    }
)

RUN_FATAL_CODES: Final[frozenset[str]] = frozenset(
    {code.value for code in RunErrorCode} - set(RUN_NON_FATAL_CODES)
)


class FolderNotFoundError(ValueError):
    """Raised when the requested folder cannot be resolved.

    Attributes:
        folder_name: Requested folder name.
        available_names: Folder names visible to the caller.
    """

    def __init__(self, folder_name: str, available_names: tuple[str, ...]):
        available_text = ", ".join(available_names) if available_names else "<none>"
        super().__init__(f"Folder '{folder_name}' not found. Available folders: {available_text}")
        self.folder_name = folder_name
        self.available_names = available_names
