"""Error taxonomy for bootstrapping, running and parsing the scanner."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class ScannerError(Exception):
    """Base class for all failures raised by this package.

    ``fatal_to_process`` tells callers whether retrying, or moving on to the
    next path, can possibly succeed within the same process.
    """

    fatal_to_process = False


class UnsupportedPlatformError(ScannerError, ValueError):
    """The host platform cannot be mapped to a released executable."""

    fatal_to_process = True

    def __init__(self, host: str) -> None:
        super().__init__(f"Unsupported operating system: {host!r}")
        self.host = host


class DownloadError(ScannerError, OSError):
    """The executable could not be downloaded."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code

    def __str__(self) -> str:
        return self.args[0]


class VersionQueryError(ScannerError):
    """Running the executable with its version flag failed."""

    def __init__(self, message: str, command: Sequence[str], exit_code: Optional[int]) -> None:
        super().__init__(message)
        self.command = tuple(command)
        self.exit_code = exit_code


class ScanError(ScannerError):
    """The scanner process did not finish successfully for a path."""

    def __init__(self, message: str, path: Path, exit_code: Optional[int], stderr: str = "") -> None:
        super().__init__(message)
        self.path = path
        self.exit_code = exit_code
        self.stderr = stderr


class MalformedResultsError(ScannerError, ValueError):
    """A results file record could not be parsed into a structured entry."""

    def __init__(self, message: str, results_file: Path, record_index: int) -> None:
        super().__init__(message)
        self.results_file = results_file
        self.record_index = record_index
