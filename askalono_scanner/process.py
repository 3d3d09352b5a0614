"""Run external commands and capture their output."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from .errors import VersionQueryError

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ExecutionTrace:
    """Outcome of one finished process, bracketed by wall-clock timestamps."""

    command: Sequence[str]
    start_time: datetime
    end_time: datetime
    exit_code: int
    stdout: bytes
    stderr: str

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def fail_message(self) -> str:
        output = self.stderr.strip() or self.stdout_text.strip()
        return f"Running '{' '.join(self.command)}' failed with exit code {self.exit_code}:\n{output}"


class ProcessCapture:
    """Spawn a command, wait for it and keep its stdout bytes and stderr text."""

    def __init__(self, *command: str, cwd: Optional[str] = None) -> None:
        self.command = [str(part) for part in command]
        self.cwd = cwd

    def run(self) -> ExecutionTrace:
        logger.debug("Running %s", self.command)
        start_time = utc_now()
        proc = subprocess.run(self.command, cwd=self.cwd, capture_output=True)
        end_time = utc_now()
        return ExecutionTrace(
            command=tuple(self.command),
            start_time=start_time,
            end_time=end_time,
            exit_code=proc.returncode,
            stdout=proc.stdout or b"",
            stderr=(proc.stderr or b"").decode("utf-8", errors="replace"),
        )


def get_command_version(
    command: str,
    version_arg: str = "--version",
    transform: Callable[[str], str] = lambda output: output,
) -> str:
    """Return the version printed by ``command version_arg`` after ``transform``.

    Some tools print their version on stderr, so blank stdout falls back to it.
    """

    try:
        trace = ProcessCapture(command, version_arg).run()
    except OSError as exc:
        raise VersionQueryError(f"Could not run '{command} {version_arg}': {exc}", (command, version_arg), None) from exc
    if not trace.success:
        raise VersionQueryError(trace.fail_message, trace.command, trace.exit_code)

    output = trace.stdout_text.strip() or trace.stderr.strip()
    return transform(output)
