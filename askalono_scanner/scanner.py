"""Bootstrap, version-check and run askalono against source trees."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import httpx

from .errors import ScanError, VersionQueryError
from .fetcher import ExecutableArtifact, bootstrap
from .parser import parse_results
from .process import ProcessCapture, get_command_version
from .result import Provenance, Result, ScanResult, ScannerDetails, ScanSummary
from .tool import ToolIdentity

logger = logging.getLogger(__name__)

RESULT_FILE_EXT = "txt"
SCAN_SUBCOMMAND = "crawl"


class AskalonoScanner:
    """Wrap one pinned askalono executable.

    The scanner holds no global state; several instances with different
    identities may coexist. :meth:`prepare` has to be called once before
    paths are scanned, and is not safe to run concurrently.
    """

    def __init__(
        self,
        identity: ToolIdentity,
        http_cache_dir: Optional[Path] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.identity = identity
        self._http_cache_dir = http_cache_dir
        self._client = client
        self._artifact: Optional[ExecutableArtifact] = None

    @property
    def name(self) -> str:
        return self.identity.name

    @property
    def results_file_name(self) -> str:
        return f"{self.name}.{RESULT_FILE_EXT}"

    @property
    def artifact(self) -> ExecutableArtifact:
        if self._artifact is None:
            raise RuntimeError(f"{self.name} has not been prepared, call prepare() first.")
        return self._artifact

    @property
    def executable_path(self) -> Path:
        return self.artifact.file_path

    def details(self) -> ScannerDetails:
        return ScannerDetails(name=self.name, version=self.identity.pinned_version, configuration=self.get_configuration())

    def get_configuration(self) -> str:
        return ""

    # ------------------------------------------------------------------
    # Executable management
    # ------------------------------------------------------------------
    def bootstrap(self, scratch_root: Optional[Path] = None) -> ExecutableArtifact:
        return bootstrap(self.identity, client=self._client, cache_dir=self._http_cache_dir, scratch_root=scratch_root)

    def get_version(self, directory: Path) -> str:
        """Return the bare version reported by the executable in ``directory``."""

        executable = Path(directory) / self.identity.executable_name
        prefix = self.identity.version_prefix
        # "askalono --version" prints e.g. "askalono 0.2.0-beta.1".
        return get_command_version(
            str(executable.absolute()),
            transform=lambda output: output.split(prefix, 1)[1] if prefix in output else output,
        )

    def prepare(self, existing_dir: Optional[Path] = None) -> ExecutableArtifact:
        """Reuse ``existing_dir`` if it holds the pinned version, otherwise bootstrap."""

        self.release()
        if existing_dir is not None:
            reused = self._reuse(Path(existing_dir))
            if reused is not None:
                self._artifact = reused
                return reused
        self._artifact = self.bootstrap()
        return self._artifact

    def release(self) -> None:
        if self._artifact is not None:
            self._artifact.release()
            self._artifact = None

    def _reuse(self, directory: Path) -> Optional[ExecutableArtifact]:
        executable = directory / self.identity.executable_name
        if not executable.is_file():
            logger.info("No %s executable found in %s.", self.name, directory)
            return None
        try:
            found = self.get_version(directory)
        except VersionQueryError as exc:
            logger.warning("Could not determine the version of %s: %s", executable, exc)
            return None
        if found != self.identity.pinned_version:
            logger.warning(
                "%s in %s has version %s, but %s is required.",
                self.name,
                directory,
                found,
                self.identity.pinned_version,
            )
            return None
        logger.info("Using %s %s from %s.", self.name, found, directory)
        return ExecutableArtifact(directory=directory, file_path=executable, executable=True, owned=False)

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------
    def scan_path(
        self,
        path: Path,
        results_file: Path,
        provenance: Optional[Provenance] = None,
        scanner_details: Optional[ScannerDetails] = None,
    ) -> ScanResult:
        """Scan ``path`` and write the raw report to ``results_file``.

        No timeout is applied; a hanging scanner blocks the caller.
        """

        target = Path(path).absolute()
        command = ProcessCapture(str(self.executable_path.absolute()), SCAN_SUBCOMMAND, str(target))
        try:
            trace = command.run()
        except OSError as exc:
            raise ScanError(f"Could not run {self.name} on {target}: {exc}", path=target, exit_code=None) from exc

        if trace.stderr.strip():
            logger.debug(trace.stderr)

        if not trace.success:
            raise ScanError(trace.fail_message, path=target, exit_code=trace.exit_code, stderr=trace.stderr)

        results_file = Path(results_file)
        results_file.parent.mkdir(parents=True, exist_ok=True)
        results_file.write_bytes(trace.stdout)

        result = self.get_result(results_file)
        summary = ScanSummary(
            start_time=trace.start_time,
            end_time=trace.end_time,
            file_count=result.file_count,
            licenses=set(result.licenses),
            errors=set(result.errors),
        )
        return ScanResult(
            provenance=provenance or Provenance(),
            scanner=scanner_details or self.details(),
            summary=summary,
            raw_result=result.raw_result,
            findings=list(result.findings),
        )

    def get_result(self, results_file: Path) -> Result:
        return parse_results(Path(results_file))
