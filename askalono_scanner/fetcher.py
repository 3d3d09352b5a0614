"""Download the pinned scanner executable into a scratch directory."""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx

from .errors import DownloadError
from .tool import ToolIdentity, locate_artifact
from .utils.http import build_client, cached_get

logger = logging.getLogger(__name__)


@dataclass
class ExecutableArtifact:
    """Handle on a directory holding a ready-to-run executable.

    Artifacts created by :func:`bootstrap` are owned by the handle and removed
    by :meth:`release`; artifacts wrapping an existing directory are not.
    """

    directory: Path
    file_path: Path
    executable: bool
    owned: bool = True

    def release(self) -> None:
        if not self.owned or not self.directory.exists():
            return
        try:
            shutil.rmtree(self.directory)
        except OSError as exc:
            logger.warning("Failed to remove scanner directory %s: %s", self.directory, exc)
        else:
            logger.debug("Removed scanner directory %s", self.directory)

    def __enter__(self) -> "ExecutableArtifact":
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()


def bootstrap(
    identity: ToolIdentity,
    client: Optional[httpx.Client] = None,
    cache_dir: Optional[Path] = None,
    scratch_root: Optional[Path] = None,
) -> ExecutableArtifact:
    """Download ``identity``'s executable and return a handle on it.

    Raises :class:`DownloadError` unless the server answers ``200`` with a
    non-empty body. The scratch directory is removed again on any failure.
    """

    location = locate_artifact(identity)
    logger.info("Downloading %s from '%s'...", identity, location.url)

    own_client = client is None
    if own_client:
        client = build_client()
    try:
        with cached_get(client, location.url, cache_dir) as response:
            if not response.ok or not response.has_body:
                raise DownloadError(
                    f"Failed to download {identity} from {location.url}.",
                    url=location.url,
                    status_code=response.status_code,
                )

            if response.from_cache:
                logger.info("Retrieved %s from local cache.", identity)

            if scratch_root is not None:
                scratch_root.mkdir(parents=True, exist_ok=True)
            directory = Path(tempfile.mkdtemp(prefix=f"{identity.name}-", dir=scratch_root))
            artifact = ExecutableArtifact(
                directory=directory,
                file_path=directory / location.executable_name,
                executable=identity.platform.is_windows,
            )
            try:
                _write_body(response.iter_bytes(), artifact.file_path, location.url)
                if not identity.platform.is_windows:
                    _make_executable(artifact.file_path)
                    artifact.executable = True
            except BaseException:
                artifact.release()
                raise
    except httpx.HTTPError as exc:
        raise DownloadError(
            f"Failed to download {identity} from {location.url}: {exc}", url=location.url
        ) from exc
    finally:
        if own_client:
            client.close()

    logger.info("Bootstrapped %s %s at %s", identity, identity.pinned_version, artifact.directory)
    return artifact


def _write_body(chunks, target: Path, url: str) -> None:
    size = 0
    with target.open("wb") as handle:
        for chunk in chunks:
            handle.write(chunk)
            size += len(chunk)
    if size == 0:
        raise DownloadError(f"Downloaded an empty body from {url}.", url=url, status_code=httpx.codes.OK)


def _make_executable(path: Path) -> None:
    mode = os.stat(path).st_mode
    os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
