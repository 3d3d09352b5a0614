"""Cached HTTP GET helpers built on httpx."""

from __future__ import annotations

import hashlib
import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Callable, Iterator, Optional

import httpx

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
DEFAULT_TIMEOUT = httpx.Timeout(30.0, read=300.0)


@dataclass
class CachedResponse:
    """Response whose body is either streamed from the network or the cache."""

    url: str
    status_code: int
    from_cache: bool
    _chunks: Optional[Callable[[], Iterator[bytes]]] = None

    @property
    def ok(self) -> bool:
        return self.status_code == httpx.codes.OK

    @property
    def has_body(self) -> bool:
        return self._chunks is not None

    def iter_bytes(self) -> Iterator[bytes]:
        if self._chunks is None:
            return iter(())
        return self._chunks()


def cache_key(url: str) -> str:
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


def build_client(transport: Optional[httpx.BaseTransport] = None) -> httpx.Client:
    return httpx.Client(follow_redirects=True, timeout=DEFAULT_TIMEOUT, transport=transport)


@contextmanager
def cached_get(client: httpx.Client, url: str, cache_dir: Optional[Path] = None) -> Iterator[CachedResponse]:
    """Issue a single GET for ``url``, serving it from ``cache_dir`` when possible.

    Only complete ``200`` bodies are cached. A body is cached while it is being
    consumed, so a partially read response leaves no cache entry behind.
    """

    cached = cache_dir / cache_key(url) if cache_dir else None
    if cached is not None and cached.is_file():
        logger.debug("Cache hit for %s at %s", url, cached)
        yield CachedResponse(url, httpx.codes.OK, True, partial(_read_chunks, cached))
        return

    with client.stream("GET", url) as response:
        if response.status_code != httpx.codes.OK or cached is None:
            chunks = response.iter_bytes
        else:
            chunks = partial(_tee_to_cache, response.iter_bytes(), cached)
        yield CachedResponse(url, response.status_code, False, chunks)


def _read_chunks(path: Path) -> Iterator[bytes]:
    with path.open("rb") as handle:
        while True:
            chunk = handle.read(CHUNK_SIZE)
            if not chunk:
                return
            yield chunk


def _tee_to_cache(chunks: Iterator[bytes], target: Path) -> Iterator[bytes]:
    target.parent.mkdir(parents=True, exist_ok=True)
    part_file = target.with_name(f"{target.name}.{os.getpid()}.part")
    size = 0
    try:
        with part_file.open("wb") as handle:
            for chunk in chunks:
                handle.write(chunk)
                size += len(chunk)
                yield chunk
        if size:
            os.replace(part_file, target)
            logger.debug("Cached %d bytes at %s", size, target)
    finally:
        if part_file.exists():
            part_file.unlink()
