"""Configuration: tool identity, download cache, reusable scanner directory and log level."""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .platforms import classify_platform
from .tool import ToolIdentity, askalono_identity

HTTP_CACHE_ENV = "ASKALONO_SCANNER_HTTP_CACHE"
SCANNER_DIR_ENV = "ASKALONO_SCANNER_DIR"
LOG_LEVEL_ENV = "ASKALONO_SCANNER_LOG_LEVEL"

DEFAULT_HTTP_CACHE = Path.home() / ".cache" / "askalono-scanner" / "http"
DEFAULT_LOG_LEVEL = "INFO"
CACHE_DISABLED = "off"


@dataclass(frozen=True)
class ScannerConfig:
    """Settings resolved once at start-up and passed to the scanner."""

    identity: ToolIdentity
    http_cache_dir: Optional[Path] = DEFAULT_HTTP_CACHE
    scanner_dir: Optional[Path] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, host: Optional[str] = None) -> "ScannerConfig":
        """Build the configuration once at start-up.

        Raises :class:`~askalono_scanner.errors.UnsupportedPlatformError` when
        ``host`` (default ``platform.system()``) is not linux, mac or windows.
        """

        env = os.environ if environ is None else environ
        identity = askalono_identity(classify_platform(host or platform.system()))

        raw_cache = env.get(HTTP_CACHE_ENV, "").strip()
        if raw_cache.lower() == CACHE_DISABLED:
            cache_dir = None
        elif raw_cache:
            cache_dir = Path(raw_cache).expanduser()
        else:
            cache_dir = DEFAULT_HTTP_CACHE

        raw_dir = env.get(SCANNER_DIR_ENV, "").strip()
        scanner_dir = Path(raw_dir).expanduser() if raw_dir else None

        return cls(identity=identity, http_cache_dir=cache_dir, scanner_dir=scanner_dir)
