"""Host platform classification for released scanner executables."""

from __future__ import annotations

from enum import Enum

from .errors import UnsupportedPlatformError

_ALIASES = {
    "linux": "linux",
    "darwin": "mac",
    "mac": "mac",
    "macos": "mac",
    "windows": "windows",
    "win32": "windows",
}


class PlatformTag(str, Enum):
    """Suffix used by released executables, one per supported platform."""

    LINUX = "linux"
    MAC = "mac"
    WINDOWS = "exe"

    @property
    def is_windows(self) -> bool:
        return self is PlatformTag.WINDOWS


def classify_platform(host: str) -> PlatformTag:
    """Map a host description such as ``platform.system()`` to a tag.

    Accepts ``platform.system()`` and ``sys.platform`` spellings in any case.
    """

    key = _ALIASES.get((host or "").strip().lower())
    if key == "linux":
        return PlatformTag.LINUX
    if key == "mac":
        return PlatformTag.MAC
    if key == "windows":
        return PlatformTag.WINDOWS
    raise UnsupportedPlatformError(host)
