"""Pinned tool identity and download location of its executable."""

from __future__ import annotations

from dataclasses import dataclass

from .platforms import PlatformTag

ASKALONO_NAME = "askalono"
ASKALONO_VERSION = "0.2.0-beta.1"

RELEASE_URL_TEMPLATE = "https://github.com/amzn/askalono/releases/download/{version}/{executable}"
# No Windows release exists for the pinned version, see
# https://github.com/amzn/askalono/issues/23.
WINDOWS_BUILD_URL_TEMPLATE = (
    "https://ci.appveyor.com/api/buildjobs/fsnas6tqv3bmkbvx/artifacts/target/release/{executable}"
)


@dataclass(frozen=True)
class ToolIdentity:
    """Name, pinned version and platform of the wrapped executable."""

    name: str
    pinned_version: str
    platform: PlatformTag

    @property
    def executable_name(self) -> str:
        return f"{self.name}.{self.platform.value}"

    @property
    def version_prefix(self) -> str:
        """Prefix printed before the version by ``<tool> --version``."""

        return f"{self.name} "

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ArtifactLocation:
    """Where to download an executable from and what to call it locally."""

    url: str
    executable_name: str


def askalono_identity(platform: PlatformTag, version: str = ASKALONO_VERSION) -> ToolIdentity:
    return ToolIdentity(name=ASKALONO_NAME, pinned_version=version, platform=platform)


def locate_artifact(identity: ToolIdentity) -> ArtifactLocation:
    """Return the download URL and local file name for ``identity``.

    Windows builds come from a fixed CI artifact that ignores the pinned
    version; every other platform uses the versioned release download.
    """

    executable = identity.executable_name
    if identity.platform.is_windows:
        url = WINDOWS_BUILD_URL_TEMPLATE.format(executable=executable)
    else:
        url = RELEASE_URL_TEMPLATE.format(version=identity.pinned_version, executable=executable)
    return ArtifactLocation(url=url, executable_name=executable)
