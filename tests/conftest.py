"""Shared fixtures: fake askalono executables and mocked downloads."""

from __future__ import annotations

import os
import stat
import sys
from pathlib import Path
from typing import Callable

import httpx
import pytest

from askalono_scanner.platforms import PlatformTag
from askalono_scanner.tool import ToolIdentity, askalono_identity

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="fake executables are POSIX shell scripts")

FAKE_ASKALONO = """#!/bin/sh
if [ "$1" = "--version" ]; then
    echo "askalono {version}"
    exit 0
fi
if [ "$1" = "crawl" ]; then
    printf '%s\\n' "$2/a.go" "License: MIT (original text)" "Score: 1.000"
    printf '%s\\n' "$2/b.go" "License: Apache-2.0" "Score: 0.950"
    echo "crawling $2" >&2
    exit 0
fi
echo "unknown command $1" >&2
exit 2
"""

FAILING_ASKALONO = """#!/bin/sh
if [ "$1" = "--version" ]; then
    echo "askalono {version}"
    exit 0
fi
echo "error: cannot read $2" >&2
exit 3
"""


def write_script(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")
    os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR)
    return path


@pytest.fixture
def identity() -> ToolIdentity:
    return askalono_identity(PlatformTag.LINUX)


@pytest.fixture
def fake_askalono(tmp_path, identity) -> Callable[..., Path]:
    """Write a fake executable into a fresh directory and return the directory."""

    def factory(version: str = identity.pinned_version, failing: bool = False) -> Path:
        directory = tmp_path / ("failing-bin" if failing else f"bin-{version}")
        template = FAILING_ASKALONO if failing else FAKE_ASKALONO
        write_script(directory / identity.executable_name, template.format(version=version))
        return directory

    return factory


@pytest.fixture
def mock_client() -> Callable[..., httpx.Client]:
    """Build an httpx client answering every request with ``status`` and ``body``."""

    def factory(status: int = 200, body: bytes = b"\x7fELF binary", requests: list | None = None) -> httpx.Client:
        def handler(request: httpx.Request) -> httpx.Response:
            if requests is not None:
                requests.append(request)
            return httpx.Response(status, content=body)

        return httpx.Client(transport=httpx.MockTransport(handler))

    return factory
