import pytest

from askalono_scanner.errors import ScanError
from askalono_scanner.result import Provenance, ScannerDetails
from askalono_scanner.scanner import AskalonoScanner

from conftest import posix_only, write_script


@posix_only
def test_get_version_strips_tool_prefix(identity, fake_askalono):
    directory = fake_askalono()

    assert AskalonoScanner(identity).get_version(directory) == "0.2.0-beta.1"


@posix_only
def test_prepare_reuses_matching_executable(identity, fake_askalono, mock_client):
    requests = []
    directory = fake_askalono()
    scanner = AskalonoScanner(identity, client=mock_client(requests=requests))

    artifact = scanner.prepare(directory)

    assert artifact.directory == directory
    assert not artifact.owned
    assert requests == []
    scanner.release()
    assert (directory / identity.executable_name).is_file()


@posix_only
def test_prepare_bootstraps_on_version_mismatch(identity, fake_askalono, mock_client, caplog):
    requests = []
    directory = fake_askalono(version="0.1.0")
    scanner = AskalonoScanner(identity, client=mock_client(body=b"new", requests=requests))

    artifact = scanner.prepare(directory)

    assert len(requests) == 1
    assert artifact.owned
    assert artifact.directory != directory
    assert artifact.file_path.read_bytes() == b"new"
    assert "has version 0.1.0" in caplog.text
    scanner.release()
    assert not artifact.directory.exists()


def test_prepare_bootstraps_without_existing_directory(identity, mock_client, tmp_path):
    scanner = AskalonoScanner(identity, client=mock_client())

    artifact = scanner.prepare(tmp_path / "empty")

    assert artifact.owned
    scanner.release()


def test_scan_requires_prepare(identity, tmp_path):
    with pytest.raises(RuntimeError):
        AskalonoScanner(identity).scan_path(tmp_path, tmp_path / "askalono.txt")


@posix_only
def test_scan_path_copies_stdout_and_parses(identity, fake_askalono, tmp_path):
    source = tmp_path / "src"
    source.mkdir()
    results_file = tmp_path / "out" / "askalono.txt"
    scanner = AskalonoScanner(identity)
    scanner.prepare(fake_askalono())
    provenance = Provenance(source_url="https://example.invalid/repo.git", revision="abc123")

    scan_result = scanner.scan_path(source, results_file, provenance, scanner.details())

    assert results_file.read_text(encoding="utf-8") == (
        f"{source}/a.go\nLicense: MIT (original text)\nScore: 1.000\n"
        f"{source}/b.go\nLicense: Apache-2.0\nScore: 0.950\n"
    )
    summary = scan_result.summary
    assert summary.file_count == 2
    assert summary.licenses == {"MIT", "Apache-2.0"}
    assert summary.errors == set()
    assert summary.start_time <= summary.end_time
    assert scan_result.provenance == provenance
    assert scan_result.scanner == ScannerDetails(name="askalono", version="0.2.0-beta.1", configuration="")
    assert [entry["Path"] for entry in scan_result.raw_result] == [f"{source}/a.go", f"{source}/b.go"]

    report = scan_result.to_dict()
    assert report["summary"]["licenses"] == ["Apache-2.0", "MIT"]
    assert report["provenance"]["revision"] == "abc123"


@posix_only
def test_scan_path_logs_stderr_at_debug(identity, fake_askalono, tmp_path, caplog):
    scanner = AskalonoScanner(identity)
    scanner.prepare(fake_askalono())

    with caplog.at_level("DEBUG", logger="askalono_scanner.scanner"):
        scanner.scan_path(tmp_path, tmp_path / "askalono.txt")

    assert f"crawling {tmp_path}" in caplog.text


@posix_only
def test_scan_path_failure_raises_scan_error(identity, fake_askalono, tmp_path):
    results_file = tmp_path / "askalono.txt"
    scanner = AskalonoScanner(identity)
    scanner.prepare(fake_askalono(failing=True))

    with pytest.raises(ScanError) as excinfo:
        scanner.scan_path(tmp_path / "src", results_file)

    error = excinfo.value
    assert "failed with exit code 3" in str(error)
    assert "cannot read" in str(error)
    assert error.exit_code == 3
    assert error.path == (tmp_path / "src").absolute()
    assert not error.fatal_to_process
    assert not results_file.exists()


def test_results_file_name_and_details(identity):
    scanner = AskalonoScanner(identity)

    assert scanner.results_file_name == "askalono.txt"
    assert scanner.details().version == identity.pinned_version
    assert scanner.get_configuration() == ""


def test_prepare_twice_releases_previous_download(identity, mock_client):
    scanner = AskalonoScanner(identity, client=mock_client())

    first = scanner.prepare()
    second = scanner.prepare()

    assert not first.directory.exists()
    assert second.directory.is_dir()
    scanner.release()
    assert not second.directory.exists()


@posix_only
def test_scan_path_tolerates_undecodable_output(identity, tmp_path):
    directory = tmp_path / "latin1-bin"
    write_script(
        directory / identity.executable_name,
        "#!/bin/sh\n"
        "if [ \"$1\" = \"--version\" ]; then echo \"askalono 0.2.0-beta.1\"; exit 0; fi\n"
        "printf '/src/caf\\351.go\\nLicense: MIT\\nScore: 1.0\\n'\n",
    )
    scanner = AskalonoScanner(identity)
    scanner.prepare(directory)
    results_file = tmp_path / "askalono.txt"

    scan_result = scanner.scan_path(tmp_path, results_file)

    assert results_file.read_bytes() == b"/src/caf\xe9.go\nLicense: MIT\nScore: 1.0\n"
    assert scan_result.summary.file_count == 1
    assert scan_result.summary.licenses == {"MIT"}
    assert scan_result.findings[0].file_path == "/src/caf\ufffd.go"
