"""Parse askalono's ``crawl`` report into a :class:`Result`.

The report repeats three-line records::

    /src/a.go
    License: MIT (original text)
    Score: 1.000

Each record becomes one mapping in the raw result with ``Path``, ``License``
and ``Score`` keys, in report order. A trailing incomplete record is ignored.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, List, Sequence, Tuple

import yaml

from .errors import MalformedResultsError
from .result import LicenseFinding, Result
from .utils.fileio import read_text_lines, read_yaml_text

logger = logging.getLogger(__name__)

RECORD_SIZE = 3
LICENSE_MARKER = "License: "
SCORE_MARKER = "Score: "
ORIGINAL_TEXT_SUFFIX = " (original text)"


def _before_last(text: str, delimiter: str) -> str:
    head, sep, _ = text.rpartition(delimiter)
    return head if sep else text


def _after(text: str, delimiter: str) -> str:
    _, sep, tail = text.partition(delimiter)
    return tail if sep else text


def iter_records(lines: Sequence[str]) -> Iterator[Tuple[str, str, str]]:
    """Yield complete ``(path, license, score)`` line groups."""

    complete = len(lines) - len(lines) % RECORD_SIZE
    for start in range(0, complete, RECORD_SIZE):
        path, license_line, score_line = lines[start:start + RECORD_SIZE]
        yield path, license_line, score_line


def parse_results(results_file: Path) -> Result:
    """Read ``results_file`` and return the parsed :class:`Result`.

    A missing or empty file is a scan without findings, not an error.
    """

    lines = read_text_lines(results_file)
    if not lines:
        return Result.empty()

    if len(lines) % RECORD_SIZE:
        logger.debug(
            "Ignoring %d trailing line(s) of incomplete record in %s",
            len(lines) % RECORD_SIZE,
            results_file,
        )

    result = Result.empty()
    raw_result: List[dict] = []
    for index, (path, license_line, score_line) in enumerate(iter_records(lines)):
        license_line = _before_last(license_line, ORIGINAL_TEXT_SUFFIX)
        label = _after(license_line, LICENSE_MARKER)
        result.licenses.add(label)

        block = "\n".join([f"Path: {path}", license_line, score_line])
        try:
            node = read_yaml_text(block)
        except yaml.YAMLError as exc:
            raise MalformedResultsError(
                f"Record {index} of {results_file} is not valid: {exc}", results_file, index
            ) from exc
        if not isinstance(node, dict):
            raise MalformedResultsError(
                f"Record {index} of {results_file} is not a mapping: {block!r}", results_file, index
            )

        raw_result.append(node)
        result.findings.append(
            LicenseFinding(file_path=path, license_label=label, score=_after(score_line, SCORE_MARKER).strip())
        )

    result.file_count = len(raw_result)
    result.raw_result = raw_result
    return result
