"""Core result data structures for the scanner."""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Set, Union


@dataclass(frozen=True)
class LicenseFinding:
    """One detected license, taken from a three-line results record."""

    file_path: str
    license_label: str
    score: str


@dataclass
class Result:
    """Parsed content of a results file."""

    file_count: int = 0
    licenses: Set[str] = field(default_factory=set)
    errors: Set[str] = field(default_factory=set)
    raw_result: List[Dict[str, Any]] = field(default_factory=list)
    findings: List[LicenseFinding] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "Result":
        return cls()


@dataclass(frozen=True)
class Provenance:
    """Caller supplied description of where the scanned tree came from."""

    source_url: str = ""
    revision: str = ""

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class ScannerDetails:
    """Name, version and configuration of the scanner that produced a result."""

    name: str
    version: str
    configuration: str = ""

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass
class ScanSummary:
    """Timing and license overview of one scan."""

    start_time: datetime
    end_time: datetime
    file_count: int
    licenses: Set[str] = field(default_factory=set)
    errors: Set[str] = field(default_factory=set)

    @property
    def duration(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> Dict[str, object]:
        return {
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "file_count": self.file_count,
            "licenses": sorted(self.licenses),
            "errors": sorted(self.errors),
        }


@dataclass
class ScanResult:
    """Bundle provenance, scanner identity, summary and raw scanner output."""

    provenance: Provenance
    scanner: ScannerDetails
    summary: ScanSummary
    raw_result: List[Dict[str, Any]] = field(default_factory=list)
    findings: List[LicenseFinding] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "provenance": self.provenance.to_dict(),
            "scanner": self.scanner.to_dict(),
            "summary": self.summary.to_dict(),
            "raw_result": self.raw_result,
        }


def format_summary_table(result: Union[Result, ScanResult]) -> str:
    """Create a human-readable summary table for console output."""

    summary: Optional[ScanSummary] = None
    if isinstance(result, ScanResult):
        summary = result.summary
        file_count, licenses, errors = summary.file_count, summary.licenses, summary.errors
    else:
        file_count, licenses, errors = result.file_count, result.licenses, result.errors

    lines: List[str] = []
    lines.append("Scan Summary")
    lines.append("=" * 40)
    if summary is not None:
        lines.append(f"Started   : {summary.start_time.isoformat()}")
        lines.append(f"Duration  : {summary.duration:.2f}s")
    lines.append(f"Files     : {file_count}")
    lines.append(f"Licenses  : {len(licenses)}")
    lines.append(f"Errors    : {len(errors)}")

    if licenses:
        counts: Dict[str, int] = {}
        for finding in result.findings:
            counts[finding.license_label] = counts.get(finding.license_label, 0) + 1
        header = f"{'License':<30} | {'Files':>5}"
        lines.append("")
        lines.append(header)
        lines.append("-" * len(header))
        for label in sorted(licenses):
            lines.append(f"{label:<30} | {counts.get(label, 0):>5}")
    for error in sorted(errors):
        lines.append(f"  Error: {error}")
    return "\n".join(lines)
