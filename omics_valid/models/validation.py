"""
Validation findings and per-line reports.

A ``ValidationError`` is one rule violation found on one line. All violations
of a line are gathered, in the order the rules are declared, into a single
``LineReport``. A ``ValidationRun`` holds the ordered reports of one
invocation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .records import OmicsFormat


LAYOUT_MISMATCH_MESSAGE = (
    "Inconsistent experiment: R1 and R2 did not match the LibraryLayout! "
    "(assuming local data since field 'Run' is empty)"
)


class ErrorKind(Enum):
    """Types of per-line validation errors."""
    INVALID_IDENTIFIER = "invalid_identifier"
    EMPTY_SAMPLE_NAME = "empty_sample_name"
    IDENTIFIER_NOT_IN_MODEL = "identifier_not_in_model"
    FASTQ_PATH_MISSING = "fastq_path_missing"
    FASTQ_MALFORMED = "fastq_malformed"
    LIBRARY_LAYOUT_MISMATCH = "library_layout_mismatch"
    MALFORMED_RECORD = "malformed_record"
    EMPTY_EXPERIMENT = "empty_experiment"


@dataclass(frozen=True)
class ValidationError:
    """
    A single rule violation with the detail needed to render it.

    ``detail`` is the offending identifier or path, or the reason of a
    malformed record. ``reason`` is only used by FASTQ failures, to tell the
    path apart from what went wrong while reading it.
    """
    kind: ErrorKind
    detail: str = ""
    reason: Optional[str] = None

    @property
    def message(self) -> str:
        """Human-readable message for this error."""
        if self.kind == ErrorKind.INVALID_IDENTIFIER:
            return f"{self.detail} invalid Uniprot ID"
        if self.kind == ErrorKind.EMPTY_SAMPLE_NAME:
            return "empty sample name"
        if self.kind == ErrorKind.IDENTIFIER_NOT_IN_MODEL:
            return f"{self.detail} not in model!"
        if self.kind == ErrorKind.FASTQ_PATH_MISSING:
            return f"{self.detail}: Declared FASTQ path does not exist!"
        if self.kind == ErrorKind.FASTQ_MALFORMED:
            return f"{self.detail}: failure reading FASTQ! {self.reason or ''}".rstrip()
        if self.kind == ErrorKind.LIBRARY_LAYOUT_MISMATCH:
            return LAYOUT_MISMATCH_MESSAGE
        if self.kind == ErrorKind.EMPTY_EXPERIMENT:
            return "empty experiment name"
        if self.kind == ErrorKind.MALFORMED_RECORD:
            return f"malformed record: {self.detail}"
        raise ValueError(f"No message defined for error kind {self.kind!r}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        d: Dict[str, Any] = {
            "kind": self.kind.value,
            "detail": self.detail,
            "message": self.message,
        }
        if self.reason is not None:
            d["reason"] = self.reason
        return d


@dataclass(frozen=True)
class LineReport:
    """All violations found on one data line, in rule declaration order."""
    line_number: int
    errors: Tuple[ValidationError, ...]

    def __post_init__(self):
        if not self.errors:
            raise ValueError(f"LineReport for line {self.line_number} must carry at least one error")
        if self.line_number < 1:
            raise ValueError(f"Line numbers are 1-based, got {self.line_number}")

    @property
    def messages(self) -> List[str]:
        """Messages of every error on the line."""
        return [error.message for error in self.errors]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "line": self.line_number,
            "errors": [error.to_dict() for error in self.errors],
        }


@dataclass
class ValidationRun:
    """Outcome of validating one file."""
    format: OmicsFormat
    model: Optional[Any] = None
    reports: List[LineReport] = field(default_factory=list)
    lines_processed: int = 0

    @property
    def passed(self) -> bool:
        """True when no line produced a report."""
        return not self.reports

    @property
    def error_count(self) -> int:
        """Total number of violations across all lines."""
        return sum(len(report.errors) for report in self.reports)

    def add_report(self, report: LineReport) -> None:
        """Append a report, keeping line numbers strictly increasing."""
        if self.reports and report.line_number <= self.reports[-1].line_number:
            raise ValueError(
                f"Report for line {report.line_number} is out of order "
                f"(last reported line was {self.reports[-1].line_number})"
            )
        self.reports.append(report)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict for --json output."""
        return {
            "format": self.format.value,
            "passed": self.passed,
            "lines_processed": self.lines_processed,
            "error_count": self.error_count,
            "reports": [report.to_dict() for report in self.reports],
        }
