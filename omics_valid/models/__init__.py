"""
Data models for the Omics Valid system.

This package provides Pydantic models for the typed records parsed out of each
supported omics format, and the dataclasses that carry validation findings and
per-line reports.
"""

from .records import (
    OmicsFormat,
    LibraryLayout,
    ProtRecord,
    TidyProtRecord,
    MetRecord,
    RnaRecord,
    Record,
)
from .validation import (
    ErrorKind,
    ValidationError,
    LineReport,
    ValidationRun,
)

__all__ = [
    # Records
    "OmicsFormat",
    "LibraryLayout",
    "ProtRecord",
    "TidyProtRecord",
    "MetRecord",
    "RnaRecord",
    "Record",

    # Validation
    "ErrorKind",
    "ValidationError",
    "LineReport",
    "ValidationRun",
]
