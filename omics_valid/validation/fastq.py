"""
FASTQ file integrity checks for RNA-seq manifests.

A declared FASTQ path must exist and its content must be a sequence of
four-line records: ``@`` header, sequence, ``+`` separator, and a quality
line as long as the sequence. Files are streamed, never loaded whole, and
the scan stops at the first structural defect.
"""

import gzip
import itertools
import logging
from pathlib import Path
from typing import Iterator, Optional, TextIO, Union

from ..models.validation import ErrorKind, ValidationError

logger = logging.getLogger(__name__)

REMOTE_PREFIXES = ("s3://",)


def is_remote_path(path: str) -> bool:
    """Remote URIs cannot be checked locally and are skipped."""
    return path.lower().startswith(REMOTE_PREFIXES)


class FastqChecker:
    """Validates FASTQ file presence and format."""

    def __init__(self, base_dir: Optional[Union[str, Path]] = None,
                 max_records: Optional[int] = None, encoding: str = "utf-8"):
        """
        Initialize checker.

        Args:
            base_dir: Directory relative paths are resolved against (default: cwd)
            max_records: Stop after this many well-formed records (default: scan all)
            encoding: Text encoding of the FASTQ files
        """
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.max_records = max_records
        self.encoding = encoding

    def resolve(self, declared_path: str) -> Path:
        """Resolve a declared path against the base directory. ``~`` is not expanded."""
        path = Path(declared_path)
        if self.base_dir is not None and not path.is_absolute():
            path = self.base_dir / path
        return path

    def check(self, declared_path: str) -> Optional[ValidationError]:
        """
        Check one FASTQ file.

        Args:
            declared_path: Path as written in the manifest

        Returns:
            None if the file is well formed, otherwise a ``FASTQ_PATH_MISSING``
            or ``FASTQ_MALFORMED`` error
        """
        path = self.resolve(declared_path)

        try:
            exists = path.is_file()
        except (OSError, ValueError):
            # Names the OS cannot stat, e.g. ones with NUL bytes
            exists = False
        if not exists:
            return ValidationError(kind=ErrorKind.FASTQ_PATH_MISSING, detail=declared_path)

        try:
            with self._open(path) as handle:
                reason = self._scan(handle)
        except (OSError, EOFError, UnicodeDecodeError) as e:
            reason = str(e)

        if reason is None:
            logger.debug(f"FASTQ file {path} is well formed")
            return None

        logger.debug(f"FASTQ file {path} is malformed: {reason}")
        return ValidationError(kind=ErrorKind.FASTQ_MALFORMED, detail=declared_path, reason=reason)

    def _open(self, path: Path) -> TextIO:
        if path.name.endswith('.gz'):
            return gzip.open(path, 'rt', encoding=self.encoding)
        return open(path, 'r', encoding=self.encoding)

    def _scan(self, handle: TextIO) -> Optional[str]:
        """Return the first structural defect of the stream, or None."""
        lines: Iterator[str] = (line.rstrip("\r\n") for line in handle)
        record_number = 0

        for header in lines:
            if not header.strip():
                if any(line.strip() for line in lines):
                    return f"record {record_number + 1}: blank line where a header was expected"
                return None

            record_number += 1
            if self.max_records is not None and record_number > self.max_records:
                return None

            if not header.startswith('@'):
                return f"record {record_number}: header does not start with '@'"

            rest = list(itertools.islice(lines, 3))
            if len(rest) < 3:
                return f"record {record_number}: truncated record, expected 4 lines but found {len(rest) + 1}"

            sequence, separator, quality = rest
            if not separator.startswith('+'):
                return f"record {record_number}: separator line does not start with '+'"
            if len(quality) != len(sequence):
                return (
                    f"record {record_number}: quality length {len(quality)} "
                    f"does not match sequence length {len(sequence)}"
                )

        return None
