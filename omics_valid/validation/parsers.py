"""
Record parsers, one per supported omics format.

A parser turns one raw input line into a typed record, or raises
``RecordParseError`` with the reason the line could not be read. Parsers for
formats with a header row also decide whether the first line of a file is
that header; a consumed header is not a data line.
"""

import csv
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError

from ..config import InputConfig
from ..errors import RecordParseError
from ..models.records import (
    MetRecord,
    OmicsFormat,
    ProtRecord,
    Record,
    RnaRecord,
    TidyProtRecord,
)

# Manifest column -> RnaRecord field
RNA_COLUMNS: Dict[str, str] = {
    "Experiment": "experiment",
    "LibraryLayout": "library_layout",
    "Platform": "platform",
    "Run": "run",
    "R1": "r1",
    "R2": "r2",
}


def _describe_pydantic_error(error: PydanticValidationError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"])
        parts.append(f"{location}: {detail['msg']} (got {detail['input']!r})")
    return "; ".join(parts)


class RecordParser(ABC):
    """Base class for all record parsers."""

    omics_format: OmicsFormat

    def __init__(self, delimiter: str = ","):
        self.delimiter = delimiter

    def split(self, raw_line: str) -> List[str]:
        """Split one line into fields, honouring CSV quoting."""
        try:
            return next(csv.reader([raw_line], delimiter=self.delimiter), [])
        except csv.Error as e:
            raise RecordParseError(f"unreadable line: {e}") from e

    def consume_header(self, raw_line: str) -> bool:
        """
        Offer the first non-blank line of a file to the parser.

        Returns:
            True if the line is a header and must not be treated as data
        """
        return False

    @abstractmethod
    def parse(self, raw_line: str) -> Record:
        """
        Parse one data line.

        Raises:
            RecordParseError: If the line cannot be turned into a record
        """
        ...

    def _build(self, model_class, data: dict):
        try:
            return model_class.model_validate(data)
        except PydanticValidationError as e:
            raise RecordParseError(_describe_pydantic_error(e)) from e


class ProtParser(RecordParser):
    """Headerless ``UNIPROT_ID,VALUE_SAMPLE1,VALUE_SAMPLE2,...`` rows."""

    omics_format = OmicsFormat.PROT

    def parse(self, raw_line: str) -> ProtRecord:
        fields = self.split(raw_line)
        if not fields:
            raise RecordParseError("no fields found")
        return self._build(ProtRecord, {"identifier": fields[0], "values": tuple(fields[1:])})


class TidyParser(RecordParser):
    """Shared parsing of three-column ``id,sample,value`` tidy rows."""

    id_field: str = "identifier"
    # Accepted names of the first header column, lower case
    header_id_columns: Tuple[str, ...] = ("uniprot",)
    record_class = TidyProtRecord

    def consume_header(self, raw_line: str) -> bool:
        """A header names the id, ``sample`` and ``value`` columns, in any case."""
        columns = [column.strip().lower() for column in self.split(raw_line)]
        if len(columns) != 3:
            return False
        id_column, sample_column, value_column = columns
        return id_column in self.header_id_columns and sample_column == "sample" and value_column == "value"

    def parse(self, raw_line: str) -> Record:
        fields = self.split(raw_line)
        if len(fields) != 3:
            raise RecordParseError(f"expected 3 fields, found {len(fields)}")
        identifier, sample, value = fields
        return self._build(self.record_class, {self.id_field: identifier, "sample": sample, "value": value})


class TidyProtParser(TidyParser):
    """Tidy proteomics: ``uniprot,sample,value``."""

    omics_format = OmicsFormat.TIDY_PROT


class MetParser(TidyParser):
    """Tidy metabolomics: ``met_id,sample,value``."""

    omics_format = OmicsFormat.MET
    id_field = "met_id"
    header_id_columns = ("met_id", "bigg_id")
    record_class = MetRecord


class RnaParser(RecordParser):
    """
    Header-driven RNA-seq manifest rows.

    Columns may come in any order; unknown columns are kept verbatim in
    ``extra_fields``.
    """

    omics_format = OmicsFormat.RNA

    def __init__(self, delimiter: str = "\t"):
        super().__init__(delimiter)
        self.columns: Optional[List[str]] = None
        self.missing_columns: List[str] = []

    def consume_header(self, raw_line: str) -> bool:
        self.set_header(self.split(raw_line))
        return True

    def set_header(self, columns: Sequence[str]) -> None:
        """Record the column names of the manifest."""
        self.columns = [column.strip().lstrip("\ufeff") for column in columns]
        self.missing_columns = [name for name in RNA_COLUMNS if name not in self.columns]

    def parse(self, raw_line: str) -> RnaRecord:
        if self.columns is None:
            raise RecordParseError("no header row before the first record")
        if self.missing_columns:
            raise RecordParseError(f"missing column(s) {', '.join(self.missing_columns)} in header")

        fields = self.split(raw_line)
        if len(fields) != len(self.columns):
            raise RecordParseError(f"expected {len(self.columns)} fields, found {len(fields)}")

        data: Dict[str, object] = {}
        extra_fields: Dict[str, str] = {}
        for column, value in zip(self.columns, fields):
            if column in RNA_COLUMNS:
                data[RNA_COLUMNS[column]] = value
            else:
                extra_fields[column] = value
        data["extra_fields"] = extra_fields

        return self._build(RnaRecord, data)


def create_parser(omics_format: OmicsFormat, config: Optional[InputConfig] = None) -> RecordParser:
    """
    Create the parser for a format.

    Args:
        omics_format: Format selector
        config: Input configuration providing the delimiters

    Returns:
        A fresh parser; parsers keep header state, so use one per file
    """
    config = config or InputConfig()
    if omics_format == OmicsFormat.PROT:
        return ProtParser(config.delimiter)
    elif omics_format == OmicsFormat.TIDY_PROT:
        return TidyProtParser(config.delimiter)
    elif omics_format == OmicsFormat.MET:
        return MetParser(config.delimiter)
    elif omics_format == OmicsFormat.RNA:
        return RnaParser(config.rna_delimiter)
    raise ValueError(f"Unsupported omics format: {omics_format}")
