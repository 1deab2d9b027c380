"""
Pydantic models for omics records.

Each supported format parses one input line into one of these models. Records
are frozen: once a line is parsed the record carries data only, never
validation state. Semantic checks (accessions, model membership, FASTQ files)
live in ``omics_valid.validation.rules``, so the models only enforce what is
needed to build them at all: field types and the library layout vocabulary.
"""

from enum import Enum
from typing import Dict, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


class OmicsFormat(str, Enum):
    """Supported omics file formats."""
    PROT = "prot"
    TIDY_PROT = "tidy_prot"
    MET = "met"
    RNA = "rna"

    @property
    def has_header(self) -> bool:
        """Whether files of this format may start with a header row."""
        return self is not OmicsFormat.PROT


class LibraryLayout(str, Enum):
    """Sequencing read configuration of an RNA-seq experiment."""
    SINGLE = "SINGLE"
    PAIRED = "PAIRED"


class ProtRecord(BaseModel):
    """
    Protein record without header in the form ``UNIPROT_ID,VALUE_SAMPLE1,...``.

    Sample values are kept as raw tokens; only the identifier is validated.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., description="UniProt accession of the protein")
    values: Tuple[str, ...] = Field(default=(), description="Raw per-sample values")


class TidyProtRecord(BaseModel):
    """Protein record in tidy form: ``uniprot,sample,value``."""

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., description="UniProt accession of the protein")
    sample: str = Field(..., description="Sample name")
    value: float = Field(..., description="Measured value")


class MetRecord(BaseModel):
    """Metabolite record in tidy form: ``met_id,sample,value``."""

    model_config = ConfigDict(frozen=True)

    met_id: str = Field(..., description="Metabolite identifier, matched against the model")
    sample: str = Field(..., description="Sample name")
    value: float = Field(..., description="Measured value")


class RnaRecord(BaseModel):
    """
    One experiment of an RNA-seq manifest (SRA-derived or local files).

    ``Run`` holds SRR numbers for public data and is empty for local data, in
    which case ``R1``/``R2`` point at the FASTQ files (local paths or
    ``s3://`` URIs). Columns outside the six recognised ones are preserved in
    ``extra_fields``.
    """

    model_config = ConfigDict(frozen=True)

    experiment: str
    library_layout: LibraryLayout
    platform: str
    run: Optional[str] = None
    r1: Optional[str] = None
    r2: Optional[str] = None
    extra_fields: Dict[str, str] = Field(default_factory=dict)

    @field_validator('library_layout', mode='before')
    @classmethod
    def normalize_library_layout(cls, v):
        """Accept SINGLE/PAIRED in any letter case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator('run', 'r1', 'r2', mode='before')
    @classmethod
    def empty_as_none(cls, v):
        """Empty cells mean the field is absent."""
        if isinstance(v, str):
            return v.strip() or None
        return v

    @property
    def is_local(self) -> bool:
        """Local data has no SRA run accession."""
        return self.run is None


Record = Union[ProtRecord, TidyProtRecord, MetRecord, RnaRecord]
