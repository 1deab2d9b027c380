"""
Rule sets, one per supported omics format.

A rule set looks at one parsed record and returns every violation it finds,
in a fixed order: identifier checks, then sample name checks, then model and
file checks. Rules never stop at the first violation of a record.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..config import SystemConfig
from ..models.records import LibraryLayout, MetRecord, OmicsFormat, ProtRecord, Record, RnaRecord, TidyProtRecord
from ..models.validation import ErrorKind, ValidationError
from .fastq import FastqChecker, is_remote_path
from .identifiers import IdentifierValidator
from .metabolites import MetaboliteResolver, Model


def check_sample_name(sample: str) -> Optional[ValidationError]:
    """Sample names must contain something other than whitespace."""
    if not sample.strip():
        return ValidationError(kind=ErrorKind.EMPTY_SAMPLE_NAME)
    return None


def layout_matches_files(layout: LibraryLayout, r1: Optional[str], r2: Optional[str]) -> bool:
    """SINGLE needs R1 only, PAIRED needs both R1 and R2."""
    if layout == LibraryLayout.SINGLE:
        return r1 is not None and r2 is None
    return r1 is not None and r2 is not None


class RuleSet(ABC):
    """Base class for all per-format rule sets."""

    omics_format: OmicsFormat

    @abstractmethod
    def check(self, record: Record) -> List[ValidationError]:
        """
        Run every rule of the format against one record.

        Returns:
            Violations in declaration order; empty if the record is valid
        """
        ...


class ProtRuleSet(RuleSet):
    """Only the UniProt accession of each row is checked."""

    omics_format = OmicsFormat.PROT

    def __init__(self, identifier_validator: Optional[IdentifierValidator] = None):
        self.identifier_validator = identifier_validator or IdentifierValidator()

    def check(self, record: ProtRecord) -> List[ValidationError]:
        errors = []
        if not self.identifier_validator.is_valid_accession(record.identifier):
            errors.append(ValidationError(kind=ErrorKind.INVALID_IDENTIFIER, detail=record.identifier))
        return errors


class TidyProtRuleSet(RuleSet):
    """Accession and sample name, checked independently."""

    omics_format = OmicsFormat.TIDY_PROT

    def __init__(self, identifier_validator: Optional[IdentifierValidator] = None):
        self.identifier_validator = identifier_validator or IdentifierValidator()

    def check(self, record: TidyProtRecord) -> List[ValidationError]:
        errors = []
        if not self.identifier_validator.is_valid_accession(record.identifier):
            errors.append(ValidationError(kind=ErrorKind.INVALID_IDENTIFIER, detail=record.identifier))
        sample_error = check_sample_name(record.sample)
        if sample_error:
            errors.append(sample_error)
        return errors


class MetRuleSet(RuleSet):
    """Model membership of the metabolite, and the sample name."""

    omics_format = OmicsFormat.MET

    def __init__(self, resolver: MetaboliteResolver):
        self.resolver = resolver

    def check(self, record: MetRecord) -> List[ValidationError]:
        errors = []
        model_error = self.resolver.resolve(record.met_id)
        if model_error:
            errors.append(model_error)
        sample_error = check_sample_name(record.sample)
        if sample_error:
            errors.append(sample_error)
        return errors


class RnaRuleSet(RuleSet):
    """
    Experiment name, FASTQ files and library layout of manifest rows.

    FASTQ files are checked for R1 then R2 when they are local paths;
    ``s3://`` URIs are skipped. The layout check only applies to local data,
    recognised by an empty ``Run``.
    """

    omics_format = OmicsFormat.RNA

    def __init__(self, fastq_checker: Optional[FastqChecker] = None):
        """
        Args:
            fastq_checker: Checker for declared FASTQ paths; None disables FASTQ checks
        """
        self.fastq_checker = fastq_checker

    def check(self, record: RnaRecord) -> List[ValidationError]:
        errors = []

        if not record.experiment.strip():
            errors.append(ValidationError(kind=ErrorKind.EMPTY_EXPERIMENT))

        if self.fastq_checker is not None:
            for declared_path in (record.r1, record.r2):
                if declared_path is None or is_remote_path(declared_path):
                    continue
                fastq_error = self.fastq_checker.check(declared_path)
                if fastq_error:
                    errors.append(fastq_error)

        if record.is_local and not layout_matches_files(record.library_layout, record.r1, record.r2):
            errors.append(ValidationError(kind=ErrorKind.LIBRARY_LAYOUT_MISMATCH))

        return errors


def create_rule_set(omics_format: OmicsFormat, model: Optional[Model] = None,
                    config: Optional[SystemConfig] = None) -> RuleSet:
    """
    Create the rule set for a format.

    Args:
        omics_format: Format selector
        model: Metabolite model, required for ``met``
        config: System configuration (identifier and FASTQ settings)

    Raises:
        ConfigurationError: If ``met`` is requested without a model
    """
    config = config or SystemConfig()
    if omics_format == OmicsFormat.PROT:
        return ProtRuleSet(IdentifierValidator(config.rules.allow_accession_version))
    elif omics_format == OmicsFormat.TIDY_PROT:
        return TidyProtRuleSet(IdentifierValidator(config.rules.allow_accession_version))
    elif omics_format == OmicsFormat.MET:
        return MetRuleSet(MetaboliteResolver(model))
    elif omics_format == OmicsFormat.RNA:
        fastq_checker = None
        if config.fastq.enabled:
            fastq_checker = FastqChecker(
                base_dir=config.fastq.base_dir,
                max_records=config.fastq.max_records,
                encoding=config.input.encoding
            )
        return RnaRuleSet(fastq_checker)
    raise ValueError(f"Unsupported omics format: {omics_format}")
