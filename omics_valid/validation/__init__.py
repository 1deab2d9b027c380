"""
Validation engine for omics files.

This package contains the record parsers, the per-format rule sets and their
collaborators (UniProt accession checks, metabolite model lookups, FASTQ
integrity checks), the orchestrating validator and the report renderer.
"""

from .identifiers import IdentifierValidator, is_valid_accession
from .metabolites import (
    IdentifierSetModel,
    MetaboliteResolver,
    Model,
    load_identifier_list,
    load_model,
    load_sbml_model,
)
from .fastq import FastqChecker
from .parsers import RecordParser, create_parser
from .rules import RuleSet, create_rule_set
from .validator import Validator, validate
from .report import Reporter, render_reports

__all__ = [
    "IdentifierValidator",
    "is_valid_accession",
    "IdentifierSetModel",
    "MetaboliteResolver",
    "Model",
    "load_identifier_list",
    "load_model",
    "load_sbml_model",
    "FastqChecker",
    "RecordParser",
    "create_parser",
    "RuleSet",
    "create_rule_set",
    "Validator",
    "validate",
    "Reporter",
    "render_reports",
]
