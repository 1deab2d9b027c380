"""
Omics Valid - A validator for tabular omics data files.

This package checks proteomics, tidy proteomics, metabolomics and RNA-seq
manifest files line by line and reports every rule violation found:
UniProt accessions, metabolite identifiers against a metabolic model,
FASTQ file integrity and library layout consistency.
"""

__version__ = "0.1.0"
__author__ = "Omics Valid Team"
