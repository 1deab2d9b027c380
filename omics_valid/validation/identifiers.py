"""
UniProt accession syntax checks.

Accessions follow the grammar published by UniProt: either the ``[OPQ]``
6-character form or the classic form of 6 or 10 characters. Matching is
case-sensitive and always against the whole string.
"""

import re


UNIPROT_ACCESSION_PATTERN = re.compile(
    r"[OPQ][0-9][A-Z0-9]{3}[0-9]"
    r"|[A-NR-Z][0-9](?:[A-Z][A-Z0-9]{2}[0-9]){1,2}"
)

# Isoform/version suffix as in Q00496.2
VERSION_SUFFIX_PATTERN = re.compile(r"\.[0-9]+")


def is_valid_accession(accession: str, allow_version: bool = False) -> bool:
    """
    Check whether a string is a syntactically valid UniProt accession.

    Args:
        accession: Candidate identifier, used as is (no trimming, no case folding)
        allow_version: Also accept a trailing ``.N`` version suffix

    Returns:
        True if the identifier matches the accession grammar
    """
    if allow_version:
        base, dot, version = accession.partition(".")
        if dot and not VERSION_SUFFIX_PATTERN.fullmatch(dot + version):
            return False
        accession = base
    return UNIPROT_ACCESSION_PATTERN.fullmatch(accession) is not None


class IdentifierValidator:
    """Validator for protein identifiers of the proteomics formats."""

    def __init__(self, allow_version: bool = False):
        """
        Initialize validator.

        Args:
            allow_version: Whether accessions may carry a ``.N`` version suffix
        """
        self.allow_version = allow_version

    def is_valid_accession(self, accession: str) -> bool:
        """Check one accession, see :func:`is_valid_accession`."""
        return is_valid_accession(accession, allow_version=self.allow_version)
