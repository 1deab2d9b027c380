"""
Metabolite identifier resolution against a metabolic model.

The validation core only ever asks a model one question: does it know this
identifier? ``Model`` captures that capability; ``IdentifierSetModel`` is the
concrete implementation produced by the loaders in this module. Loaders own
any normalization of identifiers, the resolver itself matches exact strings.
"""

import logging
import time
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Protocol, Set, Union, runtime_checkable

from ..errors import ConfigurationError, ModelLoadError, create_error_context
from ..logging_config import log_model_loaded
from ..models.validation import ErrorKind, ValidationError

logger = logging.getLogger(__name__)

SBML_SUFFIXES = frozenset([".xml", ".sbml"])


@runtime_checkable
class Model(Protocol):
    """Membership test over the metabolite identifiers of a model."""

    def contains(self, identifier: str) -> bool:
        ...


class IdentifierSetModel:
    """Read-only set of known metabolite identifiers."""

    def __init__(self, identifiers: Iterable[str], source: Optional[str] = None):
        self._identifiers: FrozenSet[str] = frozenset(identifiers)
        self.source = source

    def contains(self, identifier: str) -> bool:
        return identifier in self._identifiers

    def __len__(self) -> int:
        return len(self._identifiers)

    def __repr__(self) -> str:
        return f"IdentifierSetModel(source={self.source!r}, identifiers={len(self)})"


class MetaboliteResolver:
    """Resolves metabolite identifiers of ``met`` records against a model."""

    def __init__(self, model: Optional[Model]):
        """
        Initialize resolver.

        Args:
            model: Loaded model; required

        Raises:
            ConfigurationError: If no model is supplied
        """
        if model is None:
            raise ConfigurationError(
                "A metabolic model is required to validate metabolite identifiers",
                context=create_error_context("resolve_metabolites", omics_format="met")
            )
        self.model = model

    def resolve(self, met_id: str) -> Optional[ValidationError]:
        """
        Look up one identifier.

        Returns:
            None if the model knows the identifier, otherwise an
            ``IDENTIFIER_NOT_IN_MODEL`` error carrying the identifier
        """
        if self.model.contains(met_id):
            return None
        return ValidationError(kind=ErrorKind.IDENTIFIER_NOT_IN_MODEL, detail=met_id)


def identifiers_from_resource(uri: str) -> List[str]:
    """
    Extract the identifiers a MIRIAM resource URI stands for.

    ``http://identifiers.org/bigg.metabolite/glc__D`` gives ``glc__D``; the
    compact form ``https://identifiers.org/metanetx.chemical:MNXM83`` gives
    both ``metanetx.chemical:MNXM83`` and ``MNXM83``.
    """
    last_segment = uri.rstrip("/").rsplit("/", 1)[-1]
    if not last_segment:
        return []
    identifiers = [last_segment]
    if ":" in last_segment:
        local_id = last_segment.rsplit(":", 1)[-1]
        if local_id:
            identifiers.append(local_id)
    return identifiers


def load_sbml_model(model_path: Union[str, Path]) -> IdentifierSetModel:
    """
    Load metabolite identifiers from the species annotations of an SBML model.

    Args:
        model_path: Path to the SBML file

    Returns:
        IdentifierSetModel with every annotated species identifier

    Raises:
        ModelLoadError: If the file is missing or is not readable SBML
    """
    import libsbml

    path = Path(model_path)
    context = create_error_context("load_model", file_path=str(path))
    if not path.is_file():
        raise ModelLoadError(f"Model file not found: {path}", context=context)

    document = libsbml.readSBMLFromFile(str(path))
    fatal_count = document.getErrorLog().getNumFailsWithSeverity(libsbml.LIBSBML_SEV_FATAL)
    model = document.getModel()
    if fatal_count or model is None:
        detail = document.getError(0).getMessage().strip() if document.getNumErrors() else "no model element"
        raise ModelLoadError(f"Could not parse SBML model {path}: {detail}", context=context)

    identifiers: Set[str] = set()
    for species_index in range(model.getNumSpecies()):
        species = model.getSpecies(species_index)
        for term_index in range(species.getNumCVTerms()):
            term = species.getCVTerm(term_index)
            for resource_index in range(term.getNumResources()):
                identifiers.update(identifiers_from_resource(term.getResourceURI(resource_index)))

    if not identifiers:
        logger.warning(f"SBML model {path} has no annotated species, every metabolite will be reported")

    return IdentifierSetModel(identifiers, source=str(path))


def load_identifier_list(model_path: Union[str, Path], encoding: str = "utf-8") -> IdentifierSetModel:
    """
    Load a plain-text model: one identifier per line, ``#`` starts a comment.

    Raises:
        ModelLoadError: If the file cannot be read
    """
    path = Path(model_path)
    try:
        with open(path, 'r', encoding=encoding) as f:
            identifiers = [
                line.split("#", 1)[0].strip()
                for line in f
            ]
    except (OSError, UnicodeDecodeError) as e:
        raise ModelLoadError(
            f"Could not read identifier list {path}: {e}",
            context=create_error_context("load_model", file_path=str(path)),
            original_exception=e
        ) from e

    return IdentifierSetModel((i for i in identifiers if i), source=str(path))


def load_model(model_path: Union[str, Path], encoding: str = "utf-8") -> IdentifierSetModel:
    """
    Load a metabolite model, choosing the loader from the file suffix.

    ``.xml`` and ``.sbml`` files are read as SBML, anything else as a plain
    identifier list.
    """
    path = Path(model_path)
    start = time.perf_counter()
    if path.suffix.lower() in SBML_SUFFIXES:
        model = load_sbml_model(path)
    else:
        model = load_identifier_list(path, encoding=encoding)
    log_model_loaded(logger, str(path), len(model), duration=time.perf_counter() - start)
    return model
