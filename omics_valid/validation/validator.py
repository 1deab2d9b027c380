"""
Validation orchestrator.

Feeds the lines of one file, in order, through the parser and rule set of the
selected format and gathers every violation of a line into one ``LineReport``.
Lines without violations produce nothing, a malformed line only condemns
itself, and the reports come out ordered by line number.
"""

import logging
import time
from typing import Iterable, List, Optional, Union

from ..config import SystemConfig, get_config
from ..errors import RecordParseError
from ..logging_config import log_validation_summary
from ..models.records import OmicsFormat
from ..models.validation import ErrorKind, LineReport, ValidationError, ValidationRun
from .metabolites import Model
from .parsers import RecordParser, create_parser
from .rules import RuleSet, create_rule_set

logger = logging.getLogger(__name__)


class Validator:
    """Runs the parser and rule set of a format over the lines of a file."""

    def __init__(self, config: Optional[SystemConfig] = None):
        """
        Initialize validator.

        Args:
            config: System configuration; defaults to the global configuration
        """
        self.config = config or get_config()

    def run(self, omics_format: Union[OmicsFormat, str], lines: Iterable[str],
            model: Optional[Model] = None) -> ValidationRun:
        """
        Validate the lines of one file.

        Args:
            omics_format: Format selector (``prot``, ``tidy_prot``, ``met``, ``rna``)
            lines: Raw text lines, header included where the format has one
            model: Metabolite model, required for ``met``

        Returns:
            ValidationRun with the ordered line reports

        Raises:
            ConfigurationError: If the format needs a model and none is given
            ValueError: If the format selector is unknown
        """
        omics_format = OmicsFormat(omics_format)
        # Built before reading anything so setup problems surface first
        rule_set = create_rule_set(omics_format, model=model, config=self.config)
        parser = create_parser(omics_format, self.config.input)

        run = ValidationRun(format=omics_format, model=model)
        header_pending = omics_format.has_header
        first_line = True
        line_number = 0
        start = time.perf_counter()

        for raw_line in lines:
            line = raw_line.rstrip("\r\n")
            if first_line:
                line = line.lstrip("\ufeff")
                first_line = False
            if not line.strip():
                continue

            if header_pending:
                header_pending = False
                if parser.consume_header(line):
                    logger.debug(f"Header consumed: {line!r}")
                    continue

            line_number += 1
            errors = self.check_line(parser, rule_set, line)
            if errors:
                run.add_report(LineReport(line_number=line_number, errors=tuple(errors)))

        run.lines_processed = line_number
        log_validation_summary(
            logger,
            omics_format.value,
            lines_processed=run.lines_processed,
            report_count=len(run.reports),
            error_count=run.error_count,
            duration=time.perf_counter() - start
        )
        return run

    def check_line(self, parser: RecordParser, rule_set: RuleSet, line: str) -> List[ValidationError]:
        """Parse one data line and run the rule set on it."""
        try:
            record = parser.parse(line)
        except RecordParseError as e:
            return [ValidationError(kind=ErrorKind.MALFORMED_RECORD, detail=e.reason)]
        return rule_set.check(record)


def validate(omics_format: Union[OmicsFormat, str], lines: Iterable[str],
             model: Optional[Model] = None, config: Optional[SystemConfig] = None) -> List[LineReport]:
    """
    Convenience function returning only the line reports of a run.

    Args:
        omics_format: Format selector
        lines: Raw text lines of the file
        model: Metabolite model, required for ``met``
        config: System configuration; defaults to the global configuration

    Returns:
        Reports ordered by line number; empty for a valid file
    """
    return Validator(config).run(omics_format, lines, model=model).reports
