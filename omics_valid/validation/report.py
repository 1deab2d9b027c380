"""
Rendering of line reports.

Each report becomes one line of text::

    <ordinal> lines[<line_number>]: <message>;<TAB><message>...

where ``ordinal`` counts emitted reports from 1. A valid file renders to
nothing at all.
"""

import json
from typing import Iterable, Iterator

from ..models.validation import LineReport, ValidationRun

MESSAGE_SEPARATOR = ";\t"


class Reporter:
    """Renders line reports as text or JSON."""

    def render(self, ordinal: int, report: LineReport) -> str:
        """Render one report given its 1-based position among all reports."""
        return f"{ordinal} lines[{report.line_number}]: {MESSAGE_SEPARATOR.join(report.messages)}"

    def render_all(self, reports: Iterable[LineReport]) -> Iterator[str]:
        """Render reports in order, numbering them from 1."""
        for ordinal, report in enumerate(reports, start=1):
            yield self.render(ordinal, report)

    def render_json(self, run: ValidationRun) -> str:
        """Render a whole run as an indented JSON document."""
        return json.dumps(run.to_dict(), indent=2)


def render_reports(reports: Iterable[LineReport]) -> str:
    """Render reports as a newline-joined block; empty string when there are none."""
    return "\n".join(Reporter().render_all(reports))
