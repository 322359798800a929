"""Result aggregator: turns per-category results into user-facing lines.

Escalation is decided once, after all categories are in: with
fail_build set, any Failed result makes the report fatal.
"""

import json
from dataclasses import dataclass, field
from typing import Iterable, Optional

from themis_notifier.reporting.types import Aborted, DispatchResult, Failed, ServiceFailure, Success

INFO = "info"
ERROR = "error"


@dataclass
class LogLine:
    level: str
    message: str
    detail: Optional[str] = None


@dataclass
class AggregateReport:
    """Lines to print plus the fatal decision for the build."""

    lines: list[LogLine] = field(default_factory=list)
    fatal: bool = False
    message: Optional[str] = None

    @property
    def errors(self) -> list[LogLine]:
        return [line for line in self.lines if line.level == ERROR]

    def add(self, level: str, message: str, detail: Optional[str] = None) -> None:
        self.lines.append(LogLine(level=level, message=message, detail=detail))

    def fail(self, message: str, fail_build: bool, detail: Optional[str] = None) -> None:
        """Record an error line; escalate the first one when fail_build is set."""
        self.add(ERROR, message, detail)
        if fail_build and not self.fatal:
            self.fatal = True
            self.message = message


def render(results: Iterable[DispatchResult], fail_build: bool = False) -> AggregateReport:
    report = AggregateReport()
    for result in results:
        if isinstance(result, Success):
            report.add(INFO, success_message(result))
        elif isinstance(result, Aborted):
            report.add(INFO, f"no files for: {result.category}")
        elif isinstance(result, Failed):
            report.fail(failure_message(result), fail_build)
        else:
            raise TypeError(f"Unknown dispatch result: {result!r}")
    return report


def success_message(result: Success) -> str:
    displayed = data_displayed(result.body)
    if displayed is None:
        return f"report sent: {result.category}"
    return f"report sent: {result.category} ({displayed})"


def failure_message(result: Failed) -> str:
    cause = result.cause
    if isinstance(cause, ServiceFailure):
        return f"error sending {result.category} report: HTTP {cause.status_code} {cause.body}"
    return f"error sending {result.category} report: {type(cause).__name__}: {cause}"


def data_displayed(body: Optional[str]) -> Optional[str]:
    """Extract the service's `dataDisplayed` summary from a JSON body, if any."""
    if not body:
        return None
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    if not isinstance(payload, dict) or "dataDisplayed" not in payload:
        return None
    return str(payload["dataDisplayed"])
