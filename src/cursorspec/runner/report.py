"""Conformance results and their presentation.

A `ConformanceReport` collects one `CheckResult` per (connector, check) pair
and renders them as Rich tables for the terminal or as JSON-ready dicts.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from rich.table import Table
from rich.text import Text

from cursorspec import __version__
from cursorspec.interfaces.errors import ErrorKind


class Outcome(str, Enum):
    """Result of one check against one connector.

    Attributes:
        PASSED: The connector conforms.
        FAILED: The connector does not conform (a violated expectation, or a
            contract error of the wrong kind).
        ERROR: The check could not be evaluated (backend I/O failure or any
            other unexpected exception).
        SKIPPED: The connector's fixture declares the check inapplicable.
    """

    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"
    SKIPPED = "skipped"


OUTCOME_STYLES = {
    Outcome.PASSED: "green",
    Outcome.FAILED: "bold red",
    Outcome.ERROR: "bold magenta",
    Outcome.SKIPPED: "yellow",
}


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one check against one connector."""

    connector: str
    check_id: str
    outcome: Outcome
    message: str = ""
    error_kind: ErrorKind | None = None
    duration: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "connector": self.connector,
            "check": self.check_id,
            "outcome": self.outcome.value,
            "message": self.message,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "duration": round(self.duration, 6),
        }


@dataclass
class ConformanceReport:
    """Every result of a conformance run, in execution order."""

    results: list[CheckResult] = field(default_factory=list)

    def add(self, result: CheckResult) -> None:
        self.results.append(result)

    def connectors(self) -> list[str]:
        """Connector names, in the order they were run."""
        return list(dict.fromkeys(r.connector for r in self.results))

    def counts(self, connector: str | None = None) -> Counter[Outcome]:
        """Count outcomes, over all connectors or for one."""
        return Counter(
            r.outcome
            for r in self.results
            if connector is None or r.connector == connector
        )

    def problems(self) -> list[CheckResult]:
        """Results that FAILED or ERRORED."""
        return [
            r for r in self.results if r.outcome in (Outcome.FAILED, Outcome.ERROR)
        ]

    @property
    def ok(self) -> bool:
        """True when nothing FAILED or ERRORED."""
        return not self.problems()

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation of the whole run."""
        return {
            "cursorspec": __version__,
            "ok": self.ok,
            "summary": {
                name: {o.value: self.counts(name)[o] for o in Outcome}
                for name in self.connectors()
            },
            "results": [r.to_dict() for r in self.results],
        }

    def summary_table(self) -> Table:
        """One row per connector with its outcome counts."""
        table = Table(title="Conformance summary")
        table.add_column("Connector", style="bold")
        for outcome in Outcome:
            table.add_column(
                outcome.value.capitalize(),
                justify="right",
                style=OUTCOME_STYLES[outcome],
            )
        for name in self.connectors():
            counts = self.counts(name)
            table.add_row(name, *(str(counts[o]) for o in Outcome))
        return table

    def results_table(self, *, show_passed: bool = False) -> Table:
        """Per-check rows; passed checks are hidden unless ``show_passed``."""
        table = Table(title="Conformance results")
        table.add_column("Connector")
        table.add_column("Check")
        table.add_column("Outcome")
        table.add_column("Detail", overflow="fold")
        for r in self.results:
            if r.outcome is Outcome.PASSED and not show_passed:
                continue
            table.add_row(
                r.connector,
                r.check_id,
                Text(r.outcome.value, style=OUTCOME_STYLES[r.outcome]),
                r.message,
            )
        return table
