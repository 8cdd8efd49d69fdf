"""Conformance runner: the connector x check matrix and its report."""

from .matrix import TEARDOWN_CHECK_ID, ConformanceRunner
from .report import CheckResult, ConformanceReport, Outcome

__all__ = [
    "CheckResult",
    "ConformanceReport",
    "ConformanceRunner",
    "Outcome",
    "TEARDOWN_CHECK_ID",
]
