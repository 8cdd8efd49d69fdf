"""The conformance matrix: every selected check, once per connector.

Each connector's run is wrapped in exactly one `initialize()` /
`uninitialize()` pair. Checks never share state: every check opens and
releases its own connection through the connector's fixture. A teardown that
fails, or that finds connections still open, adds one ERROR result under
`TEARDOWN_CHECK_ID`.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from fnmatch import fnmatchcase

from cursorspec.contract import DEFAULT_SUITES, CheckSkipped, ContractSuite, ContractViolation
from cursorspec.interfaces.connector import Connector
from cursorspec.interfaces.errors import BackendIOError, ErrorKind, ReaderError
from cursorspec.logging import evaluation_context

from .report import CheckResult, ConformanceReport, Outcome

logger = logging.getLogger(__name__)

ResultCallback = Callable[[CheckResult], None]

#: Check id of the result recorded when a connector's teardown goes wrong.
TEARDOWN_CHECK_ID = "connector.uninitialize"


class ConformanceRunner:
    """Run contract suites against connectors.

    Args:
        connectors: Connectors to evaluate, in reporting order.
        suites: Suite classes to run. Defaults to every shipped suite.
        select: Shell-style pattern over qualified check ids
            (``"reader.get_*"``); None selects everything.
        on_result: Called with each result as soon as it is known.
    """

    def __init__(
        self,
        connectors: Sequence[Connector],
        suites: Sequence[type[ContractSuite]] = DEFAULT_SUITES,
        select: str | None = None,
        on_result: ResultCallback | None = None,
    ) -> None:
        self.connectors = list(connectors)
        self.suites = list(suites)
        self.select = select
        self.on_result = on_result

    def selected(self, suite: type[ContractSuite]) -> list[str]:
        """Qualified ids of the checks of ``suite`` matching `select`."""
        ids = suite.check_ids()
        if self.select is None:
            return ids
        return [i for i in ids if fnmatchcase(i, self.select)]

    def run(self) -> ConformanceReport:
        """Run the whole matrix and return its report."""
        report = ConformanceReport()
        for connector in self.connectors:
            with evaluation_context(connector=connector.name):
                self.run_connector(connector, report)
        return report

    def run_connector(self, connector: Connector, report: ConformanceReport) -> None:
        """Run every selected check against one connector, adding to ``report``."""
        plan = [(suite, check_id) for suite in self.suites for check_id in self.selected(suite)]
        logger.info("Running %d check(s) against %s", len(plan), connector.name)
        try:
            connector.initialize()
        except Exception as e:  # pylint: disable=broad-except
            logger.error("Connector %s failed to initialize: %s", connector.name, e, exc_info=True)
            for _, check_id in plan:
                self._record(report, _lifecycle_error(connector, check_id, e))
            return

        finished = 0
        try:
            fixture = connector.create_fixture()
            instances = {suite: suite(fixture) for suite in self.suites}
            for suite, check_id in plan:
                self._record(report, self.run_check(connector, instances[suite], check_id))
                finished += 1
        except Exception as e:  # pylint: disable=broad-except
            logger.error("Connector %s failed: %s", connector.name, e, exc_info=True)
            for _, check_id in plan[finished:]:
                self._record(report, _lifecycle_error(connector, check_id, e))
        finally:
            self._teardown(connector, report)

    def _teardown(self, connector: Connector, report: ConformanceReport) -> None:
        """Uninitialize ``connector``; a failure or a leak is an ERROR result."""
        problems = []
        kind = None
        if leaked := connector.factory.open_connections:
            problems.append(f"{leaked} connection(s) still open at teardown")
        try:
            connector.uninitialize()
        except Exception as e:  # pylint: disable=broad-except
            logger.error("Connector %s failed to uninitialize: %s", connector.name, e, exc_info=True)
            problems.append(f"uninitialize failed: {e}")
            kind = ErrorKind.BACKEND_IO if isinstance(e, BackendIOError) else None
        if problems:
            self._record(
                report,
                CheckResult(
                    connector.name, TEARDOWN_CHECK_ID, Outcome.ERROR, "; ".join(problems), kind
                ),
            )

    @staticmethod
    def run_check(connector: Connector, suite: ContractSuite, check_id: str) -> CheckResult:
        """Run one check and classify its outcome."""
        start = time.perf_counter()

        def result(outcome: Outcome, message: str = "", kind: ErrorKind | None = None) -> CheckResult:
            return CheckResult(
                connector.name, check_id, outcome, message, kind, time.perf_counter() - start
            )

        try:
            with evaluation_context(check=check_id):
                suite.run(check_id)
        except CheckSkipped as e:
            return result(Outcome.SKIPPED, e.reason)
        except ContractViolation as e:
            logger.debug("%s %s failed", connector.name, check_id, exc_info=True)
            return result(Outcome.FAILED, str(e), e.actual_kind)
        except BackendIOError as e:
            logger.warning("%s %s: backend error: %s", connector.name, check_id, e)
            return result(Outcome.ERROR, str(e), ErrorKind.BACKEND_IO)
        except ReaderError as e:
            logger.debug("%s %s failed", connector.name, check_id, exc_info=True)
            return result(Outcome.FAILED, f"unexpected {e.kind.value} error: {e}", e.kind)
        except Exception as e:  # pylint: disable=broad-except
            logger.warning("%s %s: %s: %s", connector.name, check_id, type(e).__name__, e)
            return result(Outcome.ERROR, f"{type(e).__name__}: {e}")
        return result(Outcome.PASSED)

    def _record(self, report: ConformanceReport, result: CheckResult) -> None:
        report.add(result)
        if self.on_result is not None:
            self.on_result(result)


def _lifecycle_error(connector: Connector, check_id: str, error: Exception) -> CheckResult:
    return CheckResult(
        connector.name,
        check_id,
        Outcome.ERROR,
        f"connector lifecycle failed: {error}",
        ErrorKind.BACKEND_IO if isinstance(error, BackendIOError) else None,
    )
