"""Backend-independent contract suites."""

from .base import (
    CheckContext,
    CheckSkipped,
    CheckSpec,
    ContractSuite,
    UnknownCheckError,
    contract_check,
)
from .command_suite import CommandContractSuite
from .expect import ContractViolation
from .reader_suite import ReaderContractSuite

#: Suites run by default, in reporting order.
DEFAULT_SUITES: tuple[type[ContractSuite], ...] = (
    ReaderContractSuite,
    CommandContractSuite,
)

__all__ = [
    "CheckContext",
    "CheckSkipped",
    "CheckSpec",
    "CommandContractSuite",
    "ContractSuite",
    "ContractViolation",
    "DEFAULT_SUITES",
    "ReaderContractSuite",
    "UnknownCheckError",
    "contract_check",
]
