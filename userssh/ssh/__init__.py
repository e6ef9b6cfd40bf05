"""SSH execution pipeline: escaping, transport, result classification."""

from .escape import escape_command
from .result import ExecutionResult, FailureKind, classify
from .transport import TransportError, TransportErrorKind, TransportOutcome, run

__all__ = [
    "ExecutionResult",
    "FailureKind",
    "TransportError",
    "TransportErrorKind",
    "TransportOutcome",
    "classify",
    "escape_command",
    "run",
]
