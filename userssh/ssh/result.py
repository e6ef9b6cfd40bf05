"""Classification of transport outcomes into caller-facing results."""

import enum
from dataclasses import dataclass
from typing import Optional, Union

from .transport import TransportError, TransportErrorKind, TransportOutcome

BENIGN_STDERR_PREFIX = "Warning: Permanently added"
NO_OUTPUT_MESSAGE = "command executed successfully (no output)"
TIMEOUT_MESSAGE = "SSH connection timed out"


class FailureKind(enum.Enum):
    TIMEOUT = "timeout"
    REMOTE_ERROR = "remote_error"
    TRANSPORT_UNKNOWN = "transport_unknown"


@dataclass
class ExecutionResult:
    """Either ``output`` (success) or ``kind`` + ``error`` (failure)."""
    output: str = ""
    error: str = ""
    kind: Optional[FailureKind] = None

    @property
    def ok(self) -> bool:
        return self.kind is None


def _significant_stderr(stderr: str) -> str:
    """Drop host-key warnings that ssh prints on first contact."""
    lines = [
        line for line in stderr.splitlines()
        if line.strip() and not line.startswith(BENIGN_STDERR_PREFIX)
    ]
    return "\n".join(lines)


def classify(outcome: Union[TransportOutcome, TransportError]) -> ExecutionResult:
    if isinstance(outcome, TransportError):
        if outcome.kind is TransportErrorKind.TIMEOUT:
            return ExecutionResult(kind=FailureKind.TIMEOUT, error=TIMEOUT_MESSAGE)
        return ExecutionResult(
            kind=FailureKind.TRANSPORT_UNKNOWN,
            error=f"SSH error: {outcome.detail or outcome.kind.value}",
        )

    stderr = _significant_stderr(outcome.stderr)
    if outcome.returncode != 0 or stderr:
        detail = stderr or f"exited with status {outcome.returncode}"
        return ExecutionResult(kind=FailureKind.REMOTE_ERROR, error=f"SSH error: {detail}")

    if not outcome.stdout:
        return ExecutionResult(output=NO_OUTPUT_MESSAGE)
    return ExecutionResult(output=outcome.stdout)
