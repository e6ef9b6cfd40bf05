"""SSH transport - runs one command on the remote host through sshpass + ssh."""

import asyncio
import enum
import logging
import os
import shlex
import signal
from dataclasses import dataclass
from typing import Optional

from ..config import SSHConfig

logger = logging.getLogger(__name__)

SSH_BINARY = "ssh"
SSHPASS_BINARY = "sshpass"


class TransportErrorKind(enum.Enum):
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class TransportError(Exception):
    """Local failure to run the remote command (timeout, spawn or I/O error)."""

    def __init__(self, kind: TransportErrorKind, detail: str = ""):
        super().__init__(detail or kind.value)
        self.kind = kind
        self.detail = detail


@dataclass
class TransportOutcome:
    """Captured output of a finished ssh process."""
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


def build_invocation(escaped_command: str, config: SSHConfig) -> str:
    """Build the local shell command line for an already-escaped remote command.

    The password is not part of the string; ``sshpass -e`` reads it from
    the SSHPASS environment variable.
    """
    destination = shlex.quote(f"{config.username}@{config.host}")
    return (
        f"{SSHPASS_BINARY} -e {SSH_BINARY} -o StrictHostKeyChecking=no "
        f"-p {config.port} {destination} \"{escaped_command}\""
    )


async def _kill_group(proc: asyncio.subprocess.Process) -> None:
    """SIGKILL the process group started for ``proc`` and reap it."""
    if proc.returncode is None:
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
    await proc.wait()


async def run(escaped_command: str, config: SSHConfig,
              timeout: Optional[float] = None) -> TransportOutcome:
    """Run ``escaped_command`` on the configured host.

    Raises TransportError on timeout or when the process cannot be started.
    A non-zero exit status is returned in the outcome, not raised.
    """
    effective_timeout = config.timeout if timeout is None else timeout
    invocation = build_invocation(escaped_command, config)
    env = os.environ.copy()
    env["SSHPASS"] = config.password.get_secret_value()

    logger.debug("Running: %s", invocation)
    try:
        proc = await asyncio.create_subprocess_shell(
            invocation,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env,
            start_new_session=True,
        )
    except OSError as e:
        logger.warning("Failed to start ssh: %s", e)
        raise TransportError(TransportErrorKind.UNKNOWN, str(e)) from e

    try:
        stdout, stderr = await asyncio.wait_for(
            proc.communicate(), timeout=effective_timeout
        )
    except asyncio.TimeoutError:
        await _kill_group(proc)
        logger.warning("ssh to %s timed out after %ss", config.host, effective_timeout)
        raise TransportError(TransportErrorKind.TIMEOUT)
    except asyncio.CancelledError:
        await _kill_group(proc)
        raise
    except OSError as e:
        await _kill_group(proc)
        raise TransportError(TransportErrorKind.UNKNOWN, str(e)) from e

    return TransportOutcome(
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
        returncode=proc.returncode,
    )
