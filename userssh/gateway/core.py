"""SSH gateway - policy check, escaping, remote execution and output shaping per invocation."""

import logging
from typing import Awaitable, Callable, Optional

from ..config import SSHConfig
from ..policy import authorize
from ..ssh import transport
from ..ssh.escape import escape_command
from ..ssh.result import ExecutionResult, classify
from ..utils import shape_output

logger = logging.getLogger(__name__)

COMMAND_SSH = "ssh"
COMMAND_STATUS = "ssh-status"
COMMAND_TEST = "ssh-test"
COMMANDS = (COMMAND_SSH, COMMAND_STATUS, COMMAND_TEST)

USAGE_MESSAGE = "Please enter a command to run. Usage: ssh <command>"
TESTING_MESSAGE = "Testing SSH connection..."
CONNECTION_TEST_COMMAND = 'echo "connection test succeeded"'

Notify = Callable[[str], Awaitable[object]]


class SSHGateway:
    """Runs caller commands on the configured host. Holds no per-caller state."""

    def __init__(self, config: SSHConfig):
        self._config = config

    @property
    def config(self) -> SSHConfig:
        return self._config

    async def _execute(self, command: str) -> ExecutionResult:
        escaped = escape_command(command)
        try:
            outcome = await transport.run(escaped, self._config)
        except transport.TransportError as e:
            return classify(e)
        return classify(outcome)

    async def run_command(self, caller_id: str, text: Optional[str]) -> str:
        """Handle ``ssh <command>`` for a caller and return the reply text."""
        if not text or not text.strip():
            return USAGE_MESSAGE

        decision = authorize(caller_id, text, self._config)
        if not decision.allowed:
            logger.info("Denied command from %s: %s", caller_id, decision.reason)
            return decision.message

        logger.info("Running command for %s on %s: %s", caller_id, self._config.host, text)
        result = await self._execute(text)
        if not result.ok:
            logger.warning("Command from %s failed (%s): %s",
                           caller_id, result.kind.value, result.error)
            return f"SSH command failed: {result.error}"

        output, truncated = shape_output(result.output, self._config.max_output_length)
        if truncated:
            return f"Output too long, truncated:\n{output}"
        return f"Result:\n{output}"

    def status(self, caller_id: str) -> str:
        """Describe the configured server. Sessions are never kept, so always not connected."""
        return (
            "SSH server status:\n"
            f"Server: {self._config.host}:{self._config.port}\n"
            f"User: {self._config.username}\n"
            "Your session: not connected"
        )

    async def test_connection(self, notify: Optional[Notify] = None) -> str:
        """Run a fixed harmless command end to end, skipping the policy checks."""
        if notify is not None:
            await notify(TESTING_MESSAGE)
        result = await self._execute(CONNECTION_TEST_COMMAND)
        if not result.ok:
            logger.warning("Connection test to %s failed: %s", self._config.host, result.error)
            return f"Connection test failed: {result.error}"
        return f"Connection test succeeded! Server response:\n{result.output}"

    async def handle(self, command: str, caller_id: str, text: str = "",
                     notify: Optional[Notify] = None) -> str:
        """Dispatch one of COMMANDS and return the reply text."""
        if command == COMMAND_SSH:
            return await self.run_command(caller_id, text)
        if command == COMMAND_STATUS:
            return self.status(caller_id)
        if command == COMMAND_TEST:
            return await self.test_connection(notify)
        return f"Unknown command: {command}"
