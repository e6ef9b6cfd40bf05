"""Async HTTP client for a remote SSH gateway server."""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from .core import COMMAND_TEST, TESTING_MESSAGE, Notify

logger = logging.getLogger(__name__)

# Server-side ssh timeout is 30s by default; leave room for the handshake
DEFAULT_HTTP_TIMEOUT = 45


@dataclass
class GatewayReply:
    """Reply from the gateway server."""
    reply: str = ""
    error: str = ""


class GatewayClient:
    """Async client for communicating with the gateway server.

    ``handle()`` has the same signature as SSHGateway.handle(), so a channel
    can use either one.
    """

    def __init__(self, base_url: str, token: Optional[str] = None,
                 timeout: float = DEFAULT_HTTP_TIMEOUT):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def execute(self, command: str, user_id: str, text: str = "") -> GatewayReply:
        """Send a gateway command.

        Args:
            command: One of "ssh", "ssh-status", "ssh-test".
            user_id: Caller identifier checked against allowed_users.
            text: Command text for "ssh".
        """
        payload = {"command": command, "user_id": user_id, "text": text}

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    f"{self._base_url}/command",
                    json=payload,
                    headers=self._headers(),
                )
            if resp.status_code == 401:
                return GatewayReply(error="Gateway auth failed. Check gateway.token.")
            if resp.status_code in (400, 404):
                data = resp.json()
                return GatewayReply(error=data.get("error", f"Bad request ({resp.status_code})"))
            if not resp.is_success:
                return GatewayReply(error=f"Gateway returned HTTP {resp.status_code}")
            data = resp.json()
        except httpx.ConnectError:
            return GatewayReply(
                error="Cannot connect to SSH gateway. Is the gateway server running?"
            )
        except httpx.TimeoutException:
            return GatewayReply(error="Gateway request timed out.")
        except Exception as e:
            logger.exception("Gateway request failed")
            return GatewayReply(error=f"Gateway error: {e}")

        return GatewayReply(reply=data.get("reply", ""))

    async def handle(self, command: str, caller_id: str, text: str = "",
                     notify: Optional[Notify] = None) -> str:
        if command == COMMAND_TEST and notify is not None:
            await notify(TESTING_MESSAGE)
        result = await self.execute(command, caller_id, text)
        if result.error:
            return f"Error: {result.error}"
        return result.reply

    async def health(self) -> tuple[bool, dict]:
        """Check gateway health. Returns (ok, response_data)."""
        try:
            async with httpx.AsyncClient(timeout=10) as client:
                resp = await client.get(
                    f"{self._base_url}/health",
                    headers=self._headers(),
                )
            if resp.status_code == 200:
                return True, resp.json()
            return False, {"error": f"HTTP {resp.status_code}"}
        except httpx.ConnectError:
            return False, {"error": "Cannot connect to SSH gateway"}
        except Exception as e:
            return False, {"error": str(e)}
