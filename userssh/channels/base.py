"""Abstract base class for channel adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from ..gateway.core import Notify


@dataclass
class SendResult:
    """Result of a send operation."""
    message_id: Optional[str] = None


@runtime_checkable
class CommandBackend(Protocol):
    """Anything that answers gateway commands: SSHGateway or GatewayClient."""

    async def handle(self, command: str, caller_id: str, text: str = "",
                     notify: Optional[Notify] = None) -> str: ...


class AbstractChannel(ABC):
    """Base class for all channel adapters."""

    name: str = "base"

    def __init__(self, backend: CommandBackend):
        self._backend = backend

    @abstractmethod
    async def start(self) -> None:
        """Start receiving commands (non-blocking)."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Gracefully stop the channel."""
        ...

    @abstractmethod
    async def send(self, chat_id: str, text: str, *,
                   reply_to_message_id: Optional[str] = None,
                   disable_notification: bool = False) -> Optional[SendResult]:
        """Send a text message to a chat."""
        ...
