"""SSH command gateway - local orchestration and its HTTP surface."""

from .client import GatewayClient, GatewayReply
from .core import COMMANDS, SSHGateway

__all__ = ["COMMANDS", "GatewayClient", "GatewayReply", "SSHGateway"]
