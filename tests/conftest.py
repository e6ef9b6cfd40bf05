"""Shared test fixtures."""

from unittest.mock import AsyncMock

import pytest

from userssh.config import (
    AppConfig,
    ChannelsConfig,
    GatewayConfig,
    LoggingConfig,
    SSHConfig,
    TelegramChannelConfig,
)
from userssh.ssh.transport import TransportOutcome


@pytest.fixture
def ssh_config() -> SSHConfig:
    """Default policy: sudo/rm disabled, no allowlist."""
    return SSHConfig(host="h", port=22, username="u", password="p")


@pytest.fixture
def restricted_config() -> SSHConfig:
    return SSHConfig(
        host="h", port=22, username="u", password="p",
        allowed_users=["alice", "42"],
    )


@pytest.fixture
def app_config(ssh_config) -> AppConfig:
    return AppConfig(
        ssh=ssh_config,
        gateway=GatewayConfig(port=9842, token="test-token"),
        channels=ChannelsConfig(
            telegram=TelegramChannelConfig(enabled=True, token="tg-token"),
        ),
        logging=LoggingConfig(),
    )


@pytest.fixture
def mock_run(monkeypatch):
    """Patch the transport so no process is spawned. Returns the AsyncMock."""
    run = AsyncMock(return_value=TransportOutcome(stdout="hi\n", stderr="", returncode=0))
    monkeypatch.setattr("userssh.ssh.transport.run", run)
    return run
