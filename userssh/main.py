"""userssh entry point - wires the Telegram channel to a local or remote SSH gateway."""

import asyncio
import logging
import signal

from dotenv import load_dotenv

from .channels.base import CommandBackend
from .channels.telegram import TelegramChannel
from .config import AppConfig, load_config
from .gateway import GatewayClient, SSHGateway

logger = logging.getLogger(__name__)


def create_backend(config: AppConfig) -> CommandBackend:
    """Remote gateway when gateway.url is set, otherwise run SSH in-process."""
    if config.gateway.url:
        logger.info("Forwarding commands to gateway at %s", config.gateway.url)
        return GatewayClient(config.gateway.url, config.gateway.token,
                             timeout=config.gateway.request_timeout)
    if config.ssh is None:
        raise ValueError("either 'ssh' or 'gateway.url' must be configured")
    logger.info("Running SSH commands against %s@%s:%d",
                config.ssh.username, config.ssh.host, config.ssh.port)
    return SSHGateway(config.ssh)


async def check_gateway(client: GatewayClient) -> bool:
    """Log whether the remote gateway answers /health. Startup continues either way."""
    ok, data = await client.health()
    if ok:
        logger.info("SSH gateway ready: %s:%s", data.get("host"), data.get("port"))
    else:
        logger.warning("SSH gateway not reachable: %s", data.get("error", data))
    return ok


async def main() -> None:
    load_dotenv()
    config = load_config()

    # Logging
    logging.basicConfig(
        level=getattr(logging, config.logging.level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("userssh starting...")

    backend = create_backend(config)
    if isinstance(backend, GatewayClient):
        await check_gateway(backend)

    if not config.channels.telegram.enabled:
        logger.error("No channel enabled; set channels.telegram.enabled in config.yaml")
        return

    channel = TelegramChannel(config.channels.telegram, backend)
    await channel.start()
    logger.info("userssh is running. Press Ctrl+C to stop.")

    # Graceful shutdown
    stop_event = asyncio.Event()

    def _signal_handler():
        logger.info("Shutdown signal received")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    await stop_event.wait()

    logger.info("Shutting down...")
    await channel.stop()
    logger.info("userssh stopped.")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
