"""Telegram channel utilities."""

import asyncio
from contextlib import asynccontextmanager

CHAT_ACTION_INTERVAL = 4.0


@asynccontextmanager
async def chat_action(bot, chat_id: int, action: str = "typing",
                      interval: float = CHAT_ACTION_INTERVAL):
    """Keep a chat action ("typing" by default) visible while a command runs.

    Telegram clears the action after about five seconds, so it is resent
    every ``interval`` seconds until the block exits.
    """
    async def _refresh():
        while True:
            try:
                await bot.send_chat_action(chat_id=chat_id, action=action)
            except asyncio.CancelledError:
                raise
            except Exception:
                pass
            await asyncio.sleep(interval)

    task = asyncio.create_task(_refresh())
    try:
        yield
    finally:
        task.cancel()
        try:
            await task
        except (asyncio.CancelledError, Exception):
            pass
