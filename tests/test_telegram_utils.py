"""Tests for Telegram utils — chat_action."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from userssh.channels.telegram.utils import chat_action


class TestChatAction:
    @pytest.mark.asyncio
    async def test_sends_typing(self):
        bot = MagicMock()
        bot.send_chat_action = AsyncMock()

        async with chat_action(bot, 123):
            await asyncio.sleep(0.01)

        bot.send_chat_action.assert_called_with(chat_id=123, action="typing")

    @pytest.mark.asyncio
    async def test_custom_action_repeats(self):
        bot = MagicMock()
        bot.send_chat_action = AsyncMock()

        async with chat_action(bot, 1, action="upload_document", interval=0.01):
            await asyncio.sleep(0.05)

        assert bot.send_chat_action.call_count >= 2
        bot.send_chat_action.assert_called_with(chat_id=1, action="upload_document")

    @pytest.mark.asyncio
    async def test_body_exception_propagates(self):
        bot = MagicMock()
        bot.send_chat_action = AsyncMock()

        with pytest.raises(ValueError, match="boom"):
            async with chat_action(bot, 456):
                raise ValueError("boom")

    @pytest.mark.asyncio
    async def test_send_error_ignored(self):
        bot = MagicMock()
        bot.send_chat_action = AsyncMock(side_effect=RuntimeError("network"))

        async with chat_action(bot, 789):
            await asyncio.sleep(0.01)
