"""Telegram channel adapter using python-telegram-bot v22+."""

import asyncio
import logging
from typing import Optional

import telegram.error
from telegram import BotCommand, Update
from telegram.ext import Application, CommandHandler, ContextTypes

from ...config import TelegramChannelConfig
from ...gateway.core import COMMAND_SSH, COMMAND_STATUS, COMMAND_TEST
from ..base import AbstractChannel, CommandBackend, SendResult
from .formatting import reply_to_html, strip_html_tags
from .utils import chat_action

logger = logging.getLogger(__name__)

# Telegram command names cannot contain "-"
TELEGRAM_COMMANDS = {
    "ssh": COMMAND_SSH,
    "ssh_status": COMMAND_STATUS,
    "ssh_test": COMMAND_TEST,
}


def command_text(message_text: Optional[str]) -> str:
    """Return everything after the leading /command (and optional @botname)."""
    if not message_text:
        return ""
    parts = message_text.split(maxsplit=1)
    if len(parts) < 2:
        return ""
    return parts[1]


class TelegramChannel(AbstractChannel):
    """Telegram channel adapter."""

    name = "telegram"

    def __init__(self, config: TelegramChannelConfig, backend: CommandBackend):
        super().__init__(backend)
        self._token = config.token
        self._app: Application | None = None
        self._active_tasks: set[asyncio.Task] = set()

    def _tracked_task(self, coro) -> asyncio.Task:
        """Create a task that is tracked for clean shutdown."""
        task = asyncio.create_task(coro)
        self._active_tasks.add(task)

        def _done(t: asyncio.Task) -> None:
            self._active_tasks.discard(t)
            if not t.cancelled() and t.exception():
                logger.error("Unhandled error in background task: %s",
                             t.exception(), exc_info=t.exception())

        task.add_done_callback(_done)
        return task

    async def start(self) -> None:
        """Start Telegram polling in the current event loop."""
        self._app = Application.builder().token(self._token).build()

        self._app.add_handler(CommandHandler("start", self._cmd_start))
        self._app.add_handler(CommandHandler("help", self._cmd_help))
        for tg_name in TELEGRAM_COMMANDS:
            self._app.add_handler(CommandHandler(tg_name, self._cmd_gateway))

        # Manual startup for shared event loop (no run_polling)
        await self._app.initialize()
        await self._app.start()

        await self._app.bot.set_my_commands([
            BotCommand("ssh", "Run a command on the SSH server"),
            BotCommand("ssh_status", "Show SSH server status"),
            BotCommand("ssh_test", "Test the SSH connection"),
            BotCommand("help", "Show commands"),
        ])

        await self._app.updater.start_polling(allowed_updates=Update.ALL_TYPES)
        logger.info("Telegram channel started")

    async def stop(self) -> None:
        """Stop Telegram polling and drain running commands."""
        if self._app:
            await self._app.updater.stop()
            if self._active_tasks:
                logger.info("Draining %d running command(s)…", len(self._active_tasks))
                await asyncio.gather(*self._active_tasks, return_exceptions=True)
            await self._app.stop()
            await self._app.shutdown()
            logger.info("Telegram channel stopped")

    async def send(self, chat_id: str, text: str, *,
                   reply_to_message_id: Optional[str] = None,
                   disable_notification: bool = False) -> Optional[SendResult]:
        """Send a gateway reply, rendered as Telegram HTML."""
        if not self._app or not text:
            return None
        last_msg = None
        for i, chunk in enumerate(reply_to_html(text)):
            kwargs: dict = {
                "chat_id": int(chat_id),
                "text": chunk,
                "parse_mode": "HTML",
                "disable_notification": disable_notification,
            }
            # reply_to only on first chunk (threading)
            if i == 0 and reply_to_message_id:
                kwargs["reply_to_message_id"] = int(reply_to_message_id)
            try:
                last_msg = await self._app.bot.send_message(**kwargs)
            except telegram.error.BadRequest as e:
                logger.warning("send_message BadRequest: %s", e)
                kwargs["text"] = strip_html_tags(kwargs["text"])
                kwargs.pop("parse_mode", None)
                kwargs.pop("reply_to_message_id", None)
                try:
                    last_msg = await self._app.bot.send_message(**kwargs)
                except telegram.error.BadRequest:
                    logger.exception("send_message retry failed")
        if last_msg:
            return SendResult(message_id=str(last_msg.message_id))
        return None

    # --- Command handlers ---

    async def _cmd_start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not update.message:
            return
        await update.message.reply_text(
            "Hi! I run shell commands on a configured SSH server.\n"
            "Use /help for commands."
        )

    async def _cmd_help(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not update.message:
            return
        lines = [
            "<b>Commands:</b>",
            "/ssh &lt;command&gt; - Run a command on the server",
            "/ssh_status - Server and session status",
            "/ssh_test - Test the SSH connection",
            "/help - This message",
        ]
        await update.message.reply_text("\n".join(lines), parse_mode="HTML")

    async def _cmd_gateway(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Forward /ssh, /ssh_status and /ssh_test to the backend."""
        message = update.message
        if not message or not message.text:
            return

        tg_name = message.text.split(maxsplit=1)[0].lstrip("/").split("@", 1)[0]
        command = TELEGRAM_COMMANDS.get(tg_name)
        if command is None:
            return

        user = update.effective_user
        user_id = str(user.id) if user else "unknown"
        chat_id = update.effective_chat.id
        text = command_text(message.text) if command == COMMAND_SSH else ""

        # Run in background so the handler returns immediately
        self._tracked_task(self._run_command(
            command, user_id, text, chat_id, str(message.message_id)))

    async def _run_command(self, command: str, user_id: str, text: str,
                           chat_id: int, message_id: Optional[str]) -> None:
        str_chat_id = str(chat_id)

        async def notify(notice: str) -> None:
            await self.send(str_chat_id, notice)

        try:
            async with chat_action(self._app.bot, chat_id):
                reply = await self._backend.handle(command, user_id, text, notify=notify)
            await self.send(str_chat_id, reply, reply_to_message_id=message_id)
        except Exception as e:
            logger.exception("Error running %s for %s", command, user_id)
            await self.send(str_chat_id, f"Error: {e}")
