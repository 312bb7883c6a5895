"""
Telegram 平台适配器

支持功能:
- 命令处理 (/start, /help, /add_reminder, /list_reminders)
- 文本消息创建提醒
- 发送提醒通知 (Notifier)
"""

import asyncio
from typing import Callable, Optional

from loguru import logger
from telegram import Update
from telegram.error import InvalidToken, TelegramError
from telegram.ext import Application, CommandHandler, ContextTypes, MessageHandler, filters

from ..config import TelegramConfig
from ..errors import StartupError, TransportError
from .base import Notifier

MAX_MESSAGE_LENGTH = 4096


def split_message(text: str, max_length: int = MAX_MESSAGE_LENGTH):
    """按 Telegram 长度限制分割消息"""
    return [text[i:i + max_length] for i in range(0, len(text), max_length)]


class TelegramAdapter(Notifier):
    """Telegram 平台适配器"""

    def __init__(self, config: TelegramConfig, commands=None):
        """初始化适配器

        Args:
            config: Telegram 配置
            commands: CommandSurface 实例 (也可以之后 attach)
        """
        self.config = config
        self.commands = commands
        self.application: Optional[Application] = None
        self.bot = None
        self.on_fatal: Optional[Callable[[Exception], None]] = None
        self._running = False
        self._watch_task: Optional[asyncio.Task] = None

        logger.info("Telegram adapter initialized")

    def attach(self, commands):
        """绑定命令处理层"""
        self.commands = commands

    async def initialize(self):
        """初始化 Telegram Bot

        Raises:
            StartupError: 缺少 token、token 无效或连接失败
        """
        if not self.config.bot_token:
            raise StartupError("TELEGRAM_BOT_TOKEN is not set")

        self.application = Application.builder().token(self.config.bot_token).build()
        self.bot = self.application.bot

        self.application.add_handler(CommandHandler("start", self._handle_start))
        self.application.add_handler(CommandHandler("help", self._handle_help))
        self.application.add_handler(CommandHandler("add_reminder", self._handle_add_reminder))
        self.application.add_handler(CommandHandler("list_reminders", self._handle_list_reminders))
        self.application.add_handler(
            MessageHandler(filters.TEXT & ~filters.COMMAND, self._handle_message)
        )
        self.application.add_error_handler(self._handle_error)

        try:
            await self.application.initialize()
        except InvalidToken as e:
            raise StartupError("Invalid bot token. Please check TELEGRAM_BOT_TOKEN") from e
        except TelegramError as e:
            raise StartupError(f"Error connecting to Telegram: {e}") from e

        logger.info("Successfully connected to Telegram")

    async def start(self):
        """启动轮询 (不阻塞)"""
        if not self.application:
            raise StartupError("Telegram not initialized")

        await self.application.start()
        await self.application.updater.start_polling(
            drop_pending_updates=self.config.drop_pending_updates,
            error_callback=self._handle_polling_error,
        )
        self._running = True
        self._watch_task = asyncio.create_task(self._watch_token())
        logger.info("Telegram polling started")

    async def stop(self):
        """停止 Telegram Bot"""
        if not self.application:
            return

        if self._watch_task:
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None

        try:
            if self._running:
                await self.application.updater.stop()
                await self.application.stop()
            await self.application.shutdown()
            logger.info("Telegram bot stopped")
        except TelegramError as e:
            logger.warning(f"Error stopping Telegram: {e}")
        finally:
            self._running = False

    async def send(self, chat_id: int, text: str) -> None:
        """发送消息 (超长消息自动分割)

        Raises:
            TransportError: 发送失败
        """
        if not text or not text.strip():
            return

        try:
            for part in split_message(text):
                await self.bot.send_message(chat_id=chat_id, text=part)
        except TelegramError as e:
            raise TransportError(f"Failed to send Telegram message to {chat_id}: {e}") from e

    async def _reply(self, chat_id: int, text: Optional[str]):
        """回复命令，失败只记录日志"""
        if not text:
            return
        try:
            await self.send(chat_id, text)
        except TransportError as e:
            logger.error(f"Failed to reply: {e}")

    async def _handle_start(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        chat_id = update.effective_chat.id
        await self._reply(chat_id, self.commands.on_start(chat_id))

    async def _handle_help(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        chat_id = update.effective_chat.id
        await self._reply(chat_id, self.commands.on_help(chat_id))

    async def _handle_add_reminder(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        chat_id = update.effective_chat.id
        await self._reply(chat_id, self.commands.on_add_reminder_help(chat_id))

    async def _handle_list_reminders(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        chat_id = update.effective_chat.id
        await self._reply(chat_id, self.commands.on_list_reminders(chat_id))

    async def _handle_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """处理文本消息"""
        message = update.effective_message
        if not message or not message.text:
            return

        chat_id = update.effective_chat.id
        logger.debug(f"[MESSAGE] chat {chat_id}: {message.text[:100]}")
        await self._reply(chat_id, self.commands.on_freeform_message(chat_id, message.text))

    async def _handle_error(self, update: object, context: ContextTypes.DEFAULT_TYPE):
        """处理器异常"""
        logger.error(f"Error handling update: {context.error}")

    def _handle_polling_error(self, error: TelegramError):
        """轮询错误 (可重试的错误，轮询循环会自动重试)"""
        logger.error(f"Polling error: {error}")

    async def _watch_token(self):
        """定期校验 token

        token 失效时轮询任务会直接退出而不回调 error_callback，
        所以这里用 get_me 检测并请求退出
        """
        while self._running:
            await asyncio.sleep(self.config.token_check_seconds)
            try:
                await self.bot.get_me()
            except InvalidToken as e:
                logger.error("Invalid bot token. Please check TELEGRAM_BOT_TOKEN")
                if self.on_fatal:
                    self.on_fatal(e)
                return
            except TelegramError as e:
                logger.warning(f"Token check failed: {e}")
