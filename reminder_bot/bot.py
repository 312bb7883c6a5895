"""
Reminder Bot 主类

生命周期: 加载存储 -> 注册唤醒 -> 轮询 Telegram -> 关闭
"""

import asyncio
import signal
from typing import Optional

from loguru import logger

from .commands import CommandSurface
from .config import Config
from .errors import StartupError
from .platforms.telegram import TelegramAdapter
from .reminders import ReminderScheduler, ReminderStore, WakeupQueue


class ReminderBot:
    """Reminder Bot 主类

    Example:
        >>> bot = ReminderBot(config_path="config.yaml")
        >>> await bot.run()
    """

    def __init__(self, config_path: Optional[str] = None, config: Config = None):
        """
        Args:
            config_path: 配置文件路径，默认使用 config/config.yaml
            config: 直接传入的配置 (优先)
        """
        self.config = config or Config.load(config_path)

        self.store = ReminderStore(
            self.config.store.path,
            on_corrupt_store=self.config.store.on_corrupt_store,
        )
        self.wakeups = WakeupQueue(max_sleep=self.config.scheduler.max_sleep_seconds)
        self.telegram = TelegramAdapter(self.config.telegram)
        self.scheduler = ReminderScheduler(self.store, self.telegram, self.wakeups)
        self.commands = CommandSurface(self.store, self.scheduler)
        self.telegram.attach(self.commands)
        self.telegram.on_fatal = self._on_fatal

        self._running = False
        self._stop_event: Optional[asyncio.Event] = None
        self._fatal_error: Optional[Exception] = None

        logger.info(f"{self.config.name} v{self.config.version} initialized")

    def _setup_signal_handlers(self):
        """设置信号处理器"""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, self.request_stop)
            except NotImplementedError:
                # Windows 不支持
                pass

    async def start(self):
        """启动: 加载提醒、连接 Telegram、注册所有唤醒

        Raises:
            StartupError: 启动失败
        """
        if self._running:
            logger.warning("Bot already running")
            return

        logger.info("Starting Reminder Bot...")
        self._stop_event = asyncio.Event()

        self.store.load()
        logger.info("Successfully loaded reminder store")

        await self.telegram.initialize()

        self.wakeups.start()
        self.scheduler.arm_all()

        await self.telegram.start()
        self._running = True
        logger.info("🤖 Telegram Reminder Bot is running...")

    async def run(self):
        """启动并保持运行，直到收到停止信号"""
        self._setup_signal_handlers()
        try:
            await self.start()
            await self._stop_event.wait()
        finally:
            await self.stop()

        if self._fatal_error:
            raise StartupError(str(self._fatal_error)) from self._fatal_error

    def request_stop(self):
        """请求停止 (信号处理器)"""
        if self._stop_event:
            self._stop_event.set()

    def _on_fatal(self, error: Exception):
        self._fatal_error = error
        self.request_stop()

    async def stop(self):
        """停止 Bot"""
        logger.info("Stopping Reminder Bot...")
        self._running = False

        await self.wakeups.stop()
        await self.telegram.stop()

        logger.info("Reminder Bot stopped")
