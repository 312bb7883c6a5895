"""
Configuration management

Type-safe configuration using Pydantic
"""

import os
import re
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from loguru import logger

_ENV_REF = re.compile(r"^\$\{([A-Za-z_][A-Za-z0-9_]*)\}$")


def expand_env(value: Optional[str]) -> Optional[str]:
    """Expand a "${VAR}" reference from the environment"""
    if value:
        match = _ENV_REF.match(value)
        if match:
            return os.environ.get(match.group(1))
    return value


class TelegramConfig(BaseModel):
    """Telegram transport configuration"""
    bot_token: Optional[str] = "${TELEGRAM_BOT_TOKEN}"
    drop_pending_updates: bool = True
    # 定期校验 token 的间隔 (秒)
    token_check_seconds: float = 300.0

    def model_post_init(self, __context):
        """Expand environment variables"""
        self.bot_token = expand_env(self.bot_token)


class StoreConfig(BaseModel):
    """Reminder store configuration"""
    path: str = "reminders.json"
    # 存储文件损坏时: 重置为空 或 启动失败
    on_corrupt_store: Literal["reset_to_empty", "raise"] = "reset_to_empty"


class SchedulerConfig(BaseModel):
    """Wakeup loop configuration"""
    max_sleep_seconds: float = 60.0


class LoggingConfig(BaseModel):
    """Log sinks configuration"""
    level: str = "INFO"
    file: Optional[str] = None
    rotation: str = "10 MB"
    retention: int = 5


class Config(BaseSettings):
    """Reminder Bot main configuration"""

    model_config = SettingsConfigDict(
        env_prefix="REMINDER_BOT_",
        env_nested_delimiter="__",
    )

    # Basic info
    name: str = "Reminder-Bot"
    version: str = "0.1.0"

    # Sub-configs
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """Load configuration from file

        Args:
            config_path: Path to config file, defaults to config/config.yaml

        Returns:
            Config instance
        """
        if config_path is None:
            # Default paths
            paths = [
                Path("config/config.yaml"),
                Path("config.yaml"),
                Path.home() / ".reminder-bot/config.yaml",
            ]
            for path in paths:
                if path.exists():
                    config_path = str(path)
                    break

        if config_path and Path(config_path).exists():
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
                return cls(**data)
            except Exception as e:
                logger.error(f"Failed to load config from {config_path}: {e}")
                logger.info("Using default configuration")
                return cls()

        # Use default config
        logger.info("No config file found, using default configuration")
        return cls()

    def save(self, config_path: str = "config/config.yaml"):
        """Save configuration to file

        The bot token is written back as an environment reference so that
        secrets stay out of the file.
        """
        data = self.model_dump()
        data["telegram"]["bot_token"] = "${TELEGRAM_BOT_TOKEN}"

        Path(config_path).parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, allow_unicode=True, sort_keys=False)
