"""
Reminder Bot - Telegram 定时提醒

按格式发送消息即可创建提醒，支持一次性、每月、每年提醒
"""

__version__ = "0.1.0"
__author__ = "Reminder Bot Team"

from .config import Config
from .bot import ReminderBot

__all__ = ["ReminderBot", "Config"]
