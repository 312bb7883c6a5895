"""
聊天命令处理

与具体平台无关: 每个处理函数返回回复文本 (None 表示不回复)
"""

from typing import Optional

from loguru import logger

from .errors import PersistenceError, ValidationError
from .reminders import (
    Reminder,
    ReminderScheduler,
    ReminderStore,
    parse_reminder_input,
    split_reminder_message,
)

DATE_FORMAT = "%Y-%m-%d"
COMMAND_PREFIX = "/"

WELCOME_TEXT = (
    "Welcome to the Reminder Bot! 🤖\n\n"
    "Commands:\n"
    "/add_reminder - Add a new reminder\n"
    "/list_reminders - List all your reminders\n"
    "/help - Show this help message"
)

ADD_REMINDER_HELP_TEXT = (
    "Please send your reminder in the following format:\n\n"
    "Title | Description | Date (YYYY-MM-DD) | Frequency (yearly/monthly/once) | Category (task/bill)\n\n"
    "Example:\n"
    "Pay Rent | Monthly rent payment | 2024-04-01 | monthly | bill\n\n"
    "Use a future date: a monthly or yearly reminder with a past date sends "
    "one notification for every missed period until it catches up."
)

NO_REMINDERS_TEXT = "You have no reminders set."

FORMAT_ERROR_TEXT = (
    "❌ Error creating reminder. Please check the format and try again.\n"
    "Use /add_reminder to see the correct format."
)


def render_reminder(reminder: Reminder) -> str:
    """列表中的单条提醒"""
    return (
        f"📅 {reminder.title}\n"
        f"   Description: {reminder.description or 'N/A'}\n"
        f"   Date: {reminder.date.strftime(DATE_FORMAT)}\n"
        f"   Frequency: {reminder.frequency.value}\n"
        f"   Category: {reminder.category.value}\n"
    )


def render_confirmation(reminder: Reminder) -> str:
    """创建成功的回复"""
    return (
        "✅ Reminder set successfully!\n\n"
        f"Title: {reminder.title}\n"
        f"Date: {reminder.date.strftime(DATE_FORMAT)}\n"
        f"Frequency: {reminder.frequency.value}"
    )


class CommandSurface:
    """聊天命令 -> 存储/调度操作"""

    def __init__(self, store: ReminderStore, scheduler: ReminderScheduler):
        self.store = store
        self.scheduler = scheduler

    def on_start(self, chat_id: int) -> str:
        return WELCOME_TEXT

    def on_help(self, chat_id: int) -> str:
        return WELCOME_TEXT

    def on_add_reminder_help(self, chat_id: int) -> str:
        return ADD_REMINDER_HELP_TEXT

    def on_list_reminders(self, chat_id: int) -> str:
        reminders = self.store.get_reminders_by_chat(chat_id)
        if not reminders:
            return NO_REMINDERS_TEXT
        return "\n".join(render_reminder(r) for r in reminders)

    def on_freeform_message(self, chat_id: int, text: str) -> Optional[str]:
        """处理普通文本消息

        只有恰好 5 个字段的非命令消息才会被当作创建提醒
        """
        if not text or text.startswith(COMMAND_PREFIX):
            return None

        fields = split_reminder_message(text)
        if fields is None:
            return None

        try:
            reminder = parse_reminder_input(fields, chat_id)
        except ValidationError as e:
            logger.warning(f"Error creating reminder for chat {chat_id}: {e}")
            return FORMAT_ERROR_TEXT

        try:
            self.store.add_reminder(reminder)
        except PersistenceError as e:
            logger.error(f"Reminder {reminder.id} added but not persisted: {e}")

        self.scheduler.arm(reminder)
        return render_confirmation(reminder)
