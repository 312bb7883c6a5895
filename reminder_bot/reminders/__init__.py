"""
Reminders

提醒模型、存储与调度
"""

from .models import (
    Category,
    Frequency,
    Reminder,
    add_months,
    next_occurrence,
    parse_date,
    parse_reminder_input,
    split_reminder_message,
)
from .scheduler import ReminderScheduler, render_notification
from .store import ReminderStore
from .timers import WakeupQueue

__all__ = [
    "Category",
    "Frequency",
    "Reminder",
    "ReminderScheduler",
    "ReminderStore",
    "WakeupQueue",
    "add_months",
    "next_occurrence",
    "parse_date",
    "parse_reminder_input",
    "render_notification",
    "split_reminder_message",
]
