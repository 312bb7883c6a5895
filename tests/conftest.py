"""
测试公共 fixture
"""

from datetime import datetime
from unittest.mock import AsyncMock, Mock

import pytest

from reminder_bot.reminders import (
    Category,
    Frequency,
    Reminder,
    ReminderScheduler,
    ReminderStore,
    WakeupQueue,
)


def _make_reminder(reminder_id: str = "r1", chat_id: int = 42,
                  frequency: Frequency = Frequency.ONCE,
                  date: datetime = datetime(2024, 4, 1),
                  title: str = "Pay Rent", description: str = "Monthly rent payment",
                  category: Category = Category.BILL) -> Reminder:
    return Reminder(
        id=reminder_id,
        title=title,
        description=description,
        date=date,
        frequency=frequency,
        chat_id=chat_id,
        category=category,
    )


@pytest.fixture
def make_reminder():
    return _make_reminder


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "data" / "reminders.json"


@pytest.fixture
def store(store_path):
    store = ReminderStore(store_path)
    store.load()
    return store


@pytest.fixture
def notifier():
    notifier = Mock()
    notifier.send = AsyncMock()
    return notifier


@pytest.fixture
def scheduler(store, notifier):
    return ReminderScheduler(store, notifier, WakeupQueue())
