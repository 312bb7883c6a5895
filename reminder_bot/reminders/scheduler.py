"""
提醒调度器

为每个有效提醒维护一个待触发的唤醒，到期时发送通知，
然后推进 (monthly/yearly) 或删除 (once) 提醒
"""

from datetime import datetime
from functools import partial
from typing import Iterable, Optional

from loguru import logger

from ..errors import PersistenceError, TransportError
from ..platforms.base import Notifier
from .models import Frequency, Reminder, next_occurrence
from .store import ReminderStore
from .timers import WakeupQueue


def render_notification(reminder: Reminder) -> str:
    """提醒通知文本"""
    return f"🔔 Reminder: {reminder.title}\n{reminder.description or ''}"


class ReminderScheduler:
    """提醒调度器

    调度器只持有提醒 ID，所有修改都通过 ReminderStore 完成，
    保证内存和文件一致。
    """

    def __init__(self, store: ReminderStore, notifier: Notifier,
                 wakeups: WakeupQueue = None):
        """
        Args:
            store: 提醒存储
            notifier: 通知发送器
            wakeups: 唤醒队列 (默认新建)
        """
        self.store = store
        self.notifier = notifier
        self.wakeups = wakeups or WakeupQueue()

    def arm(self, reminder: Reminder):
        """为提醒注册下一次唤醒 (替换旧的唤醒)"""
        self.wakeups.schedule(reminder.id, reminder.date, partial(self.fire, reminder.id))
        logger.debug(f"Armed reminder {reminder.id} for {reminder.date}")

    def arm_all(self, reminders: Iterable[Reminder] = None) -> int:
        """启动时为所有提醒注册唤醒

        Returns:
            注册的数量
        """
        if reminders is None:
            reminders = self.store.get_reminders()

        count = 0
        for reminder in reminders:
            self.arm(reminder)
            count += 1

        logger.info(f"Armed {count} reminders")
        return count

    def is_armed(self, reminder_id: str) -> bool:
        return self.wakeups.pending(reminder_id) is not None

    def next_wakeup(self, reminder_id: str) -> Optional[datetime]:
        return self.wakeups.pending(reminder_id)

    async def fire(self, reminder_id: str) -> Optional[Reminder]:
        """触发提醒

        1. 发送通知 (失败只记录日志)
        2. monthly/yearly: 基于上次时间推进并重新注册
        3. once: 删除

        Returns:
            推进后的提醒，一次性提醒或提醒不存在时返回 None
        """
        reminder = self.store.get_reminder(reminder_id)
        if reminder is None:
            logger.warning(f"Reminder {reminder_id} fired but no longer exists")
            return None

        logger.info(f"Firing reminder: {reminder.id} - {reminder.title}")

        try:
            await self.notifier.send(reminder.chat_id, render_notification(reminder))
        except TransportError as e:
            logger.error(f"Error sending reminder {reminder.id} to chat {reminder.chat_id}: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error sending reminder {reminder.id}: {e}")

        if reminder.frequency is Frequency.ONCE:
            try:
                self.store.remove_reminder(reminder.id)
            except PersistenceError as e:
                logger.error(f"Reminder {reminder.id} removed but not persisted: {e}")
            return None

        next_date = next_occurrence(reminder.date, reminder.frequency)
        try:
            self.store.update_date(reminder.id, next_date)
        except PersistenceError as e:
            logger.error(f"Reminder {reminder.id} advanced but not persisted: {e}")

        updated = self.store.get_reminder(reminder.id)
        if updated is None:
            return None

        self.arm(updated)
        logger.info(f"Rescheduled reminder: {updated.id} -> {updated.date}")
        return updated
