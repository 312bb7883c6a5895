"""
提醒存储

整个提醒集合保存在一个 JSON 文件中，每次修改后同步写回
"""

import json
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

from loguru import logger

from ..errors import DuplicateReminder, PersistenceError, ValidationError
from .models import Reminder

RESET_TO_EMPTY = "reset_to_empty"
RAISE = "raise"


class ReminderStore:
    """提醒存储

    所有 "修改 + 保存" 都在同一把锁内完成，避免两个提醒同时触发时丢失更新。
    """

    def __init__(self, path: Union[str, Path] = "reminders.json",
                 on_corrupt_store: str = RESET_TO_EMPTY):
        """
        Args:
            path: JSON 文件路径
            on_corrupt_store: 文件损坏时的策略 ("reset_to_empty" | "raise")
        """
        if on_corrupt_store not in (RESET_TO_EMPTY, RAISE):
            raise ValueError(f"Unknown on_corrupt_store policy: {on_corrupt_store}")

        self.path = Path(path)
        self.on_corrupt_store = on_corrupt_store
        self._reminders: List[Reminder] = []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._reminders)

    def load(self):
        """加载提醒数据

        文件不存在时使用空集合；文件损坏时按 on_corrupt_store 处理
        """
        with self._lock:
            if not self.path.exists():
                self._reminders = []
                logger.info(f"No reminder store at {self.path}, starting empty")
                return

            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                reminders = [Reminder.from_dict(item) for item in data["reminders"]]
            except (OSError, ValueError, KeyError, TypeError, ValidationError) as e:
                if self.on_corrupt_store == RAISE:
                    raise PersistenceError(f"Failed to load reminders from {self.path}: {e}") from e
                logger.warning(f"Failed to load reminders from {self.path}, starting empty: {e}")
                self._reminders = []
                return

            seen = set()
            self._reminders = []
            for reminder in reminders:
                if reminder.id in seen:
                    logger.warning(f"Skipping duplicate reminder id in store: {reminder.id}")
                    continue
                seen.add(reminder.id)
                self._reminders.append(reminder)

            logger.info(f"Loaded {len(self._reminders)} reminders")

    def save(self):
        """保存提醒数据 (整体覆盖)

        Raises:
            PersistenceError: 写入失败
        """
        with self._lock:
            data = {"reminders": [r.to_dict() for r in self._reminders]}
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
            except OSError as e:
                logger.error(f"Failed to save reminders: {e}")
                raise PersistenceError(f"Failed to save reminders to {self.path}: {e}") from e

    def add_reminder(self, reminder: Reminder):
        """添加提醒并保存"""
        with self._lock:
            if any(r.id == reminder.id for r in self._reminders):
                raise DuplicateReminder(reminder.id)

            self._reminders.append(reminder)
            logger.info(f"Reminder added: {reminder.id} at {reminder.date}")
            self.save()

    def remove_reminder(self, reminder_id: str) -> bool:
        """删除提醒并保存

        Returns:
            是否找到并删除
        """
        with self._lock:
            remaining = [r for r in self._reminders if r.id != reminder_id]
            if len(remaining) == len(self._reminders):
                return False

            self._reminders = remaining
            logger.info(f"Reminder removed: {reminder_id}")
            self.save()
            return True

    def update_date(self, reminder_id: str, date: datetime) -> Optional[Reminder]:
        """更新提醒时间并保存

        Returns:
            更新后的提醒，不存在时返回 None
        """
        with self._lock:
            reminder = self.get_reminder(reminder_id)
            if reminder is None:
                return None

            reminder.date = date
            self.save()
            return reminder

    def get_reminder(self, reminder_id: str) -> Optional[Reminder]:
        for reminder in self._reminders:
            if reminder.id == reminder_id:
                return reminder
        return None

    def get_reminders(self) -> List[Reminder]:
        """全部提醒 (插入顺序)"""
        return list(self._reminders)

    def get_reminders_by_chat(self, chat_id: int) -> List[Reminder]:
        """指定聊天的提醒 (插入顺序)"""
        return [r for r in self._reminders if r.chat_id == chat_id]

    def stats(self) -> Dict[str, int]:
        """按频率统计"""
        counts: Dict[str, int] = {}
        for reminder in self._reminders:
            counts[reminder.frequency.value] = counts.get(reminder.frequency.value, 0) + 1
        return counts
