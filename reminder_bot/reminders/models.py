"""
提醒数据模型

- Reminder 数据结构与序列化
- 聊天消息解析与校验
- 按月/按年的日历推进
"""

import calendar
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from ..errors import (
    EmptyTitle,
    InvalidCategory,
    InvalidDate,
    InvalidFrequency,
    WrongFieldCount,
)

FIELD_DELIMITER = "|"
FIELD_COUNT = 5


class Frequency(str, Enum):
    """重复频率"""
    ONCE = "once"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Category(str, Enum):
    """提醒分类 (仅用于展示)"""
    TASK = "task"
    BILL = "bill"


@dataclass
class Reminder:
    """提醒项"""
    id: str
    title: str
    date: datetime  # 下一次通知时间
    frequency: Frequency
    chat_id: int
    category: Category
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "date": self.date.isoformat(),
            "frequency": self.frequency.value,
            "chatId": self.chat_id,
            "category": self.category.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Reminder":
        return cls(
            id=str(data["id"]),
            title=data["title"],
            description=data.get("description") or "",
            date=parse_date(data["date"]),
            frequency=Frequency(data["frequency"]),
            chat_id=int(data["chatId"]),
            category=Category(data["category"]),
        )


def parse_date(text: str) -> datetime:
    """解析 ISO-8601 日期/时间

    支持 "2024-04-01", "2024-04-01 09:30", "2024-04-01T09:30:00Z"。
    带时区的时间会转换为本地时间 (naive)。

    Raises:
        InvalidDate: 无法解析
    """
    if not isinstance(text, str) or not text.strip():
        raise InvalidDate(str(text))

    try:
        result = datetime.fromisoformat(text.strip())
    except ValueError:
        raise InvalidDate(text) from None

    if result.tzinfo is not None:
        result = result.astimezone().replace(tzinfo=None)

    return result


def add_months(dt: datetime, months: int) -> datetime:
    """按日历加月，月末日期自动截断 (1月31日 -> 2月28/29日)"""
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1

    last_day = calendar.monthrange(year, month)[1]
    day = min(dt.day, last_day)

    return dt.replace(year=year, month=month, day=day)


def next_occurrence(dt: datetime, frequency: Frequency) -> Optional[datetime]:
    """计算下次提醒时间，基于上一次的提醒时间而不是当前时间

    Returns:
        下次时间，一次性提醒返回 None
    """
    if frequency is Frequency.MONTHLY:
        return add_months(dt, 1)
    elif frequency is Frequency.YEARLY:
        return add_months(dt, 12)
    return None


def split_reminder_message(text: str) -> Optional[List[str]]:
    """按分隔符拆分消息

    Returns:
        恰好 5 个字段时返回去除空白的字段列表，否则 None
    """
    if not text:
        return None

    parts = [part.strip() for part in text.split(FIELD_DELIMITER)]
    if len(parts) != FIELD_COUNT:
        return None
    return parts


def parse_reminder_input(fields: Sequence[str], chat_id: int) -> Reminder:
    """从用户输入创建提醒

    Args:
        fields: [title, description, date, frequency, category]
        chat_id: 目标聊天 ID

    Returns:
        新的 Reminder (分配新 ID)

    Raises:
        ValidationError 的子类
    """
    if len(fields) != FIELD_COUNT:
        raise WrongFieldCount(len(fields))

    title, description, date_str, frequency_str, category_str = (f.strip() for f in fields)

    if not title:
        raise EmptyTitle()

    date = parse_date(date_str)

    try:
        frequency = Frequency(frequency_str)
    except ValueError:
        raise InvalidFrequency(frequency_str) from None

    try:
        category = Category(category_str)
    except ValueError:
        raise InvalidCategory(category_str) from None

    return Reminder(
        id=str(uuid.uuid4()),
        title=title,
        description=description,
        date=date,
        frequency=frequency,
        chat_id=chat_id,
        category=category,
    )
