"""
Reminder Bot 异常定义

- ValidationError: 用户输入错误，本地恢复
- TransportError: 消息发送失败
- PersistenceError: 读写存储文件失败
- StartupError: 启动失败，进程退出
"""


class ReminderBotError(Exception):
    """所有 Reminder Bot 异常的基类"""


class ValidationError(ReminderBotError):
    """提醒输入校验失败"""


class WrongFieldCount(ValidationError):
    """字段数量不是 5"""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"Expected 5 fields, got {count}")


class EmptyTitle(ValidationError):
    """标题为空"""

    def __init__(self):
        super().__init__("Title must not be empty")


class InvalidDate(ValidationError):
    """日期无法解析"""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid date format: {value!r}")


class InvalidFrequency(ValidationError):
    """不支持的重复频率"""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid frequency: {value!r}")


class InvalidCategory(ValidationError):
    """不支持的分类"""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid category: {value!r}")


class DuplicateReminder(ReminderBotError):
    """提醒 ID 已存在"""

    def __init__(self, reminder_id: str):
        self.reminder_id = reminder_id
        super().__init__(f"Reminder already exists: {reminder_id}")


class TransportError(ReminderBotError):
    """通知发送失败"""


class PersistenceError(ReminderBotError):
    """存储文件读写失败"""


class StartupError(ReminderBotError):
    """启动失败 (缺少配置、连接失败等)"""
