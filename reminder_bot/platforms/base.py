"""
通知发送接口

调度器和命令层只依赖这个接口，不直接依赖具体聊天平台
"""

from abc import ABC, abstractmethod


class Notifier(ABC):
    """向聊天发送文本消息"""

    @abstractmethod
    async def send(self, chat_id: int, text: str) -> None:
        """发送消息

        Raises:
            TransportError: 发送失败
        """
        pass
