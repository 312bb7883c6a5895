"""
平台适配器
"""

from .base import Notifier

__all__ = ["Notifier"]
