"""
单次唤醒队列

按时间排序的最小堆 + 单个调度循环。每个 key 最多只有一个待触发的唤醒，
重复 schedule 同一个 key 会替换之前的唤醒。
"""

import asyncio
import heapq
import itertools
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional, Set, Tuple

from loguru import logger

WakeupCallback = Callable[[], Awaitable[None]]


class WakeupQueue:
    """单次唤醒调度器"""

    def __init__(self, clock: Callable[[], datetime] = datetime.now,
                 max_sleep: float = 60.0):
        """
        Args:
            clock: 当前时间函数
            max_sleep: 调度循环单次最长等待秒数
        """
        self._clock = clock
        self._max_sleep = max_sleep
        self._heap: List[Tuple[datetime, int, str]] = []
        self._entries: Dict[str, Tuple[datetime, int, WakeupCallback]] = {}
        self._counter = itertools.count()
        self._changed: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()
        self._running = False

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def is_running(self) -> bool:
        return self._running and self._task is not None

    def schedule(self, key: str, when: datetime, callback: WakeupCallback):
        """注册单次唤醒 (替换同 key 的旧唤醒)"""
        seq = next(self._counter)
        self._entries[key] = (when, seq, callback)
        heapq.heappush(self._heap, (when, seq, key))
        self._notify()

    def pending(self, key: str) -> Optional[datetime]:
        """获取 key 的下次唤醒时间"""
        entry = self._entries.get(key)
        return entry[0] if entry else None

    def next_due(self) -> Optional[datetime]:
        """最早的唤醒时间"""
        self._discard_stale()
        return self._heap[0][0] if self._heap else None

    def pop_due(self, now: datetime = None) -> List[WakeupCallback]:
        """取出所有已到期的回调 (按时间先后)"""
        now = now or self._clock()
        due = []

        while self._heap:
            self._discard_stale()
            if not self._heap or self._heap[0][0] > now:
                break
            _, _, key = heapq.heappop(self._heap)
            _, _, callback = self._entries.pop(key)
            due.append(callback)

        return due

    async def run_due(self, now: datetime = None) -> int:
        """依次执行所有已到期的回调

        Returns:
            执行的回调数量
        """
        callbacks = self.pop_due(now)
        for callback in callbacks:
            await callback()
        return len(callbacks)

    def start(self):
        """启动调度循环"""
        if not self._running:
            self._running = True
            self._changed = asyncio.Event()
            self._task = asyncio.create_task(self._loop())
            logger.info("Wakeup queue started")

    async def stop(self):
        """停止调度循环，等待正在执行的回调结束"""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)
        logger.info("Wakeup queue stopped")

    def _notify(self):
        if self._changed is not None:
            self._changed.set()

    def _discard_stale(self):
        """丢弃已被替换的堆项"""
        while self._heap:
            when, seq, key = self._heap[0]
            entry = self._entries.get(key)
            if entry is not None and entry[1] == seq:
                return
            heapq.heappop(self._heap)

    async def _loop(self):
        """调度循环"""
        while self._running:
            try:
                for callback in self.pop_due():
                    task = asyncio.create_task(self._run(callback))
                    self._inflight.add(task)
                    task.add_done_callback(self._inflight.discard)

                next_time = self.next_due()
                if next_time is None:
                    wait_seconds = self._max_sleep
                else:
                    wait_seconds = (next_time - self._clock()).total_seconds()
                    wait_seconds = max(0.0, min(wait_seconds, self._max_sleep))

                self._changed.clear()
                try:
                    await asyncio.wait_for(self._changed.wait(), timeout=wait_seconds)
                except asyncio.TimeoutError:
                    pass

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Wakeup loop error: {e}")
                await asyncio.sleep(1)

    async def _run(self, callback: WakeupCallback):
        try:
            await callback()
        except Exception as e:
            logger.exception(f"Wakeup callback error: {e}")
