#!/usr/bin/env python3
"""
Progress reporting for automation sessions.

Design goals:
- Fire-and-forget: the engine emits events and never looks at the result.
- Isolation: a failing subscriber is logged and dropped from that delivery,
  it can never break a session.
- Both push (subscriber callbacks, sync or async) and pull (asyncio.Queue
  channels) consumers.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional, Set

logger = logging.getLogger(__name__)

# Most recent events kept per reporter; subscribers see every event.
HISTORY_LIMIT = 500


class EventKind(str, Enum):
    STATUS = "status"
    JOB_FOUND = "job_found"
    JOB_APPLIED = "job_applied"
    ERROR = "error"
    COMPLETE = "complete"


@dataclass(frozen=True)
class ProgressEvent:
    kind: EventKind
    owner_id: str
    payload: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "owner_id": self.owner_id,
            "timestamp": self.timestamp.isoformat(),
            **self.payload,
        }


Subscriber = Callable[[ProgressEvent], Any]


class ProgressReporter:
    """
    Emits progress events for one owner.

    Subscribers are called in registration order with each ProgressEvent.
    Coroutine results are scheduled as tasks; await drain() to flush them.
    """

    def __init__(self, owner_id: str, subscribers: Optional[List[Subscriber]] = None,
                 history_limit: int = HISTORY_LIMIT):
        self.owner_id = owner_id
        self._subscribers: List[Subscriber] = list(subscribers or [])
        self._channels: List[asyncio.Queue] = []
        self._pending: Set[asyncio.Task] = set()
        self.history: Deque[ProgressEvent] = deque(maxlen=history_limit)

    def subscribe(self, callback: Subscriber):
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber):
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def channel(self, maxsize: int = 0) -> asyncio.Queue:
        """Queue receiving every event emitted from now on."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._channels.append(queue)
        return queue

    # ============== Event API ==============

    def status_update(self, message: str, status: Optional[str] = None,
                      counters: Optional[Dict[str, int]] = None):
        payload: Dict[str, Any] = {"message": message}
        if status is not None:
            payload["status"] = status
        if counters:
            payload.update(counters)
        self.emit(EventKind.STATUS, payload)

    def job_found(self, title: str, company: str):
        self.emit(EventKind.JOB_FOUND, {"title": title, "company": company})

    def job_applied(self, attempt):
        self.emit(EventKind.JOB_APPLIED, attempt.to_dict())

    def error(self, message: str):
        self.emit(EventKind.ERROR, {"message": message})

    def complete(self, summary):
        self.emit(EventKind.COMPLETE, summary.to_dict())

    # ============== Delivery ==============

    def emit(self, kind: EventKind, payload: Dict[str, Any]):
        event = ProgressEvent(kind=kind, owner_id=self.owner_id, payload=payload)
        self.history.append(event)

        for queue in self._channels:
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(f"Progress channel full for {self.owner_id}, dropping {kind.value} event")

        for callback in list(self._subscribers):
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    self._schedule(result)
            except Exception as e:
                logger.warning(f"Progress subscriber failed on {kind.value}: {e}")

    def _schedule(self, awaitable):
        try:
            task = asyncio.ensure_future(awaitable)
        except RuntimeError as e:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            logger.warning(f"Cannot schedule async subscriber outside an event loop: {e}")
            return
        self._pending.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task):
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(f"Async progress subscriber failed: {exc}")

    async def drain(self):
        """Wait for every scheduled async subscriber to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def last(self, kind: EventKind) -> Optional[ProgressEvent]:
        for event in reversed(self.history):
            if event.kind == kind:
                return event
        return None
