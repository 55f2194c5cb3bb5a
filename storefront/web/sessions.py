"""
In-memory registry of mini-app sessions.

Sessions are kept in LRU order and dropped after ``idle_ttl`` seconds without
a request, or when more than ``max_size`` are open. An evicted session's
pending cart writes are drained before it is forgotten.
"""
from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from storefront.state import Storefront

logger = logging.getLogger(__name__)


@dataclass
class SessionEntry:
    session: Storefront
    last_seen: float = field(default_factory=time.monotonic)

    def is_idle(self, now: float, ttl: float) -> bool:
        return bool(ttl) and now - self.last_seen > ttl


class SessionStore:
    def __init__(
        self,
        max_size: int = 1000,
        idle_ttl: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: "OrderedDict[str, SessionEntry]" = OrderedDict()
        self.max_size = max_size
        self.idle_ttl = idle_ttl
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> Optional[Storefront]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        entry.last_seen = self._clock()
        self._entries.move_to_end(key)
        return entry.session

    async def put(self, key: str, session: Storefront) -> None:
        self._entries[key] = SessionEntry(session, last_seen=self._clock())
        self._entries.move_to_end(key)
        await self.evict()

    async def evict(self) -> int:
        now = self._clock()
        dropped: List[SessionEntry] = []
        for key in [k for k, e in self._entries.items() if e.is_idle(now, self.idle_ttl)]:
            dropped.append(self._entries.pop(key))
        while self.max_size and len(self._entries) > self.max_size:
            _, entry = self._entries.popitem(last=False)
            dropped.append(entry)
        for entry in dropped:
            await entry.session.writer.drain()
        if dropped:
            logger.info("Evicted %s sessions, %s open", len(dropped), len(self._entries))
        return len(dropped)

    async def close(self) -> None:
        entries = list(self._entries.values())
        self._entries.clear()
        for entry in entries:
            await entry.session.writer.drain()

    def clear(self) -> None:
        self._entries.clear()
