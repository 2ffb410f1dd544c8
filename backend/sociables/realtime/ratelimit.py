from __future__ import annotations

from threading import Lock
from typing import Callable

from ..game.service import now_ms


class CooldownLimiter:
    """Rejects a repeat of the same action from the same connection within
    ``cooldown_ms``. A cooldown of 0 lets everything through."""

    def __init__(self, cooldown_ms: int, clock: Callable[[], int] = now_ms) -> None:
        self.cooldown_ms = cooldown_ms
        self.clock = clock
        self._lock = Lock()
        self._last: dict[tuple[str, str], int] = {}

    def allow(self, sid: str, action: str) -> bool:
        if self.cooldown_ms <= 0:
            return True
        now = self.clock()
        with self._lock:
            last = self._last.get((sid, action))
            if last is not None and now - last < self.cooldown_ms:
                return False
            self._last[(sid, action)] = now
            return True

    def forget(self, sid: str) -> None:
        with self._lock:
            for key in [k for k in self._last if k[0] == sid]:
                del self._last[key]
