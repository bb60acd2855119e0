from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict, Hashable, Optional

from loot_api.lootlog.models import LootEvent

logger = logging.getLogger("lootview")

DEFAULT_WINDOW_SECONDS = 0.5
DEFAULT_HORIZON_SECONDS = 3.0


class DedupWindow:
    """Suppresses repeat LootEvents that describe one physical pickup.

    Two different message shapes ("You obtain ..." and "... added to your
    inventory") can fire for the same item in the same game tick. Events
    sharing a dedupe key within `window` seconds are rejected; rejection does
    not refresh the entry. Entries older than `horizon` are purged on every
    call.
    """

    def __init__(
        self,
        window: float = DEFAULT_WINDOW_SECONDS,
        horizon: float = DEFAULT_HORIZON_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window = float(window)
        self.horizon = max(float(horizon), self.window)
        self._clock = clock
        self._seen: Dict[Hashable, float] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

    def accept(self, event: LootEvent, now: Optional[float] = None) -> bool:
        ts = self._clock() if now is None else float(now)
        key = event.dedupe_key()

        with self._lock:
            stale = [k for k, seen in self._seen.items() if ts - seen > self.horizon]
            for k in stale:
                del self._seen[k]

            last = self._seen.get(key)
            if last is not None and ts - last < self.window:
                logger.debug("Duplicate loot suppressed: %s x%d (%s)", event.item_name, event.quantity, event.player_name)
                return False

            self._seen[key] = ts
            return True

    def clear(self) -> None:
        with self._lock:
            self._seen.clear()
