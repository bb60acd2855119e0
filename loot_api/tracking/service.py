from __future__ import annotations

import dataclasses
import logging
import threading
import time
from typing import Callable, List, Optional, Union

from loot_api.catalog.resolver import ItemResolver
from loot_api.catalog.source import CatalogSource
from loot_api.lootlog.classify import LootClassifier
from loot_api.lootlog.models import ActorContext, ItemRef, LootEvent, RollCast, RollListOpened
from loot_api.tracking.dedupe import DEFAULT_HORIZON_SECONDS, DEFAULT_WINDOW_SECONDS, DedupWindow
from loot_api.tracking.rolls import RollSession, RollTracker

logger = logging.getLogger("lootview")

LootListener = Callable[[LootEvent], None]
RollsListener = Callable[[], None]

DEFAULT_MAX_RECENT = 100


class LootTracker:
    """Thread-safe facade over classification, dedup and roll arbitration.

    `process_line` is called from the host's dispatch thread; snapshots and
    admin operations may be called from any other thread. The recent-events
    list, the roll sessions and the dedup map each sit behind their own lock.
    Listeners run after the locks are released.
    """

    def __init__(
        self,
        catalog: Union[CatalogSource, ItemResolver],
        actor_provider: Callable[[], Optional[ActorContext]],
        *,
        max_recent: int = DEFAULT_MAX_RECENT,
        dedup_window: float = DEFAULT_WINDOW_SECONDS,
        dedup_horizon: float = DEFAULT_HORIZON_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.resolver = catalog if isinstance(catalog, ItemResolver) else ItemResolver(catalog)
        self.classifier = LootClassifier(self.resolver, actor_provider)
        self.rolls = RollTracker()
        self.dedup = DedupWindow(dedup_window, dedup_horizon, clock=clock)
        self.max_recent = max(1, int(max_recent))

        self._recent: List[LootEvent] = []
        self._recent_lock = threading.Lock()

        self._listeners_lock = threading.Lock()
        self._loot_listeners: List[LootListener] = []
        self._rolls_listeners: List[RollsListener] = []

    # -----------------
    # Subscriptions
    # -----------------

    def subscribe_loot(self, fn: LootListener) -> None:
        with self._listeners_lock:
            self._loot_listeners.append(fn)

    def unsubscribe_loot(self, fn: LootListener) -> None:
        with self._listeners_lock:
            if fn in self._loot_listeners:
                self._loot_listeners.remove(fn)

    def subscribe_rolls(self, fn: RollsListener) -> None:
        with self._listeners_lock:
            self._rolls_listeners.append(fn)

    def unsubscribe_rolls(self, fn: RollsListener) -> None:
        with self._listeners_lock:
            if fn in self._rolls_listeners:
                self._rolls_listeners.remove(fn)

    def _notify_loot(self, event: LootEvent) -> None:
        with self._listeners_lock:
            listeners = list(self._loot_listeners)
        for fn in listeners:
            try:
                fn(event)
            except Exception:
                logger.exception("Loot listener failed")

    def _notify_rolls(self) -> None:
        with self._listeners_lock:
            listeners = list(self._rolls_listeners)
        for fn in listeners:
            try:
                fn()
            except Exception:
                logger.exception("Rolls listener failed")

    # -----------------
    # Ingest
    # -----------------

    def process_line(self, raw_line: str, item_ref: Optional[ItemRef] = None) -> Optional[LootEvent]:
        """Classify one chat line and apply it. Returns the accepted LootEvent, if any.

        Never raises: a line that blows up is logged and dropped.
        """
        try:
            return self._process(raw_line, item_ref)
        except Exception:
            logger.exception("Failed to process line: %r", raw_line)
            return None

    def _process(self, raw_line: str, item_ref: Optional[ItemRef]) -> Optional[LootEvent]:
        logger.debug("Chat line: %r", raw_line)
        result = self.classifier.classify(raw_line, item_ref)
        if result is None:
            return None

        rolls_changed = False
        roll = result.roll
        if isinstance(roll, RollListOpened):
            self.rolls.open_session(roll.item)
            rolls_changed = True
        elif isinstance(roll, RollCast):
            self.rolls.record_roll(roll.item, roll.player, roll.kind, roll.value)
            rolls_changed = True

        event = result.loot
        accepted: Optional[LootEvent] = None
        if event is not None and self.dedup.accept(event):
            won = self.rolls.record_winner(event.identity, event.player_name)
            if won is not None:
                _, kind, value = won
                event = dataclasses.replace(event, roll_kind=kind, roll_value=value)
                rolls_changed = True

            with self._recent_lock:
                self._recent.insert(0, event)
                del self._recent[self.max_recent :]
            accepted = event

            logger.info("Loot tracked: %s x%d%s", event.item_name, event.quantity, " [HQ]" if event.is_hq else "")

        if accepted is not None:
            self._notify_loot(accepted)
        if rolls_changed:
            self._notify_rolls()
        return accepted

    # -----------------
    # Reads
    # -----------------

    def recent_events(self) -> List[LootEvent]:
        with self._recent_lock:
            return list(self._recent)

    def roll_sessions(self) -> List[RollSession]:
        return self.rolls.snapshot()

    def all_rolls_awarded(self) -> bool:
        return self.rolls.all_awarded()

    # -----------------
    # Admin
    # -----------------

    def clear_history(self) -> int:
        with self._recent_lock:
            n = len(self._recent)
            self._recent = []
        logger.info("Cleared %d recent loot events.", n)
        return n

    def clear_completed_rolls(self) -> int:
        n = self.rolls.clear_completed()
        logger.info("Cleared %d completed roll sessions.", n)
        self._notify_rolls()
        return n

    def clear_all_rolls(self) -> int:
        n = self.rolls.clear_all()
        logger.info("Cleared %d roll sessions.", n)
        self._notify_rolls()
        return n
