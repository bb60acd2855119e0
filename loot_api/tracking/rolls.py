from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Tuple

from loot_api.lootlog.models import ItemIdentity
from loot_api.lootlog.names import normalize_player_name

logger = logging.getLogger("lootview")


@dataclass
class RollSession:
    """One physical drop being rolled on. Open until a winner is set."""

    item_id: int
    icon_id: int
    rarity: int
    item_name: str
    rolls: Dict[str, Tuple[str, int]] = field(default_factory=dict)  # player -> (kind, value)
    winner: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_open(self) -> bool:
        return self.winner is None

    def matches(self, item: ItemIdentity) -> bool:
        # unresolved items share id 0; compare them by name
        if self.item_id or item.item_id:
            return self.item_id == item.item_id
        return self.item_name.strip().lower() == (item.name or "").strip().lower()

    def sorted_rolls(self) -> List[Tuple[str, str, int, bool]]:
        """(player, kind, value, is_winner), Need before Greed, then highest value first."""
        ordered = sorted(self.rolls.items(), key=lambda kv: (kv[1][0], kv[1][1]), reverse=True)
        return [(player, kind, value, player == self.winner) for player, (kind, value) in ordered]

    @staticmethod
    def is_local_roller(player: str, local_name: str) -> bool:
        """True when a recorded roller is the local player (the record may be truncated or suffixed)."""
        if not player or not local_name:
            return False
        p, n = player.lower(), local_name.lower()
        return p == n or p.startswith(n)

    def to_dict(self, local_name: str = "") -> dict:
        return {
            "item_id": self.item_id,
            "icon_id": self.icon_id,
            "rarity": self.rarity,
            "item_name": self.item_name,
            "winner": self.winner,
            "created_at": self.created_at.isoformat(),
            "rolls": [
                {"player": p, "kind": k, "value": v, "is_winner": w, "is_local": self.is_local_roller(p, local_name)}
                for p, k, v, w in self.sorted_rolls()
            ],
        }


def _find_roller(session: RollSession, acquired: str) -> Optional[str]:
    if acquired in session.rolls:
        return acquired

    low = acquired.lower()
    for player in session.rolls:
        if player.lower() == low:
            return player

    # display truncation: the recorded name starts with the acquiring name, never the reverse.
    # With two rollers sharing a prefix the first recorded one wins.
    for player in session.rolls:
        if player.lower().startswith(low):
            return player
    return None


class RollTracker:
    """Owns the roll-session collection. Every method runs under one lock."""

    def __init__(self) -> None:
        self._sessions: List[RollSession] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __iter__(self) -> Iterator[RollSession]:
        return iter(self.snapshot())

    def open_session(self, item: ItemIdentity) -> RollSession:
        session = RollSession(item.item_id, item.icon_id, item.rarity, item.name)
        with self._lock:
            self._sessions.append(session)
        logger.info("Roll session opened: %s (%d)", item.name, item.item_id)
        return copy.deepcopy(session)

    def record_roll(self, item: ItemIdentity, player: str, kind: str, value: int) -> None:
        player = normalize_player_name(player)
        with self._lock:
            session = next(
                (s for s in self._sessions if s.is_open and s.matches(item) and player not in s.rolls),
                None,
            )
            if session is None:
                logger.warning("Roll for %s without an open session; opening one", item.name)
                session = RollSession(item.item_id, item.icon_id, item.rarity, item.name)
                self._sessions.append(session)
            session.rolls[player] = (kind, int(value))

    def record_winner(self, item: ItemIdentity, acquired_by: str) -> Optional[Tuple[str, str, int]]:
        """Mark the first open session for the item won by `acquired_by`.

        Returns (winner, kind, value) of the matched roll, or None when no open
        session has a matching roller.
        """
        acquired = normalize_player_name(acquired_by)
        if not acquired:
            return None

        with self._lock:
            for session in self._sessions:
                if not (session.is_open and session.matches(item)):
                    continue
                winner = _find_roller(session, acquired)
                if winner is None:
                    continue
                session.winner = winner
                kind, value = session.rolls[winner]
                logger.info("Roll winner: %s won %s (%s %d)", winner, session.item_name, kind, value)
                return winner, kind, value
        return None

    def clear_completed(self) -> int:
        with self._lock:
            before = len(self._sessions)
            self._sessions = [s for s in self._sessions if s.is_open]
            return before - len(self._sessions)

    def clear_all(self) -> int:
        with self._lock:
            n = len(self._sessions)
            self._sessions = []
            return n

    def all_awarded(self) -> bool:
        with self._lock:
            return bool(self._sessions) and all(not s.is_open for s in self._sessions)

    def snapshot(self) -> List[RollSession]:
        with self._lock:
            return copy.deepcopy(self._sessions)
