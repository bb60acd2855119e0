from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union


class LootSource(str, Enum):
    UNKNOWN = "unknown"
    MONSTER = "monster"
    CHEST = "chest"
    GATHERING = "gathering"
    QUEST = "quest"
    CRAFTING = "crafting"
    PURCHASE = "purchase"
    EXTRACTION = "extraction"
    EXCHANGE = "exchange"
    DUTY_ROULETTE_BONUS = "duty_roulette_bonus"
    OTHER = "other"


ROLL_NEED = "Need"
ROLL_GREED = "Greed"


@dataclass(frozen=True)
class ActorContext:
    """Local player identity as supplied by the host."""

    name: str
    account_id: int = 0
    zone_id: int = 0
    zone_name: str = ""

    @property
    def display_zone(self) -> str:
        return self.zone_name or f"Zone {self.zone_id}"


@dataclass(frozen=True)
class ItemRef:
    """Authoritative item link attached to a chat line by the host."""

    item_id: int
    name: str = ""


@dataclass(frozen=True)
class ItemIdentity:
    item_id: int
    icon_id: int
    rarity: int
    name: str

    @property
    def resolved(self) -> bool:
        return self.item_id > 0


def _new_event_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class LootEvent:
    item_id: int
    icon_id: int
    rarity: int
    item_name: str
    quantity: int
    is_hq: bool
    player_name: str
    player_account_id: int  # 0 unless the local actor
    is_own_loot: bool
    source: LootSource
    zone_id: int
    zone_name: str

    roll_kind: Optional[str] = None  # Need | Greed
    roll_value: Optional[int] = None

    raw_line: str = ""
    created_at: datetime = field(default_factory=datetime.now)

    # unique per process; consumers use it to fire one-shot effects exactly once
    event_id: str = field(default_factory=_new_event_id)

    @property
    def identity(self) -> ItemIdentity:
        return ItemIdentity(self.item_id, self.icon_id, self.rarity, self.item_name)

    def dedupe_key(self) -> tuple:
        # unresolved items all share id 0; fall back to the name so they don't collapse together
        item_key: Union[int, str] = self.item_id or self.item_name.strip().lower()
        return (item_key, self.player_name, int(self.quantity), bool(self.is_hq))

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "item_id": self.item_id,
            "icon_id": self.icon_id,
            "rarity": self.rarity,
            "item_name": self.item_name,
            "quantity": self.quantity,
            "is_hq": self.is_hq,
            "player_name": self.player_name,
            "player_account_id": self.player_account_id,
            "is_own_loot": self.is_own_loot,
            "source": self.source.value,
            "zone_id": self.zone_id,
            "zone_name": self.zone_name,
            "roll_kind": self.roll_kind,
            "roll_value": self.roll_value,
            "created_at": self.created_at.isoformat(),
        }


# Roll-session updates produced by the classifier


@dataclass(frozen=True)
class RollListOpened:
    item: ItemIdentity


@dataclass(frozen=True)
class RollCast:
    item: ItemIdentity
    player: str
    kind: str  # Need | Greed
    value: int


RollUpdate = Union[RollListOpened, RollCast]


@dataclass(frozen=True)
class Classification:
    category: str
    loot: Optional[LootEvent] = None
    roll: Optional[RollUpdate] = None
