from .models import (
    ActorContext,
    Classification,
    ItemIdentity,
    ItemRef,
    LootEvent,
    LootSource,
    RollCast,
    RollListOpened,
)
from .quantity import QuantityResult, extract_quantity
from .names import normalize_player_name
from .classify import LootClassifier, match_shape

__all__ = [
    "ActorContext",
    "Classification",
    "ItemIdentity",
    "ItemRef",
    "LootEvent",
    "LootSource",
    "RollCast",
    "RollListOpened",
    "QuantityResult",
    "extract_quantity",
    "normalize_player_name",
    "LootClassifier",
    "match_shape",
]
