from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogRecord:
    item_id: int
    icon_id: int
    rarity: int  # 1 common .. 4 relic, 7 aetherial
    name: str


class CatalogUnavailable(RuntimeError):
    """Raised by a catalog source when its game data is not loaded."""
