from .dedupe import DedupWindow
from .rolls import RollSession, RollTracker
from .service import LootTracker

__all__ = [
    "DedupWindow",
    "RollSession",
    "RollTracker",
    "LootTracker",
]
