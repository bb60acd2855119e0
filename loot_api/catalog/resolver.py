from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from loot_api.catalog.models import CatalogRecord, CatalogUnavailable
from loot_api.catalog.source import CatalogSource

logger = logging.getLogger("lootview")


# -----------------
# Encoded id ranges
# -----------------

COLLECTIBLE_OFFSET = 500_000
HQ_OFFSET = 1_000_000
EVENT_ITEM_THRESHOLD = 2_000_000


@dataclass(frozen=True)
class DecodedId:
    item_id: int
    is_hq: bool = False
    is_collectible: bool = False
    is_event_item: bool = False


def decode_item_id(raw_id: int) -> DecodedId:
    raw = int(raw_id)
    if raw >= EVENT_ITEM_THRESHOLD:
        return DecodedId(raw % HQ_OFFSET, is_event_item=True)
    if raw >= HQ_OFFSET:
        return DecodedId(raw - HQ_OFFSET, is_hq=True)
    if raw >= COLLECTIBLE_OFFSET:
        return DecodedId(raw - COLLECTIBLE_OFFSET, is_collectible=True)
    return DecodedId(raw)


def encode_hq(item_id: int) -> int:
    return int(item_id) + HQ_OFFSET


# -----------------
# Singularization
# -----------------

# Order matters: the first singular form found in the catalog wins.
_SINGULAR_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("ies", ("y",)),
    ("ves", ("f", "fe")),
    ("ixes", ("ix",)),
    ("xes", ("x",)),
    ("ses", ("s",)),
    ("s", ("",)),
)


def singular_forms(name: str) -> List[str]:
    """Candidate singular spellings of a (possibly plural) item name, in rule order."""
    s = (name or "").strip()
    low = s.lower()
    out: List[str] = []
    for suffix, replacements in _SINGULAR_RULES:
        if len(s) <= len(suffix) or not low.endswith(suffix):
            continue
        for repl in replacements:
            cand = s[: -len(suffix)] + repl
            if cand and cand not in out:
                out.append(cand)
    return out


def toggle_the(name: str) -> str:
    s = (name or "").strip()
    if s.lower().startswith("the "):
        return s[4:].strip()
    return "the " + s


# -----------------
# Resolver
# -----------------


class ItemResolver:
    """Resolves raw ids and free-text names to catalog records.

    Name resolution walks a fixed chain of stages and commits to the first
    hit:
      1. exact name
      2. exact name with a leading "the " added or removed
      3. singular forms of the name
      4. exact event-item name, then its singular forms
      5. first primary item whose name contains the query

    Every method returns None when nothing matches or when the catalog is
    not available; callers keep their text-derived name in that case.
    """

    def __init__(self, source: CatalogSource) -> None:
        self._source = source
        self._stages: List[Tuple[str, Callable[[str], Optional[CatalogRecord]]]] = [
            ("exact", self._exact),
            ("the-toggle", self._the_toggle),
            ("singular", self._singular),
            ("event-item", self._event_item),
            ("substring", self._substring),
        ]

    @property
    def source(self) -> CatalogSource:
        return self._source

    def resolve_id(self, raw_id: int) -> Optional[CatalogRecord]:
        decoded = decode_item_id(raw_id)
        try:
            # event items live in their own sheet under the raw id
            if decoded.is_event_item:
                return self._source.lookup_event_item_by_id(int(raw_id))
            return self._source.lookup_by_id(decoded.item_id)
        except CatalogUnavailable as e:
            logger.warning("Catalog unavailable resolving id %s: %s", raw_id, e)
            return None

    def resolve_name(self, name: str) -> Optional[CatalogRecord]:
        query = " ".join((name or "").split())
        if not query:
            return None

        try:
            for stage, fn in self._stages:
                rec = fn(query)
                if rec is not None:
                    logger.debug("Resolved %r via %s -> %s (%d)", query, stage, rec.name, rec.item_id)
                    return rec
        except CatalogUnavailable as e:
            logger.warning("Catalog unavailable resolving %r: %s", query, e)
        return None

    # -----------------
    # Stages
    # -----------------

    def _exact(self, query: str) -> Optional[CatalogRecord]:
        return self._source.lookup_by_name(query)

    def _the_toggle(self, query: str) -> Optional[CatalogRecord]:
        return self._source.lookup_by_name(toggle_the(query))

    def _singular(self, query: str) -> Optional[CatalogRecord]:
        for cand in singular_forms(query):
            rec = self._source.lookup_by_name(cand)
            if rec is not None:
                return rec
        return None

    def _event_item(self, query: str) -> Optional[CatalogRecord]:
        rec = self._source.lookup_event_item_by_name(query)
        if rec is not None:
            return rec
        for cand in singular_forms(query):
            rec = self._source.lookup_event_item_by_name(cand)
            if rec is not None:
                return rec
        return None

    def _substring(self, query: str) -> Optional[CatalogRecord]:
        needle = query.lower()
        for rec in self._source.iter_items():
            if rec.name and needle in rec.name.lower():
                return rec
        return None
