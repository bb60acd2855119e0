from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Protocol

from loot_api.catalog.models import CatalogRecord, CatalogUnavailable

logger = logging.getLogger("lootview")


class CatalogSource(Protocol):
    """Read-only item lookup capability supplied by the host."""

    def lookup_by_id(self, item_id: int) -> Optional[CatalogRecord]:
        ...

    def lookup_event_item_by_id(self, item_id: int) -> Optional[CatalogRecord]:
        """Event-item record by its raw (>= 2 000 000) id."""
        ...

    def lookup_by_name(self, name: str) -> Optional[CatalogRecord]:
        """Exact, case-insensitive name match against the primary catalog."""
        ...

    def lookup_event_item_by_name(self, name: str) -> Optional[CatalogRecord]:
        """Exact, case-insensitive name match against the event-item catalog."""
        ...

    def iter_items(self) -> Iterable[CatalogRecord]:
        """All primary catalog records, in catalog order."""
        ...


def _key(name: str) -> str:
    return " ".join((name or "").split()).lower()


class InMemoryCatalog:
    """Dict-backed CatalogSource used by the API service and tests."""

    def __init__(
        self,
        items: Iterable[CatalogRecord] = (),
        event_items: Iterable[CatalogRecord] = (),
        *,
        loaded: bool = True,
    ) -> None:
        self._items: List[CatalogRecord] = list(items)
        self._by_id: Dict[int, CatalogRecord] = {}
        self._by_name: Dict[str, CatalogRecord] = {}
        self._event_by_id: Dict[int, CatalogRecord] = {}
        self._event_by_name: Dict[str, CatalogRecord] = {}
        self._loaded = loaded

        for rec in self._items:
            self._by_id.setdefault(rec.item_id, rec)
            if rec.name:
                self._by_name.setdefault(_key(rec.name), rec)
        for rec in event_items:
            self._event_by_id.setdefault(rec.item_id, rec)
            if rec.name:
                self._event_by_name.setdefault(_key(rec.name), rec)

    def __len__(self) -> int:
        return len(self._items)

    def _check_loaded(self) -> None:
        if not self._loaded:
            raise CatalogUnavailable("item catalog not loaded")

    def lookup_by_id(self, item_id: int) -> Optional[CatalogRecord]:
        self._check_loaded()
        return self._by_id.get(int(item_id))

    def lookup_event_item_by_id(self, item_id: int) -> Optional[CatalogRecord]:
        self._check_loaded()
        return self._event_by_id.get(int(item_id))

    def lookup_by_name(self, name: str) -> Optional[CatalogRecord]:
        self._check_loaded()
        return self._by_name.get(_key(name))

    def lookup_event_item_by_name(self, name: str) -> Optional[CatalogRecord]:
        self._check_loaded()
        return self._event_by_name.get(_key(name))

    def iter_items(self) -> Iterator[CatalogRecord]:
        self._check_loaded()
        return iter(self._items)

    # -----------------
    # Loading
    # -----------------

    @staticmethod
    def _records(rows: Any) -> List[CatalogRecord]:
        out: List[CatalogRecord] = []
        for row in rows or []:
            try:
                out.append(
                    CatalogRecord(
                        item_id=int(row["id"]),
                        icon_id=int(row.get("icon", 0) or 0),
                        rarity=int(row.get("rarity", 0) or 0),
                        name=str(row.get("name") or ""),
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed catalog row: %r", row)
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryCatalog":
        """{"items": [{"id", "icon", "rarity", "name"}, ...], "event_items": [...]}"""
        return cls(cls._records(data.get("items")), cls._records(data.get("event_items")))

    @classmethod
    def from_json_file(cls, path: str) -> "InMemoryCatalog":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        catalog = cls.from_dict(data)
        logger.info("Loaded item catalog from %s (%d items).", path, len(catalog))
        return catalog
