import pytest

from loot_api.catalog.models import CatalogRecord
from loot_api.catalog.source import InMemoryCatalog
from loot_api.lootlog.models import ActorContext


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def catalog():
    return InMemoryCatalog(
        items=[
            CatalogRecord(1, 65002, 1, "Gil"),
            CatalogRecord(2, 20001, 1, "Wind Shard"),
            CatalogRecord(3, 21001, 2, "Mythril Ore"),
            CatalogRecord(4, 45001, 3, "Demon Boots"),
            CatalogRecord(5, 21002, 1, "Mythril Ingot"),
            CatalogRecord(6, 25001, 1, "White Gatherer's Scrip"),
            CatalogRecord(7, 21003, 1, "Mythril Sand"),
            CatalogRecord(8, 29001, 1, "Sea Bass"),
            CatalogRecord(9, 26001, 1, "Potion"),
            CatalogRecord(10, 26002, 1, "Elixir"),
            CatalogRecord(11, 26003, 1, "Rock Salt"),
            CatalogRecord(12, 20002, 1, "Wind Crystal"),
            CatalogRecord(13, 26010, 4, "The Ultimate Weapon"),
            CatalogRecord(14, 26011, 1, "Savage Aim Materia VI"),
            CatalogRecord(15, 26012, 1, "Leaf"),
        ],
        event_items=[
            CatalogRecord(2000001, 26100, 1, "Moogle Token"),
        ],
    )


@pytest.fixture
def actor():
    return ActorContext(name="Alice Smith", account_id=4242, zone_id=132, zone_name="New Gridania")


@pytest.fixture
def clock():
    return FakeClock()
