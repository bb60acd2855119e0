from loot_api.lootlog.models import LootEvent, LootSource
from loot_api.tracking.dedupe import DedupWindow


def _event(item_id=3, name="Mythril Ore", player="Alice Smith", quantity=1, hq=False):
    return LootEvent(
        item_id=item_id,
        icon_id=0,
        rarity=1,
        item_name=name,
        quantity=quantity,
        is_hq=hq,
        player_name=player,
        player_account_id=0,
        is_own_loot=False,
        source=LootSource.UNKNOWN,
        zone_id=0,
        zone_name="",
    )


def test_repeat_within_window_is_rejected(clock):
    dedup = DedupWindow(clock=clock)
    assert dedup.accept(_event()) is True
    clock.advance(0.1)
    assert dedup.accept(_event()) is False


def test_rejection_does_not_refresh_entry(clock):
    dedup = DedupWindow(clock=clock)
    assert dedup.accept(_event()) is True
    clock.advance(0.4)
    assert dedup.accept(_event()) is False
    clock.advance(0.2)
    # 600 ms since the accepted one
    assert dedup.accept(_event()) is True


def test_key_fields_distinguish_events(clock):
    dedup = DedupWindow(clock=clock)
    assert dedup.accept(_event()) is True
    assert dedup.accept(_event(quantity=2)) is True
    assert dedup.accept(_event(hq=True)) is True
    assert dedup.accept(_event(player="Bob Jones")) is True
    assert dedup.accept(_event(item_id=4)) is True


def test_unresolved_items_dedupe_by_name(clock):
    dedup = DedupWindow(clock=clock)
    assert dedup.accept(_event(item_id=0, name="Glimmering Widget")) is True
    assert dedup.accept(_event(item_id=0, name="Dull Widget")) is True
    assert dedup.accept(_event(item_id=0, name="glimmering widget")) is False


def test_old_entries_are_purged(clock):
    dedup = DedupWindow(clock=clock)
    dedup.accept(_event(item_id=3))
    dedup.accept(_event(item_id=4))
    clock.advance(4.0)
    dedup.accept(_event(item_id=5))
    assert len(dedup) == 1
