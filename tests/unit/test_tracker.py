import threading

import pytest

from loot_api.tracking.service import LootTracker


@pytest.fixture
def tracker(catalog, actor, clock):
    return LootTracker(catalog, lambda: actor, clock=clock)


def test_demon_boots_roll_scenario(tracker):
    assert tracker.process_line("A Demon Boots has been added to the loot list.") is None
    tracker.process_line("You roll Need on the Demon Boots. 87!")
    tracker.process_line("Bob Jones rolls Greed on the Demon Boots. 42!")
    ev = tracker.process_line("You obtain a pair of demon boots.")

    assert ev is not None
    assert ev.item_id == 4
    assert (ev.roll_kind, ev.roll_value) == ("Need", 87)

    (session,) = tracker.roll_sessions()
    assert session.winner == "Alice Smith"
    assert session.sorted_rolls()[0] == ("Alice Smith", "Need", 87, True)
    assert tracker.all_rolls_awarded() is True


def test_same_line_within_window_counts_once(tracker, clock):
    line = "Warrior of Light obtains a Mythril Ore."
    assert tracker.process_line(line) is not None
    clock.advance(0.1)
    assert tracker.process_line(line) is None
    clock.advance(0.5)
    assert tracker.process_line(line) is not None
    assert len(tracker.recent_events()) == 2


def test_recent_events_newest_first_and_capped(catalog, actor, clock):
    tracker = LootTracker(catalog, lambda: actor, max_recent=2, clock=clock)
    tracker.process_line("You obtain a potion.")
    tracker.process_line("You obtain an elixir.")
    tracker.process_line("You obtain 3 wind shards.")

    names = [e.item_name for e in tracker.recent_events()]
    assert names == ["Wind Shard", "Elixir"]


def test_snapshots_are_copies(tracker):
    tracker.process_line("You obtain a potion.")
    snap = tracker.recent_events()
    snap.clear()
    assert len(tracker.recent_events()) == 1


def test_listeners(tracker):
    loot, rolls = [], []
    tracker.subscribe_loot(loot.append)
    tracker.subscribe_rolls(lambda: rolls.append(1))

    tracker.process_line("A Demon Boots has been added to the loot list.")
    tracker.process_line("You roll Need on the Demon Boots. 87!")
    tracker.process_line("You obtain a pair of Demon Boots.")
    tracker.process_line("You obtain a potion.")

    assert [e.item_id for e in loot] == [4, 9]
    assert loot[0].roll_value == 87
    # opened, rolled, won
    assert len(rolls) == 3


def test_failing_listener_does_not_stop_others(tracker):
    seen = []

    def boom(ev):
        raise RuntimeError("listener broke")

    tracker.subscribe_loot(boom)
    tracker.subscribe_loot(seen.append)
    assert tracker.process_line("You obtain a potion.") is not None
    assert len(seen) == 1


def test_unsubscribe(tracker):
    seen = []
    tracker.subscribe_loot(seen.append)
    tracker.unsubscribe_loot(seen.append)
    tracker.unsubscribe_loot(seen.append)
    tracker.process_line("You obtain a potion.")
    assert seen == []


def test_missing_actor_drops_loot(catalog, clock):
    tracker = LootTracker(catalog, lambda: None, clock=clock)
    assert tracker.process_line("You obtain a potion.") is None
    assert tracker.recent_events() == []


def test_process_line_swallows_errors(tracker, monkeypatch):
    def broken(line, item_ref=None):
        raise ValueError("bad line")

    monkeypatch.setattr(tracker.classifier, "classify", broken)
    assert tracker.process_line("You obtain a potion.") is None


def test_admin_operations(tracker):
    tracker.process_line("You obtain a potion.")
    tracker.process_line("A Demon Boots has been added to the loot list.")
    tracker.process_line("A Demon Boots has been added to the loot list.")
    tracker.process_line("You roll Need on the Demon Boots. 87!")
    tracker.process_line("You obtain a pair of Demon Boots.")

    assert tracker.all_rolls_awarded() is False
    assert tracker.clear_completed_rolls() == 1
    assert len(tracker.roll_sessions()) == 1
    assert tracker.clear_all_rolls() == 1
    assert tracker.roll_sessions() == []

    assert tracker.clear_history() == 2
    assert tracker.recent_events() == []


def test_concurrent_ingest_and_snapshots(catalog, actor, caplog):
    # window long enough that every repeat of a key lands inside it regardless of scheduling
    tracker = LootTracker(catalog, lambda: actor, max_recent=25, dedup_window=60.0, dedup_horizon=120.0)
    lines = [f"You obtain {n} wind shards." for n in range(1, 41)]
    lines += ["A Demon Boots has been added to the loot list.", "You roll Need on the Demon Boots. 50!"]

    accepted, errors = [], []
    stop = threading.Event()

    def producer():
        try:
            for line in lines:
                ev = tracker.process_line(line)
                if ev is not None:
                    accepted.append(ev)
        except Exception as e:
            errors.append(e)

    def consumer():
        try:
            while not stop.is_set():
                assert len(tracker.recent_events()) <= 25
                for session in tracker.roll_sessions():
                    session.sorted_rolls()
                tracker.clear_all_rolls()
        except Exception as e:
            errors.append(e)

    watcher = threading.Thread(target=consumer)
    producers = [threading.Thread(target=producer) for _ in range(4)]
    watcher.start()
    for t in producers:
        t.start()
    for t in producers:
        t.join()
    stop.set()
    watcher.join()

    assert errors == []
    assert "Failed to process line" not in caplog.text
    assert sorted(ev.quantity for ev in accepted) == list(range(1, 41))
    assert len(tracker.recent_events()) == 25
