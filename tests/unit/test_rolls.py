from loot_api.lootlog.models import ItemIdentity
from loot_api.tracking.rolls import RollSession, RollTracker

BOOTS = ItemIdentity(4, 45001, 3, "Demon Boots")


def test_exact_winner():
    rolls = RollTracker()
    rolls.open_session(BOOTS)
    rolls.record_roll(BOOTS, "Alice", "Need", 95)
    rolls.record_roll(BOOTS, "Bob", "Greed", 40)

    assert rolls.record_winner(BOOTS, "Alice") == ("Alice", "Need", 95)
    assert rolls.snapshot()[0].winner == "Alice"


def test_truncated_name_matches_by_prefix():
    rolls = RollTracker()
    rolls.open_session(BOOTS)
    rolls.record_roll(BOOTS, "Alice", "Need", 95)

    assert rolls.record_winner(BOOTS, "Ali") == ("Alice", "Need", 95)


def test_prefix_direction_matters():
    rolls = RollTracker()
    rolls.open_session(BOOTS)
    rolls.record_roll(BOOTS, "Ali", "Need", 95)

    assert rolls.record_winner(BOOTS, "Alice") is None
    assert rolls.snapshot()[0].is_open


def test_concurrent_sessions_for_same_item():
    rolls = RollTracker()
    rolls.open_session(BOOTS)
    rolls.open_session(BOOTS)
    rolls.record_roll(BOOTS, "Alice", "Need", 95)
    rolls.record_roll(BOOTS, "Alice", "Need", 12)

    first, second = rolls.snapshot()
    assert first.rolls["Alice"] == ("Need", 95)
    assert second.rolls["Alice"] == ("Need", 12)

    rolls.record_winner(BOOTS, "Alice")
    first, second = rolls.snapshot()
    assert first.winner == "Alice"
    assert second.winner is None

    assert rolls.record_winner(BOOTS, "Alice") == ("Alice", "Need", 12)


def test_roll_without_session_opens_one(caplog):
    rolls = RollTracker()
    rolls.record_roll(BOOTS, "Bob", "Greed", 40)
    assert len(rolls) == 1
    assert "without an open session" in caplog.text


def test_won_session_is_not_modified():
    rolls = RollTracker()
    rolls.open_session(BOOTS)
    rolls.record_roll(BOOTS, "Alice", "Need", 95)
    rolls.record_winner(BOOTS, "Alice")
    rolls.record_roll(BOOTS, "Bob", "Greed", 40)

    won, fresh = rolls.snapshot()
    assert list(won.rolls) == ["Alice"]
    assert fresh.rolls == {"Bob": ("Greed", 40)}


def test_roll_player_names_are_normalized():
    rolls = RollTracker()
    rolls.open_session(BOOTS)
    rolls.record_roll(BOOTS, "Bob JonesGilgamesh", "Greed", 40)
    assert list(rolls.snapshot()[0].rolls) == ["Bob Jones"]


def test_unresolved_items_match_by_name():
    rolls = RollTracker()
    rolls.open_session(ItemIdentity(0, 0, 0, "Demon Boots"))
    rolls.record_roll(ItemIdentity(0, 0, 0, "demon boots"), "Alice", "Need", 50)
    assert len(rolls) == 1
    assert rolls.record_winner(ItemIdentity(0, 0, 0, "Other Thing"), "Alice") is None


def test_sorted_rolls_need_before_greed():
    session = RollSession(4, 0, 3, "Demon Boots")
    session.rolls = {"A": ("Need", 20), "B": ("Greed", 99), "C": ("Need", 95)}
    session.winner = "C"
    assert session.sorted_rolls() == [
        ("C", "Need", 95, True),
        ("A", "Need", 20, False),
        ("B", "Greed", 99, False),
    ]


def test_is_local_roller():
    assert RollSession.is_local_roller("Alice Smith", "alice smith")
    assert RollSession.is_local_roller("Alice Smith", "Alice")
    assert not RollSession.is_local_roller("Bob Jones", "Alice")
    assert not RollSession.is_local_roller("Alice", "")


def test_clear_operations_and_all_awarded():
    rolls = RollTracker()
    assert rolls.all_awarded() is False

    rolls.open_session(BOOTS)
    rolls.record_roll(BOOTS, "Alice", "Need", 95)
    rolls.record_winner(BOOTS, "Alice")
    assert rolls.all_awarded() is True

    rolls.open_session(BOOTS)
    assert rolls.all_awarded() is False

    assert rolls.clear_completed() == 1
    assert len(rolls) == 1
    assert rolls.clear_all() == 1
    assert len(rolls) == 0


def test_snapshot_is_a_copy():
    rolls = RollTracker()
    rolls.open_session(BOOTS)
    snap = rolls.snapshot()
    snap[0].rolls["Mallory"] = ("Need", 99)
    snap.clear()
    assert len(rolls) == 1
    assert rolls.snapshot()[0].rolls == {}
