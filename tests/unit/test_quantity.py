from loot_api.lootlog.quantity import HQ_GLYPH, clean_text, extract_quantity


def test_bonus_quantity_is_summed():
    res = extract_quantity("54(+9) white gatherer's scrips.")
    assert res.quantity == 63
    assert res.item_name == "white gatherer's scrips"
    assert res.is_hq is False


def test_article_means_one():
    assert extract_quantity("a potion.").quantity == 1
    assert extract_quantity("a potion.").item_name == "potion"
    assert extract_quantity("an elixir.").item_name == "elixir"


def test_comma_grouped_number_with_unit():
    res = extract_quantity("1,200 pieces of mythril sand.")
    assert res.quantity == 1200
    assert res.item_name == "mythril sand"


def test_plain_number():
    res = extract_quantity("3 wind shards.")
    assert (res.quantity, res.item_name) == (3, "wind shards")


def test_unit_after_article_is_stripped():
    assert extract_quantity("a pinch of table salt.").item_name == "table salt"
    assert extract_quantity("a pair of Demon Boots.").item_name == "Demon Boots"


def test_bare_plural_unit():
    res = extract_quantity("chunks of rock salt.")
    assert (res.quantity, res.item_name) == (1, "rock salt")


def test_trailing_hq_marker():
    res = extract_quantity("Mythril Ingot HQ.")
    assert res.is_hq is True
    assert res.item_name == "Mythril Ingot"


def test_plural_container_names_are_singularized():
    assert extract_quantity("2 sacks of nuts.").item_name == "sack of nuts"


def test_quotes_are_stripped():
    assert extract_quantity('"Leaf".').item_name == "Leaf"


def test_degenerate_input_never_raises():
    assert extract_quantity("").quantity == 1
    assert extract_quantity("0 potions").quantity == 1
    assert extract_quantity(None).item_name == ""


def test_clean_text_converts_hq_glyph_and_drops_link_glyphs():
    assert clean_text(f"Mythril Ingot{HQ_GLYPH}") == "Mythril Ingot HQ"
    assert clean_text("\x02\x13abc\ue0bbdef") == "abcdef"
