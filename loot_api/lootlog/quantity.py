from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import regex as re


# Client glyph rendered after HQ item names (private-use area).
HQ_GLYPH = "\ue03c"


# -----------------
# Helpers
# -----------------


def norm_spaces(s: str) -> str:
    return re.sub(r"\s+", " ", (s or "").strip())


def strip_trailing_punct(s: str) -> str:
    return re.sub(r"[.!:,;\s]+$", "", (s or "").strip()).strip()


def clean_text(s: str) -> str:
    """Drop control characters and link glyphs the client embeds in chat text.

    The HQ glyph is turned into a textual " HQ" marker first so HQ detection
    still sees it after the private-use range is stripped.
    """
    s = (s or "").replace(HQ_GLYPH, " HQ")
    s = "".join(ch for ch in s if " " <= ch < "\ue000")
    return norm_spaces(s)


# -----------------
# Patterns
# -----------------

_UNIT_WORDS: Tuple[str, ...] = (
    "chunk",
    "pinch",
    "bottle",
    "piece",
    "phial",
    "stalk",
    "set",
    "bundle",
    "pot",
    "coil",
    "plank",
    "length",
    "stack",
    "bolt",
    "loop",
    "pair",
    "handful",
)


def _plural(word: str) -> str:
    return word + "es" if word.endswith(("ch", "sh", "s", "x")) else word + "s"


_UNIT_ANY = "|".join(f"{w}|{_plural(w)}" for w in _UNIT_WORDS)
_UNIT_PLURAL = "|".join(_plural(w) for w in _UNIT_WORDS)

RX_BONUS_QTY = re.compile(r"^(?P<base>\d[\d,]*)\s*\(\s*\+\s*(?P<bonus>\d[\d,]*)\s*\)\s*(?P<rest>.*)$")
RX_GROUPED_QTY = re.compile(r"^(?P<qty>\d{1,3}(?:,\d{3})+)\s+(?P<rest>.+)$")
RX_PLAIN_QTY = re.compile(r"^(?P<qty>\d+)\s+(?P<rest>.+)$")
RX_ARTICLE = re.compile(r"^an?\s+(?P<rest>.+)$", re.I)
RX_UNIT_PHRASE = re.compile(rf"^(?:{_UNIT_ANY})\s+of\s+", re.I)
RX_BARE_UNIT = re.compile(rf"^(?:{_UNIT_PLURAL})\s+(?:of\s+)?(?P<rest>.+)$", re.I)

RX_TRAILING_HQ = re.compile(r"\s+HQ$")
RX_QUOTES = re.compile(r"^[\"'“”‘’«»]+|[\"'“”‘’«»]+$")

# Plural container nouns that are part of the catalog name in singular form.
_NAME_PLURAL_FIXES = (
    (re.compile(r"^sacks\s+of\s+", re.I), "sack of "),
    (re.compile(r"^bags\s+of\s+", re.I), "bag of "),
    (re.compile(r"^boxes\s+of\s+", re.I), "box of "),
)


@dataclass(frozen=True)
class QuantityResult:
    quantity: int
    item_name: str
    is_hq: bool = False


def _to_int(s: str, default: int = 1) -> int:
    try:
        return int((s or "").replace(",", "").strip())
    except ValueError:
        return default


def _strip_unit(s: str) -> str:
    return RX_UNIT_PHRASE.sub("", s, count=1)


def _finish(quantity: int, name: str) -> QuantityResult:
    name = strip_trailing_punct(name)

    is_hq = False
    if RX_TRAILING_HQ.search(name):
        is_hq = True
        name = strip_trailing_punct(RX_TRAILING_HQ.sub("", name))

    name = RX_QUOTES.sub("", name).strip()
    for rx, repl in _NAME_PLURAL_FIXES:
        name = rx.sub(repl, name, count=1)

    return QuantityResult(quantity=max(1, quantity), item_name=norm_spaces(name), is_hq=is_hq)


def extract_quantity(remainder: str) -> QuantityResult:
    """Split the text after a lead-in phrase into (quantity, item name, HQ).

    Examples:
      "3 wind shards."                     -> (3, "wind shards")
      "1,200 pieces of mythril sand."      -> (1200, "mythril sand")
      "54(+9) white gatherer's scrips."    -> (63, "white gatherer's scrips")
      "a pinch of table salt."             -> (1, "table salt")
      "chunks of rock salt."               -> (1, "rock salt")
      "Mythril Ingot HQ."                  -> (1, "Mythril Ingot", HQ)

    Never raises: unmatched input is treated as quantity 1 with the whole
    remainder as the item name.
    """
    s = norm_spaces(str(remainder or ""))

    m = RX_BONUS_QTY.match(s)
    if m:
        qty = _to_int(m.group("base"), 0) + _to_int(m.group("bonus"), 0)
        return _finish(qty, _strip_unit(m.group("rest")))

    m = RX_GROUPED_QTY.match(s)
    if m:
        return _finish(_to_int(m.group("qty")), _strip_unit(m.group("rest")))

    m = RX_PLAIN_QTY.match(s)
    if m:
        return _finish(_to_int(m.group("qty")), _strip_unit(m.group("rest")))

    m = RX_ARTICLE.match(s)
    if m:
        return _finish(1, _strip_unit(m.group("rest")))

    m = RX_BARE_UNIT.match(s)
    if m:
        return _finish(1, m.group("rest"))

    return _finish(1, s)
