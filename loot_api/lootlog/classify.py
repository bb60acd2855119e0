from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import regex as re

from loot_api.catalog.models import CatalogRecord
from loot_api.catalog.resolver import ItemResolver, decode_item_id
from loot_api.lootlog.models import (
    ROLL_GREED,
    ROLL_NEED,
    ActorContext,
    Classification,
    ItemIdentity,
    ItemRef,
    LootEvent,
    LootSource,
    RollCast,
    RollListOpened,
)
from loot_api.lootlog.names import normalize_player_name
from loot_api.lootlog.quantity import clean_text, extract_quantity, strip_trailing_punct

logger = logging.getLogger("lootview")


# -----------------
# Categories (priority order)
# -----------------

CAT_LOOT_LIST = "LOOT_LIST_ADDED"
CAT_ROLL = "ROLL"
CAT_FISH = "FISH_LANDED"
CAT_OBTAIN = "OBTAIN"
CAT_PASSIVE_OBTAIN = "PASSIVE_OBTAIN"
CAT_INVENTORY_ADD = "INVENTORY_ADD"
CAT_EXTRACTION = "EXTRACTION"
CAT_EXCHANGE = "EXCHANGE"
CAT_ROULETTE_BONUS = "ROULETTE_BONUS"

GIL_ITEM_ID = 1
GIL_NAME = "Gil"


@dataclass(frozen=True)
class ParsedShape:
    category: str
    item_text: str = ""  # fed to the quantity extractor
    player: str = ""  # empty means the local actor
    source: LootSource = LootSource.UNKNOWN
    fixed_quantity: Optional[int] = None
    size: str = ""  # fish length, "32.4"
    roll_kind: str = ""
    roll_value: int = 0

    @property
    def is_self(self) -> bool:
        return not self.player


# -----------------
# Patterns
# -----------------

RX_LOOT_LIST = re.compile(r"^(?P<item>.+?)\s+(?:has|have)\s+been\s+added\s+to\s+the\s+loot\s+list\b", re.I)

RX_ROLL_HINT = re.compile(r"(?:^|\s)rolls?\s", re.I)
RX_ROLL_KIND_HINT = re.compile(r"\b(?:Need|Greed)\b")
RX_ROLL = re.compile(
    r"^(?P<player>.+?)\s+rolls?\s+(?P<kind>Need|Greed)\s+on\s+(?:the\s+)?(?P<item>.+?)\.\s*(?P<value>\d{1,3})\s*!?\s*$",
    re.I,
)

RX_FISH = re.compile(
    r"^(?P<player>.+?)\s+lands?\s+(?P<item>.+?)\s+measuring\s+(?P<size>\d[\d.,]*)\s+ilms\s*!",
    re.I,
)
RX_FISH_HINT = re.compile(r"\blands?\b.*\bilms!", re.I)

RX_YOU_OBTAIN = re.compile(r"\bYou\s+obtain\s+(?P<item>.+)$")
RX_YOU_SYNTHESIZE = re.compile(r"\bYou\s+synthesize\s+(?P<item>.+)$")
RX_OTHER_OBTAINS = re.compile(r"^(?P<player>.+?)\s+obtains\s+(?P<item>.+)$")

RX_PASSIVE_OBTAIN = re.compile(r"^(?P<item>.+?)\s+(?:is|are)\s+obtained\b", re.I)
RX_INVENTORY_ADD = re.compile(
    r"^(?P<item>.+?)\s+(?:is|are|has\s+been|have\s+been)\s+added\s+to\s+your\s+inventory\b",
    re.I,
)

RX_EXTRACT = re.compile(
    r"\bsuccessfully\s+extract(?:s|ed)?\s+(?P<item>.+?)(?:\s+from\s+(?:the\s+|your\s+)?.+?)?\s*[.!]?\s*$",
    re.I,
)
RX_EXCHANGE = re.compile(r"^You\s+exchange\s+.+?\s+for\s+(?P<item>.+)$", re.I)
RX_ROULETTE_BONUS = re.compile(
    r"\bA\s+bonus\s+of\s+(?P<gil>\d[\d,]*)\s+gil\s+has\s+been\s+awarded\b",
    re.I,
)


def _player_token(s: str) -> str:
    """'You' maps to the local actor (empty); anything else is a named player."""
    s = strip_trailing_punct(s)
    return "" if s.lower() == "you" else s


# -----------------
# Matchers: each is a pure function of the cleaned line
# -----------------


def _match_loot_list(m: str) -> Optional[ParsedShape]:
    if "added to the loot list" not in m.lower():
        return None
    mm = RX_LOOT_LIST.match(m)
    return ParsedShape(CAT_LOOT_LIST, item_text=mm.group("item") if mm else "")


def _match_roll(m: str) -> Optional[ParsedShape]:
    if not (RX_ROLL_HINT.search(m) and RX_ROLL_KIND_HINT.search(m)):
        return None
    mm = RX_ROLL.match(m)
    if not mm:
        # looks like a roll but isn't one we can attribute; still claims the line
        return ParsedShape(CAT_ROLL)
    kind = ROLL_NEED if mm.group("kind").lower() == "need" else ROLL_GREED
    return ParsedShape(
        CAT_ROLL,
        item_text=mm.group("item"),
        player=_player_token(mm.group("player")),
        roll_kind=kind,
        roll_value=int(mm.group("value")),
    )


def _match_fish(m: str) -> Optional[ParsedShape]:
    if not RX_FISH_HINT.search(m):
        return None
    mm = RX_FISH.match(m)
    if not mm:
        return ParsedShape(CAT_FISH)
    return ParsedShape(
        CAT_FISH,
        item_text=mm.group("item"),
        player=_player_token(mm.group("player")),
        source=LootSource.GATHERING,
        fixed_quantity=1,
        size=mm.group("size").rstrip(".,"),
    )


def _match_obtain(m: str) -> Optional[ParsedShape]:
    mm = RX_YOU_SYNTHESIZE.search(m)
    if mm:
        return ParsedShape(CAT_OBTAIN, item_text=mm.group("item"), source=LootSource.CRAFTING)
    mm = RX_YOU_OBTAIN.search(m)
    if mm:
        return ParsedShape(CAT_OBTAIN, item_text=mm.group("item"))
    if " obtains " in m:
        mm = RX_OTHER_OBTAINS.match(m)
        if mm:
            return ParsedShape(CAT_OBTAIN, item_text=mm.group("item"), player=_player_token(mm.group("player")))
    return None


def _match_passive_obtain(m: str) -> Optional[ParsedShape]:
    mm = RX_PASSIVE_OBTAIN.match(m)
    if not mm:
        return None
    return ParsedShape(CAT_PASSIVE_OBTAIN, item_text=mm.group("item"))


def _match_inventory_add(m: str) -> Optional[ParsedShape]:
    mm = RX_INVENTORY_ADD.match(m)
    if not mm:
        return None
    return ParsedShape(CAT_INVENTORY_ADD, item_text=mm.group("item"), source=LootSource.OTHER, fixed_quantity=1)


def _match_extraction(m: str) -> Optional[ParsedShape]:
    if "successfully extract" not in m.lower():
        return None
    mm = RX_EXTRACT.search(m)
    if not mm:
        return ParsedShape(CAT_EXTRACTION)
    return ParsedShape(CAT_EXTRACTION, item_text=mm.group("item"), source=LootSource.EXTRACTION, fixed_quantity=1)


def _match_exchange(m: str) -> Optional[ParsedShape]:
    mm = RX_EXCHANGE.match(m)
    if not mm:
        return None
    return ParsedShape(CAT_EXCHANGE, item_text=mm.group("item"), source=LootSource.EXCHANGE)


def _match_roulette_bonus(m: str) -> Optional[ParsedShape]:
    mm = RX_ROULETTE_BONUS.search(m)
    if not mm:
        return None
    gil = int(mm.group("gil").replace(",", "") or 0)
    return ParsedShape(
        CAT_ROULETTE_BONUS,
        item_text=GIL_NAME,
        source=LootSource.DUTY_ROULETTE_BONUS,
        fixed_quantity=max(1, gil),
    )


# Evaluated in order; the first matcher that claims a line wins.
SHAPE_MATCHERS: Tuple[Tuple[str, Callable[[str], Optional[ParsedShape]]], ...] = (
    (CAT_LOOT_LIST, _match_loot_list),
    (CAT_ROLL, _match_roll),
    (CAT_FISH, _match_fish),
    (CAT_OBTAIN, _match_obtain),
    (CAT_PASSIVE_OBTAIN, _match_passive_obtain),
    (CAT_INVENTORY_ADD, _match_inventory_add),
    (CAT_EXTRACTION, _match_extraction),
    (CAT_EXCHANGE, _match_exchange),
    (CAT_ROULETTE_BONUS, _match_roulette_bonus),
)


def match_shape(line: str) -> Optional[ParsedShape]:
    """Return the first message shape that claims the line, or None."""
    m = clean_text(line)
    if not m:
        return None
    for _, matcher in SHAPE_MATCHERS:
        shape = matcher(m)
        if shape is not None:
            return shape
    return None


# -----------------
# Classifier
# -----------------


def _identity_from(rec: CatalogRecord) -> ItemIdentity:
    return ItemIdentity(item_id=rec.item_id, icon_id=rec.icon_id, rarity=rec.rarity, name=rec.name)


class LootClassifier:
    """Turns one chat line into at most one LootEvent and one roll update.

    Holds no state of its own; the resolver and the actor accessor are
    host-supplied collaborators.
    """

    def __init__(self, resolver: ItemResolver, actor_provider: Callable[[], Optional[ActorContext]]) -> None:
        self._resolver = resolver
        self._actor_provider = actor_provider

    def classify(self, raw_line: str, item_ref: Optional[ItemRef] = None) -> Optional[Classification]:
        shape = match_shape(raw_line)
        if shape is None:
            return None

        if shape.category == CAT_LOOT_LIST:
            return self._roll_list_opened(shape, item_ref)
        if shape.category == CAT_ROLL:
            return self._roll_cast(shape, item_ref)
        return self._loot(shape, raw_line, item_ref)

    # -----------------
    # Item identity
    # -----------------

    def _resolve(self, text_name: str, item_ref: Optional[ItemRef]) -> Tuple[ItemIdentity, bool]:
        """Returns (identity, hq_from_ref). Unresolved identities have id/icon/rarity 0."""
        if item_ref is not None and item_ref.item_id:
            decoded = decode_item_id(item_ref.item_id)
            rec = self._resolver.resolve_id(item_ref.item_id)
            if rec is None and item_ref.name:
                rec = self._resolver.resolve_name(item_ref.name)
            if rec is not None:
                return _identity_from(rec), decoded.is_hq
            name = item_ref.name or text_name
            logger.warning("Unresolved item identity for id %d (%r)", item_ref.item_id, name)
            item_id = int(item_ref.item_id) if decoded.is_event_item else decoded.item_id
            return ItemIdentity(item_id, 0, 0, name), decoded.is_hq

        if item_ref is not None and item_ref.name:
            text_name = item_ref.name

        rec = self._resolver.resolve_name(text_name)
        if rec is not None:
            return _identity_from(rec), False
        if text_name:
            logger.warning("Unresolved item identity for %r", text_name)
        return ItemIdentity(0, 0, 0, text_name), False

    def _item_for_roll(self, shape: ParsedShape, item_ref: Optional[ItemRef]) -> Optional[ItemIdentity]:
        text_name = extract_quantity(shape.item_text).item_name if shape.item_text else ""
        if not text_name and item_ref is None:
            return None
        identity, _ = self._resolve(text_name, item_ref)
        if not identity.name and not identity.item_id:
            return None
        return identity

    # -----------------
    # Roll shapes
    # -----------------

    def _roll_list_opened(self, shape: ParsedShape, item_ref: Optional[ItemRef]) -> Optional[Classification]:
        item = self._item_for_roll(shape, item_ref)
        if item is None:
            logger.debug("Loot-list line without a usable item name")
            return None
        return Classification(CAT_LOOT_LIST, roll=RollListOpened(item))

    def _roll_cast(self, shape: ParsedShape, item_ref: Optional[ItemRef]) -> Optional[Classification]:
        if not shape.roll_kind:
            logger.debug("Unparsed roll line")
            return None

        player = shape.player
        if shape.is_self:
            actor = self._actor_provider()
            if actor is None:
                logger.warning("No local actor context; skipping own roll line")
                return None
            player = actor.name
        player = normalize_player_name(player)

        item = self._item_for_roll(shape, item_ref)
        if item is None:
            return None
        return Classification(
            CAT_ROLL,
            roll=RollCast(item=item, player=player, kind=shape.roll_kind, value=shape.roll_value),
        )

    # -----------------
    # Loot shapes
    # -----------------

    def _loot(self, shape: ParsedShape, raw_line: str, item_ref: Optional[ItemRef]) -> Optional[Classification]:
        if not shape.item_text and item_ref is None:
            logger.debug("Unparsed %s line", shape.category)
            return None

        actor = self._actor_provider()
        if actor is None:
            logger.warning("No local actor context; skipping %s line", shape.category)
            return None

        if shape.category == CAT_ROULETTE_BONUS:
            rec = self._resolver.resolve_id(GIL_ITEM_ID)
            identity = _identity_from(rec) if rec else ItemIdentity(GIL_ITEM_ID, 0, 0, GIL_NAME)
            quantity, is_hq = int(shape.fixed_quantity or 1), False
        else:
            parsed = extract_quantity(shape.item_text)
            identity, ref_hq = self._resolve(parsed.item_name, item_ref)
            quantity = shape.fixed_quantity or parsed.quantity
            is_hq = parsed.is_hq or ref_hq

        name = identity.name
        if shape.size:
            name = f"{name} [{shape.size} ilms]"

        if shape.is_self:
            player = actor.name
            is_own = True
        else:
            player = normalize_player_name(shape.player)
            is_own = player.lower() == (actor.name or "").lower()

        event = LootEvent(
            item_id=identity.item_id,
            icon_id=identity.icon_id,
            rarity=identity.rarity,
            item_name=name,
            quantity=max(1, int(quantity)),
            is_hq=bool(is_hq),
            player_name=player,
            player_account_id=actor.account_id if is_own else 0,
            is_own_loot=is_own,
            source=shape.source,
            zone_id=actor.zone_id,
            zone_name=actor.display_zone,
            raw_line=raw_line,
        )
        return Classification(shape.category, loot=event)
