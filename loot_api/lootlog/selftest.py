from __future__ import annotations

import logging
from typing import List, Optional

from loot_api.lootlog.classify import match_shape

logger = logging.getLogger("lootview")


DEFAULT_SELFTEST_LINES: List[str] = [
    "A Demon Boots has been added to the loot list.",
    "You roll Need on the Demon Boots. 87!",
    "Bob SmithGilgamesh rolls Greed on the Demon Boots. 42!",
    "You obtain a pair of Demon Boots.",
    "Warrior of Light obtains a Mythril Ore.",
    "You obtain 54(+9) white gatherer's scrips.",
    "You obtain 1,200 pieces of mythril sand.",
    "You synthesize a Mythril Ingot\ue03c.",
    "You land a sea bass measuring 32.4 ilms!",
    "3 wind shards are obtained.",
    "A Demon Boots has been added to your inventory.",
    "You successfully extract a Savage Aim Materia VI from the Ironworks Hammer.",
    "You exchange 100 Allagan tomestones of poetics for a Demon Boots.",
    "A bonus of 12,000 gil has been awarded for completing a duty roulette.",
    "Alice Smith: anyone need boots?",
]


def run_classifier_selftest(lines: Optional[List[str]] = None) -> None:
    """Smoke-test shape matchers to catch a broken pattern at startup.

    Only verifies that matching does not raise.
    """
    test_lines = lines or DEFAULT_SELFTEST_LINES
    for s in test_lines:
        # Should never raise
        match_shape(s)

    logger.info("Classifier self-test passed (%d lines).", len(test_lines))
