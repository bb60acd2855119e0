from __future__ import annotations

from typing import FrozenSet, Tuple

from loot_api.lootlog.quantity import norm_spaces


# Worlds the client may glue onto a cross-world player name ("Alice SmithGilgamesh").
KNOWN_SERVERS: FrozenSet[str] = frozenset(
    {
        # Aether
        "Adamantoise", "Cactuar", "Faerie", "Gilgamesh", "Jenova", "Midgardsormr", "Sargatanas", "Siren",
        # Crystal
        "Balmung", "Brynhildr", "Coeurl", "Diabolos", "Goblin", "Malboro", "Mateus", "Zalera",
        # Primal
        "Behemoth", "Excalibur", "Exodus", "Famfrit", "Hyperion", "Lamia", "Leviathan", "Ultros",
        # Dynamis
        "Cuchulainn", "Golem", "Halicarnassus", "Kraken", "Maduin", "Marilith", "Rafflesia", "Seraph",
        # Chaos
        "Cerberus", "Louisoix", "Moogle", "Omega", "Phantom", "Ragnarok", "Sagittarius", "Spriggan",
        # Light
        "Alpha", "Lich", "Odin", "Phoenix", "Raiden", "Shiva", "Twintania", "Zodiark",
        # Materia
        "Bismarck", "Ravana", "Sephirot", "Sophia", "Zurvan",
        # Elemental
        "Aegis", "Atomos", "Carbuncle", "Garuda", "Gungnir", "Kujata", "Tonberry", "Typhon",
        # Gaia
        "Alexander", "Bahamut", "Durandal", "Fenrir", "Ifrit", "Ridill", "Tiamat", "Ultima",
        # Mana
        "Anima", "Asura", "Chocobo", "Hades", "Ixion", "Masamune", "Pandaemonium", "Titan",
        # Meteor
        "Belias", "Mandragora", "Ramuh", "Shinryu", "Unicorn", "Valefor", "Yojimbo", "Zeromus",
    }
)

# longest first so "Pandaemonium" wins over a shorter accidental suffix
_SERVERS_BY_LENGTH: Tuple[str, ...] = tuple(sorted(KNOWN_SERVERS, key=len, reverse=True))


def _server_suffix(name: str) -> str:
    low = name.lower()
    for server in _SERVERS_BY_LENGTH:
        if len(name) > len(server) and low.endswith(server.lower()):
            return server
    return ""


def normalize_player_name(raw: str) -> str:
    """Strip a cross-world server suffix glued onto a player name.

    Best-effort heuristic: a single-word display name that happens to end with
    a server name (e.g. "Tiamat" inside "Rotiamat") is indistinguishable from a
    suffixed name and will be cut.

    After removing the suffix, the last capital letter past the first character
    marks the surname; a space is re-inserted there if truncation dropped it.
    """
    name = norm_spaces(raw)
    server = _server_suffix(name)
    if not server:
        return name

    base = name[: len(name) - len(server)].rstrip()
    for i in range(len(base) - 1, 0, -1):
        if base[i].isupper():
            if base[i - 1] != " ":
                base = base[:i] + " " + base[i:]
            break

    return norm_spaces(base)
