from __future__ import annotations

import asyncio
from typing import Any, Dict

import httpx

from loot_api.lootlog.models import LootEvent


def _rarity_color(rarity: int) -> int:
    if rarity == 2:
        return 0x1EFF00  # green
    if rarity == 3:
        return 0x0070DD  # blue
    if rarity == 4:
        return 0xA335EE  # purple
    if rarity == 7:
        return 0xFF80C0  # pink
    return 0xFFFFFF  # white / unknown


def _field(name: str, value: str, inline: bool = True) -> Dict[str, Any]:
    v = (value or "").strip()
    if not v:
        v = "-"
    if len(v) > 1024:
        v = v[:1021] + "..."
    return {"name": name, "value": v, "inline": inline}


def loot_payload(ev: LootEvent, *, env: str) -> Dict[str, Any]:
    title = f"{ev.item_name}{' [HQ]' if ev.is_hq else ''} x{ev.quantity}"

    fields = [
        _field("Player", ev.player_name, True),
        _field("Source", ev.source.value.replace("_", " "), True),
        _field("Zone", ev.zone_name, True),
    ]
    if ev.roll_kind:
        fields.append(_field("Roll", f"{ev.roll_kind} {ev.roll_value}", True))

    return {
        "content": "",
        "embeds": [
            {
                "title": title,
                "color": _rarity_color(ev.rarity),
                "fields": fields,
                "footer": {"text": f"{env} • item {ev.item_id}"},
            }
        ],
        "allowed_mentions": {"parse": []},
    }


class LootWebhookClient:
    def __init__(self, webhook_url: str, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._webhook_url = (webhook_url or "").strip()
        # Discord is best-effort; fail fast if unreachable.
        timeout = httpx.Timeout(12.0, connect=4.0)
        limits = httpx.Limits(max_keepalive_connections=10, max_connections=20)
        self._client = httpx.AsyncClient(timeout=timeout, limits=limits, transport=transport)

    @property
    def enabled(self) -> bool:
        return bool(self._webhook_url)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def post_loot(self, ev: LootEvent, *, env: str) -> bool:
        """Post one loot embed. Returns False without a request when no URL is configured."""
        if not self._webhook_url:
            return False

        payload = loot_payload(ev, env=env)

        last_exc: Exception | None = None
        for attempt in range(2):
            try:
                resp = await self._client.post(self._webhook_url, json=payload)
                resp.raise_for_status()
                return True
            except httpx.RequestError as e:
                last_exc = e
                await asyncio.sleep(0.5 * (2**attempt))
            except httpx.HTTPStatusError as e:
                last_exc = e
                status = getattr(e.response, "status_code", None)
                if status and 500 <= int(status) < 600 and attempt == 0:
                    await asyncio.sleep(0.5)
                    continue
                break

        raise last_exc if last_exc else RuntimeError("Discord webhook post failed")
