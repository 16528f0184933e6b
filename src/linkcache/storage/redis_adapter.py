from __future__ import annotations

import json
import typing as t

import redis.asyncio as redis_asyncio

from linkcache.core.models import LinkRecord

from .base import LinkStore


class RedisLinkStore(LinkStore):
    """Redis-backed link store.

    - Records are stored as JSON strings at key: `{prefix}:link:{key}`
    - Click counts live beside them at `{prefix}:clicks:{key}` so INCR stays atomic
    - Reverse lookup by target uses `{prefix}:value:{value}` -> key
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        *,
        prefix: str = "links",
        client: t.Any = None,
    ) -> None:
        self._url = url
        self._prefix = prefix.rstrip(":")
        self._redis = client if client is not None else redis_asyncio.from_url(url, decode_responses=True)

    def _link_key(self, key: str) -> str:
        return f"{self._prefix}:link:{key}"

    def _clicks_key(self, key: str) -> str:
        return f"{self._prefix}:clicks:{key}"

    def _value_key(self, value: str) -> str:
        return f"{self._prefix}:value:{value}"

    @staticmethod
    def _decode(raw: t.Any) -> t.Optional[str]:
        if raw is None:
            return None
        if isinstance(raw, (bytes, bytearray)):
            return raw.decode()
        return str(raw)

    def _load(self, raw: t.Any, clicks: t.Any) -> LinkRecord:
        data = json.loads(self._decode(raw) or "{}")
        record = LinkRecord.from_dict(data)
        counted = self._decode(clicks)
        if counted is not None:
            record.clicks = int(counted)
        return record

    async def get(self, key: str) -> t.Optional[LinkRecord]:
        raw, clicks = await self._redis.mget(self._link_key(key), self._clicks_key(key))
        if raw is None:
            return None
        return self._load(raw, clicks)

    async def put(self, record: LinkRecord) -> None:
        payload = record.to_dict()
        payload.pop("clicks", None)
        await self._redis.set(self._link_key(record.key), json.dumps(payload))
        await self._redis.set(self._clicks_key(record.key), str(record.clicks))
        await self._redis.set(self._value_key(record.value), record.key)

    async def delete(self, key: str) -> bool:
        raw = await self._redis.get(self._link_key(key))
        removed = await self._redis.delete(self._link_key(key), self._clicks_key(key))
        if raw is not None:
            value = json.loads(self._decode(raw) or "{}").get("value")
            if value is not None:
                owner = self._decode(await self._redis.get(self._value_key(value)))
                if owner == key:
                    await self._redis.delete(self._value_key(value))
        return bool(removed)

    async def increment_counter(self, key: str) -> int:
        if not await self._redis.exists(self._link_key(key)):
            return 0
        return int(await self._redis.incr(self._clicks_key(key)))

    async def find_by_value(self, value: str) -> t.Optional[LinkRecord]:
        key = self._decode(await self._redis.get(self._value_key(value)))
        if key is None:
            return None
        return await self.get(key)

    async def scan(self) -> t.AsyncIterator[LinkRecord]:
        marker = self._link_key("")
        async for name in self._redis.scan_iter(match=f"{marker}*"):
            key = self._decode(name)[len(marker):]
            record = await self.get(key)
            if record is not None:
                yield record

    async def is_healthy(self) -> bool:
        try:
            pong = await self._redis.ping()
            return bool(pong)
        except Exception:
            return False

    async def close(self) -> None:
        await self._redis.aclose()
