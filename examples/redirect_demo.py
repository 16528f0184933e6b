#!/usr/bin/env python3

from __future__ import annotations

import asyncio
import json
import logging
import time

import click

from linkcache import Coordinator, ExpiryPolicy, LinkCacheConfig, RecordCategory


async def run(capacity: int, ttl: float, interval: float) -> None:
    config = LinkCacheConfig.from_dict(
        {
            "cache": {"capacity": capacity},
            "sweeper": {"interval_seconds": interval},
        }
    )
    async with Coordinator.from_config(config) as links:
        await links.insert("docs", "https://docs.python.org/3/")
        await links.insert("pypi", "https://pypi.org/")
        await links.insert("flash", "https://example.com/sale", ExpiryPolicy.at(time.time() + ttl))
        await links.insert("once", "https://example.com/secret", ExpiryPolicy.after_clicks(1))

        for key in ("docs", "docs", "pypi", "flash", "once", "once", "missing"):
            result = await links.lookup(key)
            print(f"{key:<8} {result.outcome.value:<22} {result.value or ''}")

        print("schedule:", [(s.key, round(s.time_remaining, 1)) for s in links.schedule_snapshot()])
        await asyncio.sleep(ttl + interval * 2)
        print("after sweep:", [s.key for s in links.schedule_snapshot()])
        print("flash  ", (await links.lookup("flash")).outcome.value)

        print("stats:", links.stats())
        for record in links.recent(RecordCategory.CACHE, 5):
            print(json.dumps(record.to_dict()))


@click.command()
@click.option("--capacity", default=2, type=int, help="LRU capacity")
@click.option("--ttl", default=1.0, type=float, help="Seconds until the 'flash' link expires")
@click.option("--interval", default=0.5, type=float, help="Sweep interval seconds")
def main(capacity: int, ttl: float, interval: float) -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(run(capacity, ttl, interval))


if __name__ == "__main__":
    main()
