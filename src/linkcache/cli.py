from __future__ import annotations

import asyncio
import logging
import time
import typing as t

import click

from linkcache.core.coordinator import Coordinator
from linkcache.core.errors import StoreUnavailable
from linkcache.core.sweeper import Sweeper
from linkcache.utils.config import LinkCacheConfig


def _now() -> str:
    return time.strftime("%H:%M:%S")


def _coordinator(redis_url: str, prefix: str, capacity: int) -> Coordinator:
    config = LinkCacheConfig.from_env()
    config.storage.type = "redis"
    config.storage.connection_string = redis_url
    config.storage.prefix = prefix
    config.cache.capacity = capacity
    # one-shot commands drive sweeps themselves
    config.sweeper.enabled = False
    return Coordinator.from_config(config)


async def _sweep(coordinator: Coordinator) -> int:
    async with coordinator:
        return await Sweeper(coordinator).run_once()


async def _schedule(coordinator: Coordinator) -> t.List[t.Tuple[str, float, float]]:
    async with coordinator:
        return [(s.key, s.expires_at, s.time_remaining) for s in coordinator.schedule_snapshot()]


async def _lookup(coordinator: Coordinator, key: str) -> t.Tuple[str, t.Optional[str]]:
    async with coordinator:
        result = await coordinator.lookup(key)
    return result.outcome.value, result.value


@click.group()
@click.option("--redis-url", default="redis://localhost:6379/0", show_default=True, help="Redis URL of the link store")
@click.option("--prefix", default="links", show_default=True, help="Key prefix used by the store")
@click.option("--capacity", default=100, type=int, show_default=True, help="LRU cache capacity")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, redis_url: str, prefix: str, capacity: int, verbose: bool) -> None:
    """Inspect and reconcile a Redis-backed link store."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"redis_url": redis_url, "prefix": prefix, "capacity": capacity}


@main.command()
@click.pass_context
def sweep(ctx: click.Context) -> None:
    """Expire every time-limited link whose deadline has passed."""
    try:
        expired = asyncio.run(_sweep(_coordinator(**ctx.obj)))
    except StoreUnavailable as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"[{_now()}] expired {expired} link(s)")


@main.command()
@click.pass_context
def schedule(ctx: click.Context) -> None:
    """Print pending expiries, soonest first."""
    try:
        rows = asyncio.run(_schedule(_coordinator(**ctx.obj)))
    except StoreUnavailable as exc:
        raise click.ClickException(str(exc)) from exc
    if not rows:
        click.echo("(no scheduled expiries)")
        return
    for key, expires_at, remaining in rows:
        stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(expires_at))
        click.echo(f"{key:<24} {stamp}  in {remaining:8.1f}s")


@main.command()
@click.argument("key")
@click.pass_context
def lookup(ctx: click.Context, key: str) -> None:
    """Resolve KEY the way a redirect request would."""
    try:
        outcome, value = asyncio.run(_lookup(_coordinator(**ctx.obj), key))
    except StoreUnavailable as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"{outcome}\t{value or ''}")


if __name__ == "__main__":
    main()
