"""Unit tests for GroupLocks."""

import asyncio
import gc

import pytest

from secretsanta.domain.services.group_locks import GroupLocks, get_group_locks


def test_same_name_same_lock():
    locks = GroupLocks()

    first = locks.get("xmas")
    second = locks.get("xmas")

    assert first is second
    assert locks.get("easter") is not first


def test_unused_locks_are_released():
    locks = GroupLocks()

    lock = locks.get("xmas")
    assert len(locks) == 1

    del lock
    gc.collect()

    assert len(locks) == 0


def test_global_registry_is_shared():
    assert get_group_locks() is get_group_locks()


@pytest.mark.asyncio
async def test_hold_serializes_same_group():
    locks = GroupLocks()
    events: list[str] = []

    async def worker(tag: str) -> None:
        async with locks.hold("xmas"):
            events.append(f"{tag}-start")
            await asyncio.sleep(0.01)
            events.append(f"{tag}-end")

    await asyncio.gather(worker("a"), worker("b"))

    assert events in (
        ["a-start", "a-end", "b-start", "b-end"],
        ["b-start", "b-end", "a-start", "a-end"],
    )


@pytest.mark.asyncio
async def test_hold_does_not_block_other_groups():
    locks = GroupLocks()
    entered = asyncio.Event()

    async def hold_xmas() -> None:
        async with locks.hold("xmas"):
            await asyncio.wait_for(entered.wait(), timeout=1)

    async def hold_easter() -> None:
        async with locks.hold("easter"):
            entered.set()

    await asyncio.gather(hold_xmas(), hold_easter())

    assert entered.is_set()
