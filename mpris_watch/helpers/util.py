"""Various (server-only) tools and helpers."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any, TypeVar

_T = TypeVar("_T")


async def close_async_generator(agen: AsyncIterator[Any]) -> None:
    """Close an async generator (or any async iterator exposing aclose)."""
    if (aclose := getattr(agen, "aclose", None)) is not None:
        await aclose()


def empty_queue(q: asyncio.Queue[_T]) -> None:
    """Empty an asyncio Queue."""
    for _ in range(q.qsize()):
        try:
            q.get_nowait()
            q.task_done()
        except (asyncio.QueueEmpty, ValueError):
            pass
