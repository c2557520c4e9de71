"""Helpers to work with (de)serializing of json."""

from __future__ import annotations

import asyncio
from typing import Any

import orjson

JSON_DECODE_EXCEPTIONS = (orjson.JSONDecodeError,)

json_loads = orjson.loads


async def async_json_loads(data: str | bytes) -> Any:
    """Load json from string/bytes in the executor."""
    return await asyncio.to_thread(json_loads, data)
