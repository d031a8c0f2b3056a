"""
Timeout helper.

Bounds a single await so a slow backend behaves like a failed one.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


async def with_timeout(awaitable: Awaitable[T], seconds: float | None) -> T:
    """
    Await ``awaitable`` for at most ``seconds``.

    ``None`` or a non-positive value disables the bound.

    Raises:
        TimeoutError: If the deadline passes first.
    """
    if seconds is None or seconds <= 0:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError as e:
        # asyncio.TimeoutError is only an alias of TimeoutError from 3.11 on
        raise TimeoutError(f"operation timed out after {seconds:.2f}s") from e
