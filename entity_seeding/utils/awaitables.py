"""Helpers for values that may or may not need to be awaited."""

import inspect
from typing import Any


def is_promise_like(value: Any) -> bool:
    """Return True when ``value`` is an awaitable: coroutine, task, future or ``__await__`` object."""
    return inspect.isawaitable(value)


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if is_promise_like(value):
        return await value
    return value
