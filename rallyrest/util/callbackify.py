"""Optional ``callback(error, result)`` calling convention for coroutines."""

import functools
from typing import Any, Awaitable, Callable, Optional, TypeVar

from rallyrest.core.errors import RallyError

T = TypeVar("T")

Callback = Callable[[Optional[RallyError], Any], Any]


def callbackify(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Let a coroutine method also report through a ``callback`` keyword.

    The callback receives ``(None, result)`` on success or ``(error, None)`` on
    a client error. The coroutine still returns the result or raises the error.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, callback: Optional[Callback] = None, **kwargs: Any) -> T:
        try:
            result = await func(*args, **kwargs)
        except RallyError as e:
            if callback is not None:
                callback(e, None)
            raise
        if callback is not None:
            callback(None, result)
        return result

    return wrapper
