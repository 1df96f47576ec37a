from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from chat_sync.application.exceptions import GatewayError

P = ParamSpec("P")
R = TypeVar("R")


def gateway_call(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
    """Surface database failures as GatewayError."""

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await func(*args, **kwargs)
        except SQLAlchemyError as exc:
            raise GatewayError(str(exc)) from exc

    return wrapper
