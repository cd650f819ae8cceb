from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from loguru import logger

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class BackoffPolicy:
    """
    Retry count -> delay. Retry n (1-based) waits base_delay * factor ** (n - 1).
    """
    max_retries: int = 0
    base_delay: float = 2.0
    factor: float = 2.0

    def delay(self, retry: int) -> float:
        if retry < 1:
            raise ValueError("retry number is 1-based")
        return self.base_delay * self.factor ** (retry - 1)

    def delays(self) -> list[float]:
        return [self.delay(n) for n in range(1, self.max_retries + 1)]


NO_RETRY = BackoffPolicy(max_retries=0)


async def retry_async(
    op: Callable[[], Awaitable[T]],
    *,
    policy: BackoffPolicy,
    is_transient: Callable[[BaseException], bool],
    sleep: Sleep = asyncio.sleep,
    label: str = "operation",
) -> T:
    """
    Run op, retrying only failures that is_transient() accepts.
    Non-transient failures and the last transient one propagate unchanged.
    """
    retry = 0
    while True:
        try:
            return await op()
        except Exception as exc:
            if retry >= policy.max_retries or not is_transient(exc):
                raise
            retry += 1
            delay = policy.delay(retry)
            logger.warning(
                "{} hit a transient failure, retrying ({}/{}) in {:.1f}s: {}",
                label, retry, policy.max_retries, delay, exc,
            )
            await sleep(delay)
