"""
Uniform handling of external collaborator calls.

Every call to geocoding, places, directions, weather, imagery or text generation
goes through ``call_collaborator``. It never raises: the outcome is reported as a
``CollaboratorResult`` that is ``ok``, ``degraded`` (a fallback value was
substituted) or ``failed``.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from pawtrail.errors import CollaboratorTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")

OK = "ok"
DEGRADED = "degraded"
FAILED = "failed"


@dataclass(frozen=True)
class CollaboratorResult(Generic[T]):
    status: str
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @classmethod
    def ok(cls, value: T) -> "CollaboratorResult[T]":
        return cls(OK, value=value)

    @classmethod
    def degraded(cls, value: T, error: BaseException) -> "CollaboratorResult[T]":
        return cls(DEGRADED, value=value, error=error)

    @classmethod
    def failed(cls, error: BaseException) -> "CollaboratorResult[T]":
        return cls(FAILED, error=error)

    @property
    def is_ok(self) -> bool:
        return self.status == OK

    @property
    def is_failed(self) -> bool:
        return self.status == FAILED

    def unwrap_or(self, default: T) -> T:
        return default if self.status == FAILED else self.value


async def call_collaborator(
    name: str,
    call: Callable[[], Awaitable[T]],
    *,
    timeout: Optional[float] = None,
    fallback: Optional[Callable[[], Awaitable[T]]] = None,
) -> CollaboratorResult[T]:
    """Run one collaborator call under a timeout and apply the fallback policy."""
    try:
        if timeout is None:
            value = await call()
        else:
            value = await asyncio.wait_for(call(), timeout=timeout)
        return CollaboratorResult.ok(value)
    except asyncio.CancelledError:
        raise
    except asyncio.TimeoutError:
        error: BaseException = CollaboratorTimeout(
            f"{name} timed out after {timeout}s", collaborator=name
        )
    except Exception as exc:
        error = exc

    if fallback is None:
        logger.warning("%s failed: %s", name, error)
        return CollaboratorResult.failed(error)

    logger.warning("%s failed, using fallback: %s", name, error)
    return CollaboratorResult.degraded(await fallback(), error)


class Deadline:
    """Wall-clock budget for one planning request."""

    def __init__(self, seconds: Optional[float]) -> None:
        self._expires_at = None if seconds is None else time.monotonic() + seconds

    def remaining(self) -> Optional[float]:
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0.0
