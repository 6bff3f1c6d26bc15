"""
Ordered provider fallback.

A task builds a list of ``Candidate`` invokers (primary models first, the
secondary provider last). ``FallbackChain.run`` attempts them in order and
returns the first successful result; a candidate failure of any kind is
logged and turned into an ``Attempt`` carrying the error, never raised.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar

from ai_apps.errors import AllProvidersUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class Candidate(Generic[T]):
    name: str
    invoke: Callable[[], Awaitable[Optional[T]]]


@dataclass(frozen=True)
class Attempt(Generic[T]):
    candidate: str
    result: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None


@dataclass
class FallbackChain(Generic[T]):
    task: str
    candidates: List[Candidate[T]]
    unavailable_message: str = "All services are currently unavailable."
    attempts: List[Attempt[T]] = field(default_factory=list)

    async def attempt(self, candidate: Candidate[T]) -> Attempt[T]:
        try:
            result = await candidate.invoke()
        except Exception as e:
            logger.warning(f"⚠️ {self.task}: {candidate.name} failed: {e}")
            return Attempt(candidate=candidate.name, error=e)

        if result is None:
            logger.warning(f"⚠️ {self.task}: {candidate.name} returned no result")
        return Attempt(candidate=candidate.name, result=result)

    async def run(self) -> T:
        for candidate in self.candidates:
            attempt = await self.attempt(candidate)
            self.attempts.append(attempt)
            if attempt.ok:
                logger.info(f"✅ {self.task} served by {candidate.name}")
                return attempt.result

        logger.error(f"❌ {self.task}: all {len(self.candidates)} providers failed")
        raise AllProvidersUnavailable(self.unavailable_message)
