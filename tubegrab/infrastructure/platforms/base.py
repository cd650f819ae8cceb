from __future__ import annotations

from abc import ABC, abstractmethod

from tubegrab.domain.models import RawVideoInfo, StrategyName


class AbstractExtractionStrategy(ABC):
    """
    One way of turning a URL into raw video info.
    """

    name: StrategyName

    @abstractmethod
    async def resolve(self, url: str) -> RawVideoInfo:
        """
        Return raw info for the URL.
        Must raise StrategyFailure (or ExtractionError) when nothing usable comes back.
        """
        raise NotImplementedError
