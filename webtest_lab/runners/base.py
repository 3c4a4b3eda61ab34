"""Abstract base class for scanning engine runners."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, kw_only=True)
class EngineRunner[RawT](ABC):
    """Abstract base for the engines behind each test type.

    Generic type RawT is the engine-specific result the runner hands to the
    normalizer: a Lighthouse report, axe results, an Observatory scan, etc.
    """

    @abstractmethod
    async def run(self, url: str, parameters: Mapping[str, Any]) -> RawT:
        """Run the engine against a URL.

        Args:
            url: Absolute URL of the page to test
            parameters: Validated engine-specific parameters

        Returns:
            Raw engine result

        Raises:
            RunnerError: If the engine fails for any reason; runners never
                return substitute data

        """
