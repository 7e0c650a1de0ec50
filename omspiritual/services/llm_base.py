"""
OM Spiritual Backend - Abstract LLM Service Interface
======================================================

What:  Contract for the text-generation provider behind recommendations.
How:   Concrete providers (GeminiService) implement `recommend()`;
       RecommendationService only depends on this interface, and tests swap
       in mocks.
"""

from abc import ABC, abstractmethod
from typing import Dict


class LLMService(ABC):
    """
    Contract:
        - recommend() returns a dict with string keys "frequency", "type"
          and "advice"
        - every provider failure (network, timeout, quota, malformed output)
          is raised as LLMServiceError or CircuitBreakerOpenError
        - implementations own their retry and timeout policy
    """

    @abstractmethod
    async def recommend(self, history_text: str) -> Dict[str, str]:
        """
        Ask the provider for tomorrow's meditation suggestion.

        Args:
            history_text: One line per mood entry, newest first, e.g.
                "Rating: 4/5, Note: calm, Duration: 10m, Freq: 528Hz"

        Returns:
            {"frequency": ..., "type": ..., "advice": ...}

        Raises:
            LLMServiceError: provider failed or returned an unusable answer
            CircuitBreakerOpenError: too many recent failures
        """
        ...

    @abstractmethod
    def status(self) -> str:
        """
        Cheap, network-free status for the health endpoint:
        "configured", "not_configured" or "circuit_open".
        """
        ...
