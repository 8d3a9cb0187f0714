"""
LLM Provider Interface - Abstract base for AI service providers.

This module defines the interface for generative model services
(Gemini, OpenAI, any OpenAI-compatible endpoint).
"""
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from core.media.image_fetcher import EncodedImage


class LLMProvider(ABC):
    """
    Abstract Interface for AI Service Providers.
    """

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        images: Optional[Sequence[EncodedImage]] = None,
        system_prompt: Optional[str] = None,
    ) -> str:
        """
        Generate a text completion, optionally grounded on images.

        Args:
            prompt: User prompt text
            images: Base64 images sent ahead of the prompt (vision path)
            system_prompt: Optional system instruction

        Returns:
            Raw model text.
        """
        pass
