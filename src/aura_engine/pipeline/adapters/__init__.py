"""Provider adapters."""

from .base import GenerationAdapter
from .gemini import GoogleGenAIAdapter
from .mock import MockAdapter

__all__ = ["GenerationAdapter", "GoogleGenAIAdapter", "MockAdapter"]
