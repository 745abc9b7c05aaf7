"""
LLM Providers module.
"""

from docqa.providers.base import LLMProvider, LLMResponse
from docqa.providers.openai import OpenAIProvider

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "OpenAIProvider",
]
