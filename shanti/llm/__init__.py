"""LLM module - inference service clients."""

from .base import LLMProvider, LLMMessage, LLMResponse, LLMResponseError
from .openai_provider import OpenAIProvider, OpenRouterProvider
from .factory import create_llm_provider, create_llm_provider_from_settings

__all__ = [
    'LLMProvider',
    'LLMMessage',
    'LLMResponse',
    'LLMResponseError',
    'OpenAIProvider',
    'OpenRouterProvider',
    'create_llm_provider',
    'create_llm_provider_from_settings',
]
