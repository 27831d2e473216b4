"""Commit Message Generator Package"""

from autocommit.config import ProviderConfig, ProviderKind
from autocommit.llm.base import (
    CommitMessageGenerator, GenerationError, GenerationFailure,
    SYSTEM_PROMPT, build_generation_input, clean_commit_message,
)
from autocommit.llm.openai import OpenAIClient
from autocommit.llm.ollama import OllamaClient

PROVIDERS = {
    ProviderKind.HOSTED: OpenAIClient,
    ProviderKind.LOCAL: OllamaClient,
}


def get_generator(provider_config: ProviderConfig) -> CommitMessageGenerator:
    """Build the backend matching the provider configuration's kind."""
    try:
        generator_class = PROVIDERS[provider_config.kind]
    except KeyError:
        raise ValueError(f"No backend for provider kind: {provider_config.kind}")
    return generator_class(provider_config)


__all__ = [
    "CommitMessageGenerator",
    "GenerationError",
    "GenerationFailure",
    "OpenAIClient",
    "OllamaClient",
    "get_generator",
    "PROVIDERS",
    "SYSTEM_PROMPT",
    "build_generation_input",
    "clean_commit_message",
]
