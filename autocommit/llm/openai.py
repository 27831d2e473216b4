"""OpenAI Chat Completion Client"""

import logging

from autocommit.config import HostedProviderConfig, ProviderKind
from autocommit.llm.base import (
    CommitMessageGenerator, GenerationFailure, SYSTEM_PROMPT, clean_commit_message,
)

logger = logging.getLogger(__name__)


class OpenAIClient(CommitMessageGenerator):
    """OpenAI API client. Needs an API key (--openai-api-key or OPENAI_API_KEY)."""

    kind = ProviderKind.HOSTED

    MAX_TOKENS = 100
    TEMPERATURE = 0.7

    def __init__(self, config: HostedProviderConfig):
        self.api_key = config.api_key
        self.model = config.model
        self._client = None

    @property
    def name(self) -> str:
        return f"OpenAI ({self.model})"

    def _get_client(self):
        """Build the SDK client on first use so a missing key never reaches the network."""
        if self._client is None:
            try:
                from openai import OpenAI
            except ImportError:
                raise self._fail(
                    GenerationFailure.SERVICE_ERROR,
                    "OpenAI SDK not installed. Run:\n  pip install openai",
                )
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def generate_commit_message(self, diff: str) -> str:
        if not self.api_key or not self.api_key.strip():
            raise self._fail(
                GenerationFailure.MISSING_CREDENTIAL,
                "API key is missing. Provide one with --openai-api-key or set OPENAI_API_KEY",
            )

        client = self._get_client()
        import openai

        logger.debug("Requesting commit message from %s", self.name)
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": diff},
                ],
                temperature=self.TEMPERATURE,
                max_tokens=self.MAX_TOKENS,
            )
        # Subclasses before their bases: RateLimitError and AuthenticationError
        # are APIStatusErrors, APITimeoutError is an APIConnectionError
        except openai.AuthenticationError:
            raise self._fail(GenerationFailure.UNAUTHORIZED, "Invalid API key or unauthorized access")
        except openai.RateLimitError:
            raise self._fail(GenerationFailure.RATE_LIMITED, "Rate limit exceeded. Please try again later")
        except openai.APIConnectionError:
            raise self._fail(
                GenerationFailure.UNREACHABLE,
                "OpenAI server not responding. Please check your internet connection",
            )
        except openai.APIStatusError as e:
            raise self._fail(GenerationFailure.SERVICE_ERROR, f"OpenAI API error ({e.status_code}): {e.message}")
        except openai.APIError as e:
            raise self._fail(GenerationFailure.MALFORMED_RESPONSE, f"Unexpected response from OpenAI: {e.message}")

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            content = None
        if not content or not content.strip():
            raise self._fail(GenerationFailure.MALFORMED_RESPONSE, "OpenAI returned an empty or malformed response")

        return clean_commit_message(content)
