"""Ollama LLM Client for Local Models"""

import http.client
import json
import logging
import os
import socket
import urllib.error
import urllib.request

from autocommit.config import LocalProviderConfig, ProviderKind
from autocommit.llm.base import (
    CommitMessageGenerator, GenerationFailure, SYSTEM_PROMPT, clean_commit_message,
)

logger = logging.getLogger(__name__)


def model_matches(available: str, wanted: str) -> bool:
    """'llama3.1:latest' satisfies 'llama3.1'; 'llama3.1:8b' satisfies itself only."""
    return available == wanted or available.startswith(f"{wanted}:")


class OllamaClient(CommitMessageGenerator):
    """Ollama client for local models. Requires: ollama serve"""

    kind = ProviderKind.LOCAL

    DEFAULT_TIMEOUT = 300  # 5 minutes for CPU inference
    PROBE_TIMEOUT = 5

    def __init__(self, config: LocalProviderConfig):
        self.host = config.host.rstrip('/')
        self.model = config.model
        self.timeout = self._timeout_from_env()

    @classmethod
    def _timeout_from_env(cls) -> int:
        raw = os.environ.get("AUTO_COMMIT_TIMEOUT")
        if not raw:
            return cls.DEFAULT_TIMEOUT
        try:
            timeout = int(raw)
        except ValueError:
            timeout = 0
        if timeout <= 0:
            logger.warning("Ignoring AUTO_COMMIT_TIMEOUT=%r, using %ss", raw, cls.DEFAULT_TIMEOUT)
            return cls.DEFAULT_TIMEOUT
        return timeout

    @property
    def name(self) -> str:
        return f"Ollama ({self.model})"

    def _not_running(self):
        return self._fail(GenerationFailure.UNREACHABLE, "Server not responding. Is Ollama running? Start with: ollama serve")

    @staticmethod
    def _server_error(e: urllib.error.HTTPError) -> str:
        """The `error` field Ollama puts in failure bodies, or the HTTP reason."""
        try:
            body = json.loads(e.read().decode('utf-8'))
            if isinstance(body, dict) and body.get('error'):
                return str(body['error'])
        except (ValueError, OSError):
            pass
        return f"{e.code} {e.reason}"

    def list_models(self) -> list[str]:
        """Names of the models installed on the server."""
        try:
            req = urllib.request.Request(f"{self.host}/api/tags")
            with urllib.request.urlopen(req, timeout=self.PROBE_TIMEOUT) as response:
                data = json.loads(response.read().decode('utf-8'))
        except urllib.error.HTTPError as e:
            raise self._fail(GenerationFailure.SERVICE_ERROR, f"Failed to check models: {self._server_error(e)}")
        except (urllib.error.URLError, socket.timeout, OSError):
            raise self._not_running()
        except http.client.HTTPException as e:
            raise self._fail(GenerationFailure.MALFORMED_RESPONSE, f"Incomplete model list from Ollama: {e!r}")
        except ValueError:
            # Undecodable bytes or invalid JSON
            raise self._fail(GenerationFailure.MALFORMED_RESPONSE, "Invalid model list from Ollama")

        models = data.get('models') if isinstance(data, dict) else None
        if not isinstance(models, list):
            raise self._fail(GenerationFailure.MALFORMED_RESPONSE, "Invalid model list from Ollama")

        names = []
        for entry in models:
            if not isinstance(entry, dict):
                continue
            # `model` may lack the tag that `name` carries
            for key in ('name', 'model'):
                if isinstance(entry.get(key), str) and entry[key]:
                    names.append(entry[key])
        return names

    def ensure_model(self) -> None:
        if not any(model_matches(name, self.model) for name in self.list_models()):
            raise self._fail(
                GenerationFailure.MODEL_NOT_FOUND,
                f'Model "{self.model}" not found. Please pull it first with: ollama pull {self.model}',
            )

    def _call_api(self, diff: str) -> dict:
        """Make a single chat call to Ollama."""
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": diff},
            ],
            "stream": False,
        }
        data = json.dumps(payload).encode('utf-8')
        req = urllib.request.Request(
            f"{self.host}/api/chat",
            data=data,
            headers={"Content-Type": "application/json"}
        )
        with urllib.request.urlopen(req, timeout=self.timeout) as response:
            return json.loads(response.read().decode('utf-8'))

    def generate_commit_message(self, diff: str) -> str:
        self.ensure_model()

        logger.debug("Requesting commit message from %s at %s", self.name, self.host)
        try:
            result = self._call_api(diff)
        except urllib.error.HTTPError as e:
            # HTTPError must come before URLError (it's a subclass)
            if e.code == 404:
                raise self._fail(
                    GenerationFailure.MODEL_NOT_FOUND,
                    f'Model "{self.model}" not found. Please pull it first with: ollama pull {self.model}',
                )
            raise self._fail(GenerationFailure.SERVICE_ERROR, self._server_error(e))
        except urllib.error.URLError as e:
            if isinstance(e.reason, socket.timeout):
                raise self._fail(
                    GenerationFailure.UNREACHABLE,
                    f"Request timed out after {self.timeout}s. Increase it with AUTO_COMMIT_TIMEOUT",
                )
            raise self._not_running()
        except socket.timeout:
            raise self._fail(
                GenerationFailure.UNREACHABLE,
                f"Request timed out after {self.timeout}s. Increase it with AUTO_COMMIT_TIMEOUT",
            )
        except http.client.HTTPException as e:
            raise self._fail(GenerationFailure.MALFORMED_RESPONSE, f"Incomplete response from Ollama: {e!r}")
        except ValueError:
            # Undecodable bytes or invalid JSON
            raise self._fail(GenerationFailure.MALFORMED_RESPONSE, "Invalid response from Ollama")
        except OSError as e:
            raise self._fail(GenerationFailure.UNREACHABLE, f"Connection to Ollama lost: {e}")

        try:
            content = result["message"]["content"]
        except (KeyError, TypeError):
            content = None
        if not isinstance(content, str) or not content.strip():
            raise self._fail(GenerationFailure.MALFORMED_RESPONSE, "Ollama returned an empty or malformed response")

        return clean_commit_message(content)
