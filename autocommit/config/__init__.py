"""Configuration Management Package

Settings come from, in order of precedence:

1. Command-line flags
2. Environment variables
3. .autocommitrc in the current directory, then in the home directory (JSON)
4. Built-in defaults

Credentials are only taken from flags or the environment, never from the file.
"""

import enum
import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

DEFAULT_PROVIDER = "openai"
DEFAULT_OPENAI_MODEL = "gpt-3.5-turbo"
DEFAULT_OLLAMA_HOST = "http://127.0.0.1:11434"
DEFAULT_OLLAMA_MODEL = "llama3.1"

ENV_PROVIDER = "AUTO_COMMIT_PROVIDER"
ENV_OPENAI_API_KEY = "OPENAI_API_KEY"
ENV_OPENAI_MODEL = "OPENAI_MODEL"
ENV_OLLAMA_HOST = "OLLAMA_HOST"
ENV_GITHUB_TOKEN = "GITHUB_TOKEN"


class ProviderKind(enum.Enum):
    HOSTED = "hosted"
    LOCAL = "local"


# CLI/config provider names -> kind
PROVIDER_NAMES = {
    "openai": ProviderKind.HOSTED,
    "ollama": ProviderKind.LOCAL,
}
VALID_PROVIDERS = set(PROVIDER_NAMES)


@dataclass(frozen=True)
class HostedProviderConfig:
    """OpenAI chat-completion API."""
    api_key: str
    model: str = DEFAULT_OPENAI_MODEL

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.HOSTED


@dataclass(frozen=True)
class LocalProviderConfig:
    """Ollama server."""
    host: str = DEFAULT_OLLAMA_HOST
    model: str = DEFAULT_OLLAMA_MODEL

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.LOCAL


ProviderConfig = Union[HostedProviderConfig, LocalProviderConfig]


@dataclass
class Config:
    """User configuration with sensible defaults."""
    provider: str = DEFAULT_PROVIDER
    openai_model: str = DEFAULT_OPENAI_MODEL
    ollama_host: str = DEFAULT_OLLAMA_HOST
    ollama_model: str = DEFAULT_OLLAMA_MODEL

    def validate(self) -> list[str]:
        """Validate config values and return list of warnings.

        Invalid values are replaced with defaults after warning.
        """
        warnings = []
        defaults = Config()

        if self.provider not in VALID_PROVIDERS:
            warnings.append(f"Invalid provider '{self.provider}', using '{defaults.provider}'")
            self.provider = defaults.provider

        for name in ("openai_model", "ollama_host", "ollama_model"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                warnings.append(f"Invalid {name} '{value}', using '{getattr(defaults, name)}'")
                setattr(self, name, getattr(defaults, name))

        return warnings

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        config = cls(**filtered)
        for warning in config.validate():
            print(f"Config warning: {warning}", file=sys.stderr)
        return config


class ConfigManager:
    """Finds and reads `.autocommitrc`; caches the first load."""

    CONFIG_FILENAME = ".autocommitrc"

    def __init__(self):
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = None

    def candidates(self) -> list[Path]:
        """Config file locations, highest precedence first."""
        return [Path.cwd() / self.CONFIG_FILENAME, Path.home() / self.CONFIG_FILENAME]

    def load(self) -> Config:
        if self._config is None:
            self._config_path = next((path for path in self.candidates() if path.is_file()), None)
            self._config = self._read(self._config_path) if self._config_path else Config()
        return self._config

    @staticmethod
    def _read(path: Path) -> Config:
        """Parse one config file; an unreadable file means defaults, with a warning."""
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except (ValueError, OSError) as e:
            print(f"Warning: Could not load {path}: {e}", file=sys.stderr)
            return Config()
        if not isinstance(data, dict):
            print(f"Warning: Could not load {path}: expected a JSON object", file=sys.stderr)
            return Config()
        return Config.from_dict(data)

    def get_config_path(self) -> Optional[Path]:
        return self._config_path


_manager = ConfigManager()


def load_config() -> Config:
    return _manager.load()


def get_config_path() -> Optional[Path]:
    return _manager.get_config_path()


def _first(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value:
            return value
    return None


def resolve_provider_config(
    provider: Optional[str],
    config: Config,
    *,
    api_key: Optional[str] = None,
    openai_model: Optional[str] = None,
    ollama_host: Optional[str] = None,
    ollama_model: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ProviderConfig:
    """Pick the single provider configuration for this run.

    Precedence: explicit arguments > environment > config file.
    A missing API key is not an error here; the hosted backend
    reports it when asked to generate.
    """
    env = os.environ if environ is None else environ
    name = _first(provider, env.get(ENV_PROVIDER), config.provider)

    kind = PROVIDER_NAMES.get(name)
    if kind is None:
        raise ValueError(f"Unknown provider: {name}. Use 'openai' or 'ollama'.")

    if kind is ProviderKind.HOSTED:
        return HostedProviderConfig(
            api_key=_first(api_key, env.get(ENV_OPENAI_API_KEY)) or "",
            model=_first(openai_model, env.get(ENV_OPENAI_MODEL), config.openai_model),
        )
    host = _first(ollama_host, env.get(ENV_OLLAMA_HOST), config.ollama_host).rstrip('/')
    # OLLAMA_HOST is often just host:port
    if '://' not in host:
        host = f"http://{host}"
    return LocalProviderConfig(
        host=host,
        model=_first(ollama_model, config.ollama_model),
    )


def provider_name(provider_config: ProviderConfig) -> str:
    """The CLI name ('openai', 'ollama') for a provider configuration."""
    for name, kind in PROVIDER_NAMES.items():
        if kind is provider_config.kind:
            return name
    raise ValueError(f"Unknown provider kind: {provider_config.kind}")


def github_token(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    env = os.environ if environ is None else environ
    return env.get(ENV_GITHUB_TOKEN) or None


__all__ = [
    "Config",
    "ConfigManager",
    "load_config",
    "get_config_path",
    "ProviderKind",
    "ProviderConfig",
    "HostedProviderConfig",
    "LocalProviderConfig",
    "PROVIDER_NAMES",
    "VALID_PROVIDERS",
    "resolve_provider_config",
    "provider_name",
    "github_token",
]
