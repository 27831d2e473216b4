"""CLI Commands"""

import os

from autocommit.cli.utils import mask_secret
from autocommit.config import (
    ENV_GITHUB_TOKEN, ENV_PROVIDER, ProviderConfig, ProviderKind, get_config_path, provider_name,
)
from autocommit.output import bold, dim, info


def display_config(provider_config: ProviderConfig) -> int:
    """Display the configuration this run would use."""
    config_path = get_config_path()

    print(f"\n{bold('Current Configuration')}\n")

    if config_path:
        print(f"  {dim('Loaded from:')} {config_path}")
    else:
        print(f"  {dim('Loaded from:')} defaults (no .autocommitrc found)")

    env_provider = os.environ.get(ENV_PROVIDER)
    if env_provider:
        print(f"  {dim('Environment override:')} {ENV_PROVIDER}={env_provider}")

    print()
    print(f"  {bold('AI Provider:')} {info(provider_name(provider_config))}")
    if provider_config.kind is ProviderKind.HOSTED:
        print(f"    model:   {info(provider_config.model)}")
        print(f"    API key: {info(mask_secret(provider_config.api_key))}")
    else:
        print(f"    host:    {info(provider_config.host)}")
        print(f"    model:   {info(provider_config.model)}")

    token = os.environ.get(ENV_GITHUB_TOKEN)
    print(f"\n  {bold('Pull request lookup:')} {info('enabled' if token else 'disabled')} {dim(f'(${ENV_GITHUB_TOKEN})')}")

    print(f"\n  {dim('Config locations:')}")
    print("    Local:  .autocommitrc (in current directory)")
    print("    Global: ~/.autocommitrc\n")

    return 0
