from __future__ import annotations

"""
cybrconf - Configuration and credential resolution for the CYBR service client.

This package provides:
- load_default_config: resolves one Config from options, environment and profile files.
- ConfigManager / Config: ordered resolution pipeline and its read-only result.
- Shared profile files: loading, merging and resolving `~/.cybr/config` and
  `~/.cybr/credentials` profiles, including source_profile links.
- Built-in sources: LoadOptions, EnvSource, SharedConfig.
"""

from .credentials import (
    ClientLogMode,
    Credentials,
    CredentialsProvider,
    StaticCredentialsProvider,
)
from .defaults import DEFAULT_SHARED_CONFIG, SharedConfigDefaults
from .exceptions import (
    ConfigurationError,
    CredentialTypeError,
    InvalidProfileError,
    LinkError,
    LoadError,
    PartialCredentialsError,
    ProfileNotFoundError,
    StaticCredentialsEmptyError,
    ValidationError,
)
from .manager import Config, ConfigManager, load_default_config, load_env_config
from .resolve import DEFAULT_DOMAIN, DEFAULT_RESOLVERS
from .shared import (
    SharedConfig,
    load_shared_config,
    load_shared_config_ignore_not_exist,
    load_shared_config_profile,
)
from .sources import Capability, ConfigSource, EnvSource, LoadOptions

__all__ = [
    "Capability",
    "ClientLogMode",
    "Config",
    "ConfigManager",
    "ConfigSource",
    "ConfigurationError",
    "CredentialTypeError",
    "Credentials",
    "CredentialsProvider",
    "DEFAULT_DOMAIN",
    "DEFAULT_RESOLVERS",
    "DEFAULT_SHARED_CONFIG",
    "EnvSource",
    "InvalidProfileError",
    "LinkError",
    "LoadError",
    "LoadOptions",
    "PartialCredentialsError",
    "ProfileNotFoundError",
    "SharedConfig",
    "SharedConfigDefaults",
    "StaticCredentialsEmptyError",
    "StaticCredentialsProvider",
    "ValidationError",
    "load_default_config",
    "load_env_config",
    "load_shared_config",
    "load_shared_config_ignore_not_exist",
    "load_shared_config_profile",
]
