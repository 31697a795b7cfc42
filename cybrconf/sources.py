from __future__ import annotations

import enum
import logging
import os
from abc import ABC
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, FrozenSet, NamedTuple, Optional, Sequence, Tuple

from .credentials import ClientLogMode, Credentials, CredentialsProvider, StaticCredentialsProvider
from .validation import DOMAIN_KEY, SUBDOMAIN_KEY, validate_value


class Capability(enum.Enum):
    """A typed configuration value a source may be able to provide."""

    DOMAIN = "domain"
    DEFAULT_DOMAIN = "default_domain"
    SUBDOMAIN = "subdomain"
    DEFAULT_SUBDOMAIN = "default_subdomain"
    CREDENTIALS_PROVIDER = "credentials_provider"
    LOGGER = "logger"
    CLIENT_LOG_MODE = "client_log_mode"
    HTTP_CLIENT = "http_client"
    API_OPTIONS = "api_options"
    SHARED_CONFIG_PROFILE = "shared_config_profile"
    SHARED_CONFIG_FILES = "shared_config_files"
    SHARED_CREDENTIALS_FILES = "shared_credentials_files"
    LOG_CONFIGURATION_WARNINGS = "log_configuration_warnings"


class Lookup(NamedTuple):
    value: Any
    found: bool

    @classmethod
    def missing(cls) -> "Lookup":
        return cls(None, False)


class ConfigSource(ABC):
    """
    Base class for configuration sources.

    A source declares the capabilities it supports when it is built;
    `lookup()` is only consulted for those. Sources are immutable snapshots.
    """

    def __init__(self) -> None:
        self._values: Dict[Capability, Any] = {}

    def _provide(self, capability: Capability, value: Any) -> None:
        self._values[capability] = value

    @property
    def capabilities(self) -> FrozenSet[Capability]:
        return frozenset(self._values)

    def supports(self, capability: Capability) -> bool:
        return capability in self._values

    def lookup(self, capability: Capability) -> Lookup:
        """
        Return the value for `capability`, or Lookup.missing() if not provided.

        :raises ConfigurationError: if the value is present but malformed.
        """
        if capability not in self._values:
            return Lookup.missing()
        return Lookup(self._values[capability], True)


def _validated(key: str) -> Callable[[str], str]:
    return lambda value: validate_value(key, value)


class ValidatingSource(ConfigSource):
    """A source whose string values are checked when they are looked up."""

    _validators: Dict[Capability, Callable[[str], str]] = {
        Capability.DOMAIN: _validated(DOMAIN_KEY),
        Capability.DEFAULT_DOMAIN: _validated(DOMAIN_KEY),
        Capability.SUBDOMAIN: _validated(SUBDOMAIN_KEY),
        Capability.DEFAULT_SUBDOMAIN: _validated(SUBDOMAIN_KEY),
    }

    def lookup(self, capability: Capability) -> Lookup:
        result = super().lookup(capability)
        validator = self._validators.get(capability)
        if result.found and validator is not None:
            validator(result.value)
        return result


@dataclass(frozen=True)
class LoadOptions(ValidatingSource):
    """
    Programmatic configuration; the highest precedence source.

    Fields left as None (or empty strings) are not provided. An empty list
    of files is provided, and means "load no files".
    """

    domain: str = ""
    default_domain: str = ""
    subdomain: str = ""
    default_subdomain: str = ""
    credentials: Optional[CredentialsProvider] = None
    http_client: Any = None
    logger: Optional[logging.Logger] = None
    client_log_mode: Optional[ClientLogMode] = None
    shared_config_profile: str = ""
    shared_config_files: Optional[Sequence[str]] = None
    shared_credentials_files: Optional[Sequence[str]] = None
    log_configuration_warnings: Optional[bool] = None
    api_options: Optional[Sequence[Callable[..., Any]]] = None
    _values: Dict[Capability, Any] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        for f in fields(self):
            if f.name.startswith("_"):
                continue
            value = getattr(self, f.name)
            if value is None or value == "":
                continue
            if isinstance(value, list):
                value = tuple(value)
            self._provide(Capability(_OPTION_CAPABILITY.get(f.name, f.name)), value)


_OPTION_CAPABILITY = {"credentials": Capability.CREDENTIALS_PROVIDER.value}


CREDENTIALS_SOURCE_NAME = "EnvConfigCredentials"

USERNAME_ENV_KEYS = ("CYBR_USERNAME", "CYBR_USERNAME_ID")
PASSWORD_ENV_KEYS = ("CYBR_PASSWORD", "CYBR_SECRET")
SESSION_TOKEN_ENV_KEYS = ("CYBR_SESSION_TOKEN",)
DOMAIN_ENV_KEYS = ("CYBR_DOMAIN", "CYBR_DEFAULT_DOMAIN")
SUBDOMAIN_ENV_KEYS = ("CYBR_SUBDOMAIN", "CYBR_DEFAULT_SUBDOMAIN")
PROFILE_ENV_VAR = "CYBR_PROFILE"
PROFILE_ENV_KEYS = (PROFILE_ENV_VAR, "CYBR_DEFAULT_PROFILE")
CONFIG_FILE_ENV_KEYS = ("CYBR_CONFIG_FILE",)
CREDENTIALS_FILE_ENV_KEYS = ("CYBR_SHARED_CREDENTIALS_FILE",)


class EnvSource(ValidatingSource):
    """
    Configuration read from environment variables.

    Each field may be set by several variables; the first one set (in the
    order of the *_ENV_KEYS tuples) wins. Credentials are only provided when
    both the username and the password are set. `explicit_profile` is True
    when the profile was named by CYBR_PROFILE rather than only defaulted
    through CYBR_DEFAULT_PROFILE.
    """

    def __init__(
        self,
        *,
        credentials: Credentials | None = None,
        domain: str = "",
        subdomain: str = "",
        shared_config_profile: str = "",
        explicit_profile: bool = False,
        shared_config_file: str = "",
        shared_credentials_file: str = "",
    ):
        super().__init__()
        self.credentials = credentials or Credentials(source=CREDENTIALS_SOURCE_NAME)
        self.domain = domain
        self.subdomain = subdomain
        self.shared_config_profile = shared_config_profile
        self.explicit_profile = explicit_profile and bool(shared_config_profile)
        self.shared_config_file = shared_config_file
        self.shared_credentials_file = shared_credentials_file

        if self.credentials.has_keys():
            self._provide(
                Capability.CREDENTIALS_PROVIDER,
                StaticCredentialsProvider(self.credentials),
            )
        if domain:
            self._provide(Capability.DOMAIN, domain)
        if subdomain:
            self._provide(Capability.SUBDOMAIN, subdomain)
        if shared_config_profile:
            self._provide(Capability.SHARED_CONFIG_PROFILE, shared_config_profile)
        if shared_config_file:
            self._provide(Capability.SHARED_CONFIG_FILES, (shared_config_file,))
        if shared_credentials_file:
            self._provide(Capability.SHARED_CREDENTIALS_FILES, (shared_credentials_file,))

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> "EnvSource":
        env = os.environ if environ is None else environ

        return cls(
            credentials=Credentials(
                username=_first_set(env, USERNAME_ENV_KEYS),
                password=_first_set(env, PASSWORD_ENV_KEYS),
                session_token=_first_set(env, SESSION_TOKEN_ENV_KEYS),
                source=CREDENTIALS_SOURCE_NAME,
            ),
            domain=_first_set(env, DOMAIN_ENV_KEYS),
            subdomain=_first_set(env, SUBDOMAIN_ENV_KEYS),
            shared_config_profile=_first_set(env, PROFILE_ENV_KEYS),
            explicit_profile=bool(env.get(PROFILE_ENV_VAR)),
            shared_config_file=_first_set(env, CONFIG_FILE_ENV_KEYS),
            shared_credentials_file=_first_set(env, CREDENTIALS_FILE_ENV_KEYS),
        )

    def __repr__(self) -> str:
        keys = ", ".join(sorted(c.value for c in self.capabilities))
        return f"<EnvSource provides=[{keys}]>"


def _first_set(env: Mapping[str, str], keys: Tuple[str, ...]) -> str:
    for key in keys:
        value = env.get(key, "")
        if value:
            return value
    return ""
