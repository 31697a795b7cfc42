from __future__ import annotations

"""
Shared config profiles: loading the config and credentials files, and
resolving one profile (following source_profile links) into a SharedConfig.
"""

import logging
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from .credentials import Credentials, StaticCredentialsProvider
from .defaults import DEFAULT_SHARED_CONFIG, SharedConfigDefaults
from .exceptions import (
    CredentialTypeError,
    InvalidProfileError,
    LinkError,
    ProfileNotFoundError,
)
from .merge import load_files, merge_sections
from .profiles import process_config_sections, process_credentials_sections
from .resolve import get_value
from .sections import Section, Sections
from .sources import Capability, ConfigSource
from .validation import (
    DOMAIN_KEY,
    PASSWORD_KEY,
    SESSION_TOKEN_KEY,
    SOURCE_PROFILE_KEY,
    SUBDOMAIN_KEY,
    USERNAME_KEY,
)

logger = logging.getLogger(__name__)

SHARED_CREDENTIALS_SOURCE = "SharedConfigCredentials"


@dataclass(frozen=True)
class SharedConfig(ConfigSource):
    """
    A profile resolved from the shared config and credentials files.

    `source` is the resolved profile named by `source_profile_name`, kept as
    a chain rather than flattened.
    """

    profile: str = ""
    credentials: Credentials = field(default_factory=Credentials)
    source_profile_name: str = ""
    source: Optional["SharedConfig"] = None
    subdomain: str = ""
    domain: str = ""
    _values: Dict[Capability, Any] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        if self.domain:
            self._provide(Capability.DOMAIN, self.domain)
        if self.subdomain:
            self._provide(Capability.SUBDOMAIN, self.subdomain)
        credentials = self.resolved_credentials()
        if credentials.has_keys():
            self._provide(
                Capability.CREDENTIALS_PROVIDER, StaticCredentialsProvider(credentials)
            )

    def has_credentials(self) -> bool:
        return bool(self.source_profile_name) or self.credentials.has_keys()

    def resolved_credentials(self) -> Credentials:
        """Return the first complete credentials found walking the source chain."""
        current: Optional[SharedConfig] = self
        while current is not None:
            if current.credentials.has_keys():
                return current.credentials
            current = current.source
        return Credentials()


@dataclass
class _ProfileRecord:
    name: str
    credentials: Credentials = field(default_factory=Credentials)
    source_profile_name: str = ""
    subdomain: str = ""
    domain: str = ""

    def has_credentials(self) -> bool:
        return bool(self.source_profile_name) or self.credentials.has_keys()


def resolve_profile(
    profile: str,
    sections: Sections,
    *,
    files: Iterable[str] = (),
    logger: Optional[logging.Logger] = None,
) -> SharedConfig:
    """
    Resolve `profile` from a fully merged section table.

    source_profile links are followed with an explicit worklist; every profile
    name is visited at most once, so a cycle fails instead of looping.

    :raises ProfileNotFoundError: if `profile` is not in `sections`.
    :raises InvalidProfileError: if a visited section carries load errors.
    :raises LinkError: if a link target is missing, lacks credentials, or
        the links form a cycle.
    """
    files = tuple(files)
    visited: Set[str] = set()
    chain: List[_ProfileRecord] = []
    name = profile

    while True:
        try:
            record = _record_from_section(name, sections, files, logger)
        except ProfileNotFoundError as exc:
            if not chain:
                raise
            raise LinkError(name, cause=exc) from exc

        # a linked profile with its own credentials ends the chain
        if chain and record.credentials.has_keys():
            chain.append(record)
            break

        if name in visited:
            path = " -> ".join([r.name for r in chain] + [name])
            raise LinkError(name, reason=f"source_profile links form a cycle: {path}")
        visited.add(name)

        _validate_credential_type(record)

        if not record.source_profile_name:
            chain.append(record)
            break

        # the link target must supply the credentials, never a mix
        record.credentials = Credentials()
        chain.append(record)
        name = record.source_profile_name

    for child in chain[1:]:
        if not child.has_credentials():
            raise LinkError(child.name)

    resolved = _shared_config(chain[-1], source=None)
    for record in reversed(chain[:-1]):
        resolved = _shared_config(record, source=resolved)
    return resolved


def _shared_config(record: _ProfileRecord, source: Optional[SharedConfig]) -> SharedConfig:
    return SharedConfig(
        profile=record.name,
        credentials=record.credentials,
        source_profile_name=record.source_profile_name,
        source=source,
        subdomain=record.subdomain,
        domain=record.domain,
    )


def _record_from_section(
    name: str,
    sections: Sections,
    files: Sequence[str],
    logger: Optional[logging.Logger],
) -> _ProfileRecord:
    section = sections.get(name)
    if section is None:
        raise ProfileNotFoundError(name, files)

    if logger is not None:
        for message in section.logs:
            logger.debug(message)

    if section.errors:
        raise InvalidProfileError(name, section.errors)

    record = _ProfileRecord(name=name)
    _update_string(record, "domain", section, DOMAIN_KEY)
    _update_string(record, "subdomain", section, SUBDOMAIN_KEY)
    _update_string(record, "source_profile_name", section, SOURCE_PROFILE_KEY)

    credentials = Credentials(
        username=section.get(USERNAME_KEY),
        password=section.get(PASSWORD_KEY),
        session_token=section.get(SESSION_TOKEN_KEY),
        source=f"{SHARED_CREDENTIALS_SOURCE}: {section.source_file.get(USERNAME_KEY, '')}",
    )
    if credentials.has_keys():
        record.credentials = credentials

    return record


def _update_string(record: _ProfileRecord, attr: str, section: Section, key: str) -> None:
    # only present keys overwrite, absent keys keep the current value
    if section.has(key):
        setattr(record, attr, section.get(key))


def _validate_credential_type(record: _ProfileRecord) -> None:
    if not _one_or_none(bool(record.source_profile_name)):
        raise CredentialTypeError(record.name)


def _one_or_none(*flags: bool) -> bool:
    return sum(1 for flag in flags if flag) <= 1


def load_shared_config_profile(
    profile: str,
    *,
    config_files: Optional[Iterable[str | Path]] = None,
    credentials_files: Optional[Iterable[str | Path]] = None,
    logger: Optional[logging.Logger] = None,
    defaults: SharedConfigDefaults = DEFAULT_SHARED_CONFIG,
) -> SharedConfig:
    """
    Load `profile` from the shared config and credentials files.

    The order of the files determines precedence: values in later files
    override values in earlier ones, and credentials files override config
    files. `None` uses the files of `defaults`; an empty list loads no files.
    Files that do not exist are skipped.
    """
    config_files = [str(f) for f in (defaults.config_files if config_files is None else config_files)]
    credentials_files = [
        str(f)
        for f in (defaults.credentials_files if credentials_files is None else credentials_files)
    ]

    # profile prefixes are resolved per file, before values are folded together
    config_sections = load_files(
        config_files, normalize=partial(process_config_sections, logger=logger)
    )
    credentials_sections = load_files(
        credentials_files, normalize=partial(process_credentials_sections, logger=logger)
    )
    merge_sections(config_sections, credentials_sections)

    return resolve_profile(
        profile,
        config_sections,
        files=config_files + credentials_files,
        logger=logger,
    )


def load_shared_config(
    sources: Sequence[ConfigSource],
    defaults: SharedConfigDefaults = DEFAULT_SHARED_CONFIG,
) -> SharedConfig:
    """
    Load the shared config profile selected by the already loaded sources.

    The profile name, the file lists and whether to log configuration
    warnings are looked up in `sources`, falling back to `defaults`.
    """
    profile, found = get_value(sources, Capability.SHARED_CONFIG_PROFILE)
    if not found:
        profile = defaults.profile

    config_files, found = get_value(sources, Capability.SHARED_CONFIG_FILES)
    if not found:
        config_files = defaults.config_files

    credentials_files, found = get_value(sources, Capability.SHARED_CREDENTIALS_FILES)
    if not found:
        credentials_files = defaults.credentials_files

    warnings_logger: Optional[logging.Logger] = None
    log_warnings, found = get_value(sources, Capability.LOG_CONFIGURATION_WARNINGS)
    if found and log_warnings:
        warnings_logger, found = get_value(sources, Capability.LOGGER)
        if not found:
            warnings_logger = logger

    return load_shared_config_profile(
        profile,
        config_files=config_files,
        credentials_files=credentials_files,
        logger=warnings_logger,
        defaults=defaults,
    )


def load_shared_config_ignore_not_exist(
    sources: Sequence[ConfigSource],
    defaults: SharedConfigDefaults = DEFAULT_SHARED_CONFIG,
) -> SharedConfig:
    """Like load_shared_config, but a missing profile yields an empty SharedConfig."""
    try:
        return load_shared_config(sources, defaults)
    except ProfileNotFoundError as exc:
        logger.debug("Shared config profile not loaded: %s", exc)
        return SharedConfig(profile=exc.profile)
