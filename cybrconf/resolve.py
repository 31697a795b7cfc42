from __future__ import annotations

"""
Resolver steps of the configuration pipeline.

Each resolver takes the accumulator (a plain dict of Config fields) and the
ordered list of sources, looks up one capability and writes the first value
found. Resolvers run in the order of DEFAULT_RESOLVERS; some of them read what
earlier ones wrote, so the order is part of the behavior.
"""

import logging
from typing import Any, Callable, Dict, List, MutableMapping, Sequence

from .credentials import ClientLogMode
from .sources import Capability, ConfigSource, Lookup

DEFAULT_DOMAIN = "cyberark.cloud"

DEFAULT_LOGGER_NAME = "cybrconf"

Resolver = Callable[[MutableMapping[str, Any], Sequence[ConfigSource]], None]


def get_value(sources: Sequence[ConfigSource], capability: Capability) -> Lookup:
    """
    Return the value of the first source that provides `capability`.

    Sources are scanned in order; errors raised by a source while looking up
    its value propagate immediately.
    """
    for source in sources:
        if not source.supports(capability):
            continue
        result = source.lookup(capability)
        if result.found:
            return result
    return Lookup.missing()


def resolve_defaults(cfg: MutableMapping[str, Any], sources: Sequence[ConfigSource]) -> None:
    """Reset the accumulator to default values. Must run first."""
    cfg.clear()
    cfg.update(
        subdomain="",
        domain="",
        credentials=None,
        logger=logging.getLogger(DEFAULT_LOGGER_NAME),
        client_log_mode=ClientLogMode(0),
        http_client=None,
        api_options=(),
        config_sources=tuple(sources),
    )


def _set_from(capability: Capability, key: str) -> Resolver:
    def resolver(cfg: MutableMapping[str, Any], sources: Sequence[ConfigSource]) -> None:
        value, found = get_value(sources, capability)
        if found:
            cfg[key] = value

    resolver.__name__ = f"resolve_{key}"
    resolver.__doc__ = f"Set `{key}` from the first source providing {capability.name}."
    return resolver


resolve_subdomain = _set_from(Capability.SUBDOMAIN, "subdomain")
resolve_domain = _set_from(Capability.DOMAIN, "domain")
resolve_logger = _set_from(Capability.LOGGER, "logger")
resolve_client_log_mode = _set_from(Capability.CLIENT_LOG_MODE, "client_log_mode")
resolve_http_client = _set_from(Capability.HTTP_CLIENT, "http_client")
resolve_credentials = _set_from(Capability.CREDENTIALS_PROVIDER, "credentials")


def resolve_default_subdomain(
    cfg: MutableMapping[str, Any], sources: Sequence[ConfigSource]
) -> None:
    """Fall back to a default subdomain when none has been resolved."""
    if cfg.get("subdomain"):
        return
    value, found = get_value(sources, Capability.DEFAULT_SUBDOMAIN)
    if found:
        cfg["subdomain"] = value


def resolve_default_domain(
    cfg: MutableMapping[str, Any], sources: Sequence[ConfigSource]
) -> None:
    """Fall back to a default domain, then to DEFAULT_DOMAIN, when none has been resolved."""
    if cfg.get("domain"):
        return
    value, found = get_value(sources, Capability.DEFAULT_DOMAIN)
    cfg["domain"] = value if found else DEFAULT_DOMAIN


def resolve_api_options(
    cfg: MutableMapping[str, Any], sources: Sequence[ConfigSource]
) -> None:
    value, found = get_value(sources, Capability.API_OPTIONS)
    if found:
        cfg["api_options"] = tuple(value)


DEFAULT_RESOLVERS: List[Resolver] = [
    resolve_defaults,
    resolve_subdomain,
    resolve_default_subdomain,
    resolve_domain,
    resolve_default_domain,
    # user provided logger, then how verbose client operations should be
    resolve_logger,
    resolve_client_log_mode,
    resolve_http_client,
    resolve_api_options,
    resolve_credentials,
]


def resolve_config(
    sources: Sequence[ConfigSource], resolvers: Sequence[Resolver] = DEFAULT_RESOLVERS
) -> Dict[str, Any]:
    """Run `resolvers` in order over `sources` and return the filled accumulator."""
    cfg: Dict[str, Any] = {}
    for resolver in resolvers:
        resolver(cfg, sources)
    return cfg
