from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Callable, Dict, Iterator, List, Sequence

from .defaults import DEFAULT_SHARED_CONFIG, SharedConfigDefaults
from .resolve import DEFAULT_RESOLVERS, Resolver, get_value, resolve_config
from .shared import load_shared_config, load_shared_config_ignore_not_exist
from .sources import Capability, ConfigSource, EnvSource, LoadOptions

Loader = Callable[[Sequence[ConfigSource], SharedConfigDefaults], ConfigSource]


class Config(Mapping[str, Any]):
    """
    Read-only resolved configuration.

    Provides both mapping access (cfg["domain"]) and attribute-style access
    (cfg.domain). Fields: subdomain, domain, credentials, logger,
    client_log_mode, http_client, api_options, config_sources.
    """

    def __init__(self, data: Mapping[str, Any]):
        self._data: Dict[str, Any] = dict(data)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __getattr__(self, name: str) -> Any:
        try:
            return self.__dict__["_data"][name]
        except KeyError as exc:
            raise AttributeError(name) from exc

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "_data" and "_data" not in self.__dict__:
            super().__setattr__(name, value)
            return
        raise AttributeError(f"{type(self).__name__} is read-only")

    def to_dict(self) -> Dict[str, Any]:
        """Return a shallow copy of the resolved fields."""
        return dict(self._data)

    def __repr__(self) -> str:
        # Credentials and clients are not dumped
        return (
            f"<Config subdomain={self._data.get('subdomain')!r} "
            f"domain={self._data.get('domain')!r}>"
        )


class ConfigManager:
    """
    Resolves one Config from an ordered list of configuration sources.

    Typical usage:

        from cybrconf import ConfigManager, EnvSource, LoadOptions

        manager = ConfigManager([LoadOptions(domain="example.cloud")])
        manager.append_from_loaders([load_env_config, load_shared_config])
        cfg = manager.load()

    Sources earlier in the list take precedence: each resolver uses the first
    source that provides its value.
    """

    def __init__(
        self,
        sources: Iterable[ConfigSource] = (),
        *,
        resolvers: Sequence[Resolver] = DEFAULT_RESOLVERS,
        defaults: SharedConfigDefaults = DEFAULT_SHARED_CONFIG,
    ):
        self._sources: List[ConfigSource] = list(sources)
        self._resolvers = list(resolvers)
        self._defaults = defaults

    @property
    def sources(self) -> List[ConfigSource]:
        return list(self._sources)

    def append_from_loaders(self, loaders: Iterable[Loader]) -> None:
        """
        Call each loader in order and append the source it returns.

        A loader sees the sources appended before it. The first error stops
        the iteration and propagates.
        """
        for loader in loaders:
            self._sources.append(loader(tuple(self._sources), self._defaults))

    def load(self) -> Config:
        """
        Run the resolvers over the sources and return the resolved Config.

        Any error raised by a resolver aborts the whole resolution.
        """
        return Config(resolve_config(tuple(self._sources), self._resolvers))


def load_env_config(
    sources: Sequence[ConfigSource], defaults: SharedConfigDefaults
) -> ConfigSource:
    return EnvSource.from_environ()


def config_loaders(sources: Sequence[ConfigSource], environ: Mapping[str, str] | None = None) -> List[Loader]:
    """
    Return the loaders used by load_default_config.

    Naming a profile in `sources` or with CYBR_PROFILE makes a missing profile
    an error. The default profile, including one picked through
    CYBR_DEFAULT_PROFILE, is allowed to be absent.
    """
    env = EnvSource.from_environ(environ)

    def load_env(_: Sequence[ConfigSource], __: SharedConfigDefaults) -> ConfigSource:
        return env

    _, named = get_value(sources, Capability.SHARED_CONFIG_PROFILE)
    strict = named or env.explicit_profile
    shared_loader = load_shared_config if strict else load_shared_config_ignore_not_exist
    return [load_env, shared_loader]


def load_default_config(
    options: LoadOptions | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    defaults: SharedConfigDefaults = DEFAULT_SHARED_CONFIG,
    resolvers: Sequence[Resolver] = DEFAULT_RESOLVERS,
) -> Config:
    """
    Resolve a Config from options, the environment and the shared files.

    Precedence: `options` first, then the environment, then the selected
    shared config profile.
    """
    options = options if options is not None else LoadOptions()
    manager = ConfigManager([options], resolvers=resolvers, defaults=defaults)
    manager.append_from_loaders(config_loaders(manager.sources, environ))
    return manager.load()
