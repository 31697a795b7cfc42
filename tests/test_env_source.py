from __future__ import annotations

import pytest

from cybrconf import Capability, EnvSource, ValidationError


def test_env_source_reads_cybr_variables(monkeypatch):
    monkeypatch.setenv("CYBR_USERNAME", "env_user")
    monkeypatch.setenv("CYBR_PASSWORD", "env_pass")
    monkeypatch.setenv("CYBR_SESSION_TOKEN", "env_token")
    monkeypatch.setenv("CYBR_DOMAIN", "env.example")
    monkeypatch.setenv("CYBR_SUBDOMAIN", "env_sub")
    monkeypatch.setenv("CYBR_PROFILE", "env_profile")
    monkeypatch.setenv("CYBR_CONFIG_FILE", "/tmp/cybr/config")
    monkeypatch.setenv("CYBR_SHARED_CREDENTIALS_FILE", "/tmp/cybr/credentials")

    source = EnvSource.from_environ()

    assert source.lookup(Capability.DOMAIN) == ("env.example", True)
    assert source.lookup(Capability.SUBDOMAIN) == ("env_sub", True)
    assert source.lookup(Capability.SHARED_CONFIG_PROFILE) == ("env_profile", True)
    assert source.lookup(Capability.SHARED_CONFIG_FILES) == (("/tmp/cybr/config",), True)
    assert source.lookup(Capability.SHARED_CREDENTIALS_FILES) == (("/tmp/cybr/credentials",), True)

    provider, found = source.lookup(Capability.CREDENTIALS_PROVIDER)
    assert found
    credentials = provider.retrieve()
    assert credentials.username == "env_user"
    assert credentials.password == "env_pass"
    assert credentials.session_token == "env_token"
    assert credentials.source == "EnvConfigCredentials"


@pytest.mark.parametrize(
    "environ, expected",
    [
        ({"CYBR_DOMAIN": "a.example", "CYBR_DEFAULT_DOMAIN": "b.example"}, "a.example"),
        ({"CYBR_DEFAULT_DOMAIN": "b.example"}, "b.example"),
        ({"CYBR_DOMAIN": "", "CYBR_DEFAULT_DOMAIN": "b.example"}, "b.example"),
    ],
)
def test_env_source_first_set_variable_wins(environ, expected):
    source = EnvSource.from_environ(environ)

    assert source.lookup(Capability.DOMAIN) == (expected, True)


def test_env_source_alternate_credential_variables():
    source = EnvSource.from_environ({"CYBR_USERNAME_ID": "id_user", "CYBR_SECRET": "secret"})

    provider, _ = source.lookup(Capability.CREDENTIALS_PROVIDER)
    assert provider.retrieve().username == "id_user"
    assert provider.retrieve().password == "secret"


def test_env_source_ignores_incomplete_credentials():
    source = EnvSource.from_environ({"CYBR_USERNAME": "only_user"})

    assert not source.supports(Capability.CREDENTIALS_PROVIDER)
    assert source.lookup(Capability.CREDENTIALS_PROVIDER) == (None, False)


def test_env_source_declares_only_set_values():
    source = EnvSource.from_environ({"CYBR_DEFAULT_PROFILE": "fallback", "OTHER": "1"})

    assert source.capabilities == frozenset({Capability.SHARED_CONFIG_PROFILE})
    assert source.lookup(Capability.SHARED_CONFIG_PROFILE) == ("fallback", True)


def test_env_source_empty_environment():
    source = EnvSource.from_environ({})

    assert source.capabilities == frozenset()


def test_env_source_malformed_domain_raises_on_lookup():
    source = EnvSource.from_environ({"CYBR_DOMAIN": "https://bad domain"})

    assert source.supports(Capability.DOMAIN)
    with pytest.raises(ValidationError):
        source.lookup(Capability.DOMAIN)


@pytest.mark.parametrize(
    "environ, expected",
    [
        ({"CYBR_PROFILE": "named"}, True),
        ({"CYBR_PROFILE": "named", "CYBR_DEFAULT_PROFILE": "fallback"}, True),
        ({"CYBR_DEFAULT_PROFILE": "fallback"}, False),
        ({"CYBR_PROFILE": "", "CYBR_DEFAULT_PROFILE": "fallback"}, False),
        ({}, False),
    ],
)
def test_env_source_explicit_profile_only_from_cybr_profile(environ, expected):
    source = EnvSource.from_environ(environ)

    assert source.explicit_profile is expected
