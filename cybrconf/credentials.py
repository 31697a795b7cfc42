from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional, Protocol, runtime_checkable

from .exceptions import StaticCredentialsEmptyError

STATIC_CREDENTIALS_NAME = "StaticCredentials"


@dataclass(frozen=True)
class Credentials:
    """Username/password credentials and where they were found."""

    username: str = ""
    password: str = field(default="", repr=False)
    session_token: str = field(default="", repr=False)
    source: str = ""
    can_expire: bool = False
    expires: Optional[datetime] = None

    def has_keys(self) -> bool:
        """Return True if both the username and the password are set."""
        return bool(self.username) and bool(self.password)

    def expired(self, now: Optional[datetime] = None) -> bool:
        if not self.can_expire or self.expires is None:
            return False
        now = now or datetime.now(timezone.utc)
        return not self.expires > now


@runtime_checkable
class CredentialsProvider(Protocol):
    def retrieve(self) -> Credentials:
        ...


class StaticCredentialsProvider:
    """Provides a fixed set of credentials."""

    def __init__(self, value: Credentials):
        self.value = value

    @classmethod
    def from_keys(
        cls, username: str, password: str, session_token: str = ""
    ) -> "StaticCredentialsProvider":
        return cls(
            Credentials(
                username=username,
                password=password,
                session_token=session_token,
            )
        )

    def retrieve(self) -> Credentials:
        """
        :raises StaticCredentialsEmptyError: if the username or password is empty.
        """
        if not self.value.has_keys():
            raise StaticCredentialsEmptyError()
        if not self.value.source:
            return replace(self.value, source=STATIC_CREDENTIALS_NAME)
        return self.value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StaticCredentialsProvider):
            return NotImplemented
        return self.value == other.value

    def __repr__(self) -> str:
        return f"StaticCredentialsProvider(source={self.value.source!r})"


class ClientLogMode(enum.IntFlag):
    """Which parts of client operations should be logged."""

    SIGNING = 1
    RETRIES = 2
    REQUEST = 4
    REQUEST_WITH_BODY = 8
    RESPONSE = 16
    RESPONSE_WITH_BODY = 32
    REQUEST_EVENT_MESSAGE = 64
    RESPONSE_EVENT_MESSAGE = 128
