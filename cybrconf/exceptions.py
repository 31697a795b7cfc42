from __future__ import annotations

from typing import Iterable, Sequence


class ConfigurationError(Exception):
    """Raised when there is a problem loading or resolving configuration."""


class UnableToReadFileError(ConfigurationError):
    """A profile file does not exist or cannot be opened."""

    def __init__(self, filename: str, cause: BaseException | None = None):
        self.filename = filename
        self.cause = cause
        super().__init__(f"unable to read file {filename}: {cause}")


class ParseError(ConfigurationError):
    """Raised when the content of a profile file is malformed."""


class LoadError(ConfigurationError):
    """A profile file exists but failed to load."""

    def __init__(self, filename: str, cause: BaseException):
        self.filename = filename
        self.cause = cause
        super().__init__(f"failed to load shared config file, {filename}, {cause}")


class ValidationError(ConfigurationError):
    """Raised when a configuration value is malformed."""

    def __init__(self, key: str, value: str, message: str):
        self.key = key
        self.value = value
        super().__init__(f"invalid value for {key}={value!r}: {message}")


class ProfileNotFoundError(ConfigurationError):
    """The requested profile is not defined in any of the loaded files."""

    def __init__(self, profile: str, files: Iterable[str] = ()):
        self.profile = profile
        self.files = tuple(files)
        message = f"failed to get shared config profile, {profile}"
        if self.files:
            message += f" (searched {', '.join(self.files)})"
        super().__init__(message)


class PartialCredentialsError(ConfigurationError):
    """A section holds some, but not all, of the credential group keys."""

    def __init__(self, profile: str, filename: str | None = None):
        self.profile = profile
        self.filename = filename
        message = f"partial credentials found for profile {profile}"
        if filename:
            message += f" in {filename}"
        super().__init__(message)


class InvalidProfileError(ConfigurationError):
    """A profile section carries fatal errors recorded while loading."""

    def __init__(self, profile: str, errors: Sequence[BaseException]):
        self.profile = profile
        self.errors = list(errors)
        details = "; ".join(
            f"{i}, {err}" for i, err in enumerate(self.errors, start=1)
        )
        super().__init__(f"error using profile {profile}: {details}")


class LinkError(ConfigurationError):
    """A source_profile link is unresolvable or lacks credentials."""

    def __init__(
        self,
        profile: str,
        cause: BaseException | None = None,
        reason: str | None = None,
    ):
        self.profile = profile
        self.cause = cause
        if reason is None:
            reason = str(cause) if cause is not None else "profile has no credentials"
        super().__init__(f"failed to load credentials of source profile {profile}, {reason}")


class CredentialTypeError(ConfigurationError):
    """More than one credential acquisition mechanism is set on a profile."""

    def __init__(self, profile: str):
        self.profile = profile
        super().__init__(
            f"only one credential type may be specified per profile ({profile}): "
            "source profile"
        )


class StaticCredentialsEmptyError(ConfigurationError):
    """Static credentials are missing the username or the password."""

    def __init__(self) -> None:
        super().__init__("static credentials are empty")
