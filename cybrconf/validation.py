from __future__ import annotations

from typing import Any, Dict, List, Mapping

import jsonschema

from .exceptions import ValidationError
from .sections import Section

DOMAIN_KEY = "domain"
SUBDOMAIN_KEY = "subdomain"
SOURCE_PROFILE_KEY = "source_profile"
USERNAME_KEY = "cybr_username"
PASSWORD_KEY = "cybr_password"
SESSION_TOKEN_KEY = "cybr_session_token"

# Only keys the resolver understands are checked; unknown keys pass through.
PROFILE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        DOMAIN_KEY: {
            "type": "string",
            "pattern": r"^[A-Za-z0-9._-]*$",
        },
        SUBDOMAIN_KEY: {
            "type": "string",
            "pattern": r"^[A-Za-z0-9_-]*$",
        },
        SOURCE_PROFILE_KEY: {"type": "string", "pattern": r"^[^\[\]]*$"},
        USERNAME_KEY: {"type": "string"},
        PASSWORD_KEY: {"type": "string"},
        SESSION_TOKEN_KEY: {"type": "string"},
    },
}

_validator = jsonschema.Draft7Validator(PROFILE_SCHEMA)


def validate_values(data: Mapping[str, Any]) -> List[ValidationError]:
    """
    Validate profile values against PROFILE_SCHEMA.

    :returns: one ValidationError per offending key, in key order.
    """
    found: List[ValidationError] = []
    for error in sorted(_validator.iter_errors(dict(data)), key=lambda e: list(e.path)):
        path = list(error.path)
        key = str(path[0]) if path else "<root>"
        value = data.get(key, "") if path else ""
        found.append(ValidationError(key, str(value), error.message))
    return found


def validate_section(section: Section) -> List[ValidationError]:
    """Return the malformed-value errors of one section."""
    return validate_values(section.values)


def validate_value(key: str, value: str) -> str:
    """
    Validate a single value taken from outside a profile file.

    :raises ValidationError: if the value is malformed.
    """
    errors = validate_values({key: value})
    if errors:
        raise errors[0]
    return value
