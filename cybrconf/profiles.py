from __future__ import annotations

import logging
from typing import Optional, Set

from .sections import Section, Sections

# Only valid in the config file; marks a named profile section there.
PROFILE_PREFIX = "profile "

DEFAULT_PROFILE = "default"


def process_config_sections(
    sections: Sections, logger: Optional[logging.Logger] = None
) -> None:
    """
    Normalize the section names of a config file in place.

    `default` is kept as-is and `profile <name>` is renamed to `<name>`,
    replacing any section already using that name. Everything else is not a
    valid profile in a config file and is dropped.
    """
    renamed: Set[str] = set()

    for name in sections.names():
        if name in renamed:
            continue

        if name.startswith(PROFILE_PREFIX):
            new_name = name[len(PROFILE_PREFIX):].strip()
            if new_name:
                _rename_profile_section(sections, name, new_name)
                renamed.add(new_name)
                continue

        elif name == DEFAULT_PROFILE:
            continue

        sections.delete_section(name)
        if logger is not None:
            logger.debug(
                "A profile defined with name `%s` is ignored. For use within a "
                "shared configuration file, a non-default profile must have "
                "`%s` prefixed to the profile name.",
                name,
                PROFILE_PREFIX,
            )


def _rename_profile_section(sections: Sections, name: str, new_name: str) -> None:
    section = sections[name]
    sections.delete_section(name)

    if new_name in sections:
        old = sections[new_name]
        section.logs.append(
            f"A profile `{name}` found in {_files_of(section)} overrides the "
            f"profile `{new_name}` defined in {_files_of(old)}."
        )
        sections.delete_section(new_name)

    section.name = new_name
    sections.set_section(new_name, section)


def _files_of(section: Section) -> str:
    files = sorted(set(section.source_file.values()))
    return ", ".join(files) if files else "<empty section>"


def process_credentials_sections(
    sections: Sections, logger: Optional[logging.Logger] = None
) -> None:
    """Drop sections of a credentials file that use the config-only prefix."""
    for name in sections.names():
        if not name.startswith(PROFILE_PREFIX):
            continue

        sections.delete_section(name)
        if logger is not None:
            logger.debug(
                "The profile defined with name `%s` is ignored. A profile with "
                "the `%s` prefix is invalid for the shared credentials file.",
                name,
                PROFILE_PREFIX,
            )
