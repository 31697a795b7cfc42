from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Tuple

from .exceptions import (
    LoadError,
    ParseError,
    PartialCredentialsError,
    UnableToReadFileError,
)
from .sections import Section, Sections, open_file
from .validation import (
    PASSWORD_KEY,
    SESSION_TOKEN_KEY,
    USERNAME_KEY,
    validate_section,
)


@dataclass(frozen=True)
class KeyGroup:
    """Keys that are only meaningful together in one section of one file."""

    name: str
    required: Tuple[str, ...]
    optional: Tuple[str, ...] = ()

    @property
    def members(self) -> Tuple[str, ...]:
        return self.required + self.optional

    def is_complete(self, section: Section) -> bool:
        return all(section.has(key) for key in self.required)

    def is_partial(self, section: Section) -> bool:
        present = [section.has(key) for key in self.required]
        return any(present) and not all(present)


CREDENTIALS_GROUP = KeyGroup(
    name="credentials",
    required=(USERNAME_KEY, PASSWORD_KEY),
    optional=(SESSION_TOKEN_KEY,),
)

KEY_GROUPS: Tuple[KeyGroup, ...] = (CREDENTIALS_GROUP,)


def merge_key_log_message(section: str, key: str, old_file: str, new_file: str) -> str:
    return (
        f"For profile: {section}, overriding {key} value, defined in {old_file} "
        f"with a {key} value found in a duplicate profile defined at file {new_file}."
    )


def flag_section(section: Section, groups: Iterable[KeyGroup] = KEY_GROUPS) -> None:
    """
    Record the fatal errors of a section read from a single file.

    Partial key groups and malformed values are appended to section.errors.
    Running it twice on the same section does not duplicate errors.
    """
    for group in groups:
        if not group.is_partial(section):
            continue
        if any(isinstance(err, PartialCredentialsError) for err in section.errors):
            continue
        filename = next(
            (section.source_file[k] for k in group.required if k in section.source_file),
            None,
        )
        section.errors.append(PartialCredentialsError(section.name, filename))

    known = {str(err) for err in section.errors}
    for err in validate_section(section):
        if str(err) not in known:
            section.errors.append(err)


def merge_sections(
    dst: Sections,
    src: Sections,
    groups: Iterable[KeyGroup] = KEY_GROUPS,
) -> None:
    """
    Merge the sections of src into dst in place; src wins on conflicts.

    Complete key groups overwrite as a whole, every other key independently.
    Each overwrite of an existing key is recorded in the destination section
    logs, after the diagnostics the source section already carries.
    """
    groups = tuple(groups)
    grouped = {key for group in groups for key in group.members}

    for name in src.names():
        src_section = src[name].copy()
        flag_section(src_section, groups)

        if name not in dst:
            dst.set_section(name, src_section)
            continue

        dst_section = dst[name]
        dst_section.logs.extend(
            message for message in src_section.logs if message not in dst_section.logs
        )

        # errors are evaluated per file and never cleared by a later file
        known = {str(err) for err in dst_section.errors}
        for err in src_section.errors:
            if str(err) not in known:
                dst_section.errors.append(err)

        for group in groups:
            if group.is_complete(src_section):
                _merge_group(src_section, dst_section, group)

        for key in src_section.values:
            if key in grouped:
                continue
            _merge_key(src_section, dst_section, key)


def _merge_group(src: Section, dst: Section, group: KeyGroup) -> None:
    for key in group.members:
        if src.has(key):
            _merge_key(src, dst, key)
        elif dst.has(key):
            # a group is replaced whole, never mixed across files
            dst.remove_value(key)


def _merge_key(src: Section, dst: Section, key: str) -> None:
    if dst.has(key):
        dst.logs.append(
            merge_key_log_message(
                dst.name, key, dst.source_file.get(key, ""), src.source_file.get(key, "")
            )
        )
    dst.update_value(key, src.values[key], src.source_file.get(key, ""))


def load_files(
    filenames: Iterable[str | Path],
    normalize: Optional[Callable[[Sections], None]] = None,
) -> Sections:
    """
    Load and fold profile files in order; later files take precedence.

    Files that cannot be read are treated as empty. Each file is normalized
    on its own before it is merged.

    :raises LoadError: if a file exists but is malformed.
    """
    merged = Sections()

    for filename in filenames:
        try:
            sections = open_file(filename)
        except UnableToReadFileError:
            continue
        except ParseError as exc:
            raise LoadError(str(filename), exc) from exc

        if normalize is not None:
            normalize(sections)

        merge_sections(merged, sections)

    return merged
