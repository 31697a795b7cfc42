from __future__ import annotations

"""
Section tables read from profile files.

A profile file is a set of named sections, each holding flat key/value pairs.
INI is the native format; JSON, TOML and YAML files holding a mapping of
section name -> mapping of values are accepted as well (picked by extension).
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import configparser
import json

import yaml

from .exceptions import ParseError, UnableToReadFileError

try:
    import tomllib
except ImportError:  # pragma: no cover - Python < 3.11
    import tomli as tomllib

# configparser folds a DEFAULT section into every other section; profile files
# treat `[DEFAULT]` as an ordinary section, so point the special name at
# something that cannot appear in a header.
_NO_DEFAULT_SECTION = "\x00"

# configparser defaults; comments only at the start of a line
_INI_COMMENT_PREFIXES = ("#", ";")


@dataclass
class Section:
    """A named group of key/value entries, annotated with where they came from."""

    name: str
    values: Dict[str, str] = field(default_factory=dict)
    source_file: Dict[str, str] = field(default_factory=dict)
    logs: List[str] = field(default_factory=list)
    errors: List[Exception] = field(default_factory=list)

    def has(self, key: str) -> bool:
        return key in self.values

    def get(self, key: str, default: str = "") -> str:
        return self.values.get(key, default)

    def update_value(self, key: str, value: str, source_file: str) -> None:
        self.values[key] = value
        self.source_file[key] = source_file

    def remove_value(self, key: str) -> None:
        self.values.pop(key, None)
        self.source_file.pop(key, None)

    def copy(self) -> "Section":
        return Section(
            name=self.name,
            values=dict(self.values),
            source_file=dict(self.source_file),
            logs=list(self.logs),
            errors=list(self.errors),
        )


class Sections(Mapping[str, Section]):
    """Ordered table of sections keyed by (case-sensitive) name."""

    def __init__(self, sections: Mapping[str, Section] | None = None):
        self._sections: Dict[str, Section] = dict(sections or {})

    def __getitem__(self, name: str) -> Section:
        return self._sections[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._sections)

    def __len__(self) -> int:
        return len(self._sections)

    def __repr__(self) -> str:
        return f"<Sections {list(self._sections)}>"

    def names(self) -> List[str]:
        """Return a snapshot of the section names, safe to iterate while mutating."""
        return list(self._sections)

    def set_section(self, name: str, section: Section) -> None:
        self._sections[name] = section

    def delete_section(self, name: str) -> None:
        self._sections.pop(name, None)


def open_file(path: str | Path) -> Sections:
    """
    Parse one profile file into a section table.

    :raises UnableToReadFileError: if the file is missing or cannot be read.
    :raises ParseError: if the content is not UTF-8 or is malformed.
    """
    path = Path(path).expanduser()
    filename = str(path)

    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"{filename}: invalid UTF-8: {exc}") from exc
    except OSError as exc:
        raise UnableToReadFileError(filename, exc) from exc

    suffix = path.suffix.lower()
    if suffix == ".json":
        data = _parse_json(text)
    elif suffix == ".toml":
        data = _parse_toml(text)
    elif suffix in {".yaml", ".yml"}:
        data = _parse_yaml(text)
    else:
        return _parse_ini(text, filename)

    return _sections_from_mapping(data, filename)


def _parse_ini(text: str, filename: str) -> Sections:
    # strict=False: a repeated section or key folds into one, later value wins;
    # each folded key is reported in the section logs
    parser = configparser.ConfigParser(
        interpolation=None,
        strict=False,
        default_section=_NO_DEFAULT_SECTION,
    )
    try:
        parser.read_string(text, source=filename)
    except configparser.Error as exc:
        raise ParseError(f"Error reading INI file {filename}: {exc}") from exc

    overrides = _repeated_keys(text, parser)

    sections = Sections()
    for name in parser.sections():
        section = Section(name=name)
        for key, value in parser.items(name):
            section.update_value(key, value.strip(), filename)
        section.logs.extend(
            duplicate_key_log_message(name, key) for key in overrides.get(name, ())
        )
        sections.set_section(name, section)
    return sections


def duplicate_key_log_message(section: str, key: str) -> str:
    return (
        f"For profile: {section}, overriding {key} value, with a {key} value "
        "found in a duplicate profile defined later in the same file"
    )


def _repeated_keys(text: str, parser: configparser.ConfigParser) -> Dict[str, List[str]]:
    """
    Return, per section, the keys assigned again later in the same INI text.

    Runs over text the parser already accepted, so only headers and option
    lines need recognizing; indented lines continue a value and are skipped.
    """
    seen: Dict[str, Set[str]] = {}
    repeated: Dict[str, List[str]] = {}
    current: Optional[str] = None

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped[0] in _INI_COMMENT_PREFIXES:
            continue
        if line[0].isspace() and current is not None:
            continue

        header = parser.SECTCRE.match(stripped)
        if header:
            current = header.group("header")
            seen.setdefault(current, set())
            continue

        option = parser.OPTCRE.match(stripped)
        if option is None or current is None:
            continue
        key = parser.optionxform(option.group("option").rstrip())
        if key in seen[current]:
            repeated.setdefault(current, []).append(key)
        seen[current].add(key)

    return repeated


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON: {exc}") from exc


def _parse_toml(text: str) -> Any:
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ParseError(f"Invalid TOML: {exc}") from exc


def _parse_yaml(text: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ParseError(f"Invalid YAML: {exc}") from exc


def _sections_from_mapping(data: Any, filename: str) -> Sections:
    sections = Sections()
    if data is None:
        return sections
    if not isinstance(data, Mapping):
        raise ParseError(
            f"{filename}: root must be a mapping of section names to mappings."
        )

    for name, body in data.items():
        if not isinstance(body, Mapping):
            raise ParseError(
                f"{filename}: section {name!r} must be a mapping of keys to values."
            )
        section = Section(name=str(name))
        for key, value in body.items():
            section.update_value(str(key).lower(), _scalar_to_str(value, name, key), filename)
        sections.set_section(section.name, section)
    return sections


def _scalar_to_str(value: Any, section: Any, key: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    if value is None:
        return ""
    raise ParseError(
        f"Cannot use non-scalar value at {section}.{key}; profile sections are "
        "limited to flat key/value pairs."
    )
