from __future__ import annotations

import json
from pathlib import Path

import pytest

from cybrconf.exceptions import ParseError, UnableToReadFileError
from cybrconf.sections import Section, Sections, open_file


def test_open_file_reads_ini_sections_with_origin(tmp_path: Path):
    config_file = tmp_path / "config"
    config_file.write_text(
        "[default]\n"
        "subdomain = default_subdomain\n"
        "\n"
        "[profile alt]\n"
        "Domain = example.cloud\n",
        encoding="utf-8",
    )

    sections = open_file(config_file)

    assert list(sections) == ["default", "profile alt"]
    assert sections["default"].get("subdomain") == "default_subdomain"
    # keys are case-insensitive, section names are not touched
    assert sections["profile alt"].get("domain") == "example.cloud"
    assert sections["profile alt"].source_file["domain"] == str(config_file)


def test_open_file_folds_repeated_sections_later_value_wins(tmp_path: Path):
    config_file = tmp_path / "config"
    config_file.write_text(
        "[profile dup]\n"
        "domain = one.example\n"
        "subdomain = first\n"
        "[profile dup]\n"
        "domain = two.example\n",
        encoding="utf-8",
    )

    section = open_file(config_file)["profile dup"]

    assert section.get("domain") == "two.example"
    assert section.get("subdomain") == "first"
    assert section.logs == [
        "For profile: profile dup, overriding domain value, with a domain value "
        "found in a duplicate profile defined later in the same file"
    ]


def test_open_file_logs_key_repeated_within_one_section(tmp_path: Path):
    config_file = tmp_path / "config"
    config_file.write_text(
        "[default]\n"
        "# subdomain = commented\n"
        "Subdomain = first\n"
        "description = spans\n"
        "  subdomain = continuation line\n"
        "subdomain: second\n"
        "[other]\n"
        "subdomain = unrelated\n",
        encoding="utf-8",
    )

    sections = open_file(config_file)

    assert sections["default"].get("subdomain") == "second"
    assert len(sections["default"].logs) == 1
    assert "overriding subdomain value" in sections["default"].logs[0]
    assert sections["other"].logs == []


def test_open_file_without_repeats_has_no_logs(tmp_path: Path):
    config_file = tmp_path / "config"
    config_file.write_text("[a]\ndomain = a.example\n[b]\ndomain = b.example\n", encoding="utf-8")

    sections = open_file(config_file)

    assert sections["a"].logs == sections["b"].logs == []


def test_open_file_keeps_uppercase_default_as_plain_section(tmp_path: Path):
    config_file = tmp_path / "config"
    config_file.write_text(
        "[DEFAULT]\nsubdomain = shouting\n[default]\ndomain = example.cloud\n",
        encoding="utf-8",
    )

    sections = open_file(config_file)

    assert set(sections) == {"DEFAULT", "default"}
    assert not sections["default"].has("subdomain")


def test_open_file_missing_raises_unable_to_read(tmp_path: Path):
    with pytest.raises(UnableToReadFileError):
        open_file(tmp_path / "does_not_exist")


def test_open_file_invalid_utf8_raises_parse_error(tmp_path: Path):
    config_file = tmp_path / "config"
    config_file.write_bytes(b"[default]\nsubdomain = tenant\n# caf\xe9\n")

    with pytest.raises(ParseError) as exc_info:
        open_file(config_file)

    assert "invalid UTF-8" in str(exc_info.value)


def test_open_file_malformed_ini_raises_parse_error(tmp_path: Path):
    config_file = tmp_path / "config"
    config_file.write_text("subdomain = no_section_header\n", encoding="utf-8")

    with pytest.raises(ParseError):
        open_file(config_file)


def test_open_file_reads_json_sections(tmp_path: Path):
    config_file = tmp_path / "config.json"
    config_file.write_text(
        json.dumps({"default": {"subdomain": "json_sub", "cybr_username": "u", "port": 443}}),
        encoding="utf-8",
    )

    section = open_file(config_file)["default"]

    assert section.values == {"subdomain": "json_sub", "cybr_username": "u", "port": "443"}


def test_open_file_reads_yaml_sections(tmp_path: Path):
    config_file = tmp_path / "credentials.yaml"
    config_file.write_text(
        "acct:\n"
        "  cybr_username: user\n"
        "  cybr_password: secret\n"
        "  enabled: true\n",
        encoding="utf-8",
    )

    section = open_file(config_file)["acct"]

    assert section.get("cybr_username") == "user"
    assert section.get("enabled") == "true"


def test_open_file_reads_toml_sections(tmp_path: Path):
    config_file = tmp_path / "config.toml"
    config_file.write_text(
        '["profile alt"]\nsubdomain = "toml_sub"\n',
        encoding="utf-8",
    )

    assert open_file(config_file)["profile alt"].get("subdomain") == "toml_sub"


def test_open_file_rejects_nested_values(tmp_path: Path):
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"default": {"nested": {"a": 1}}}), encoding="utf-8")

    with pytest.raises(ParseError):
        open_file(config_file)


def test_open_file_rejects_non_mapping_root(tmp_path: Path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ParseError):
        open_file(config_file)


def test_sections_table_replaces_and_deletes():
    table = Sections()
    table.set_section("a", Section(name="a", values={"k": "1"}))
    table.set_section("a", Section(name="a", values={"k": "2"}))
    table.set_section("b", Section(name="b"))

    assert len(table) == 2
    assert table["a"].get("k") == "2"

    table.delete_section("b")
    table.delete_section("missing")
    assert table.names() == ["a"]


def test_section_copy_is_independent():
    section = Section(name="a")
    section.update_value("domain", "example.cloud", "file1")

    clone = section.copy()
    clone.update_value("domain", "other.cloud", "file2")
    clone.logs.append("changed")

    assert section.get("domain") == "example.cloud"
    assert section.source_file["domain"] == "file1"
    assert section.logs == []
