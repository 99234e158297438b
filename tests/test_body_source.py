"""Unit tests for reading and validating the body file."""

import pytest

from body_server.service.body_source import (
    BodyError,
    BodySource,
    BodyUnavailableError,
    InvalidBodyError,
)


def test_normalize_removes_newlines_and_carriage_returns_everywhere() -> None:
    text = '{\r\n  "a": "x\ny",\r\n  "b": 2\n}\n'

    assert BodySource.normalize(text) == '{  "a": "xy",  "b": 2}'


def test_load_parses_multiline_object(write_body) -> None:
    write_body('{\n  "name": "demo",\r\n  "items": [1, 2, 3]\n}\n')

    assert BodySource().load() == {"name": "demo", "items": [1, 2, 3]}


@pytest.mark.parametrize(
    "content, expected",
    [
        ("[1,\n2]", [1, 2]),
        ('"text"', "text"),
        ("42\n", 42),
        ("null", None),
    ],
)
def test_load_accepts_any_json_value(write_body, content, expected) -> None:
    write_body(content)

    assert BodySource().load() == expected


def test_literal_newline_inside_string_is_stripped(write_body) -> None:
    write_body('{"s": "first\nsecond"}')

    assert BodySource().load() == {"s": "firstsecond"}


def test_missing_file_raises_unavailable(workdir) -> None:
    source = BodySource()

    with pytest.raises(BodyUnavailableError) as exc_info:
        source.load()

    assert exc_info.value.kind == "body_unreadable"
    assert "body.txt" in str(exc_info.value)


def test_directory_in_place_of_file_raises_unavailable(workdir) -> None:
    (workdir / "body.txt").mkdir()

    with pytest.raises(BodyUnavailableError):
        BodySource().load()


def test_invalid_utf8_raises_unavailable(write_body) -> None:
    write_body(b'{"a": "\xff"}')

    with pytest.raises(BodyUnavailableError):
        BodySource().load()


@pytest.mark.parametrize("content", ['{"a": }', "", "   ", "{'a': 1}", '{"a": 1} trailing', "NaN", "[Infinity]"])
def test_invalid_json_raises_invalid_body(write_body, content) -> None:
    write_body(content)

    with pytest.raises(InvalidBodyError) as exc_info:
        BodySource().load()

    assert exc_info.value.kind == "invalid_body_json"
    assert isinstance(exc_info.value, BodyError)


def test_relative_path_follows_working_directory(tmp_path, monkeypatch) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    (first / "body.txt").write_text('{"dir": 1}', encoding="utf-8")
    (second / "body.txt").write_text('{"dir": 2}', encoding="utf-8")
    source = BodySource()

    monkeypatch.chdir(first)
    assert source.load() == {"dir": 1}
    monkeypatch.chdir(second)
    assert source.load() == {"dir": 2}


def test_file_is_read_fresh_each_time(write_body) -> None:
    source = BodySource()
    write_body('{"v": 1}')
    assert source.load() == {"v": 1}

    write_body('{"v": 2}')
    assert source.load() == {"v": 2}


def test_compact_drops_whitespace_only_outside_strings() -> None:
    text = '{ "k" :\t[ 1 , "a \\" b" ] , "e" : "\\\\" }'

    assert BodySource.compact(text) == '{"k":[1,"a \\" b"],"e":"\\\\"}'


def test_load_json_keeps_number_spelling(write_body) -> None:
    write_body('{"big": 1e400,\r\n "small": -0.0, "int": 123456789012345678901234567890}\n')

    assert BodySource().load_json() == '{"big":1e400,"small":-0.0,"int":123456789012345678901234567890}'


def test_load_json_validates_before_compacting(write_body) -> None:
    write_body('{"a": }')

    with pytest.raises(InvalidBodyError):
        BodySource().load_json()
