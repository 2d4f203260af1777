from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from cannon_core.updates import (
    Descriptor,
    MalformedEntry,
    ManifestParseError,
    NameNotFound,
    Redirect,
    lookup,
    parse_last_modified,
    parse_manifest,
)


def test_parse_manifest_reads_json_object() -> None:
    manifest = parse_manifest(b'\xef\xbb\xbf{"Frobnicate": "https://example/m.json"}')
    assert manifest == {"Frobnicate": "https://example/m.json"}


@pytest.mark.parametrize("body", [b"{broken", b"[1, 2]", b"\xff\xfe"])
def test_parse_manifest_rejects_bad_documents(body: bytes) -> None:
    with pytest.raises(ManifestParseError):
        parse_manifest(body, location="https://example/m.json")


def test_string_entry_is_a_redirect() -> None:
    entry = lookup({"Frobnicate": "https://example/next.json"}, "Frobnicate")
    assert entry == Redirect(target="https://example/next.json")


def test_object_entry_is_a_descriptor() -> None:
    entry = lookup({"Frobnicate": {"uri": "https://example/f.pkg", "last_modified": 1700000000}}, "Frobnicate")
    assert isinstance(entry, Descriptor)
    assert entry.target == "https://example/f.pkg"
    assert entry.server_modified == datetime.fromtimestamp(1700000000, tz=timezone.utc)


def test_descriptor_without_time() -> None:
    entry = lookup({"Frobnicate": {"uri": "https://example/f.pkg"}}, "Frobnicate")
    assert entry == Descriptor(target="https://example/f.pkg", server_modified=None)


def test_missing_name() -> None:
    with pytest.raises(NameNotFound, match="Frobnicate"):
        lookup({"frobnicate": "https://example/x"}, "Frobnicate")


@pytest.mark.parametrize(
    "value, message",
    [
        (42, "integer"),
        ([], "array"),
        (None, "null"),
        ({}, "uri is not defined"),
        ({"uri": 7}, "expected string"),
        ({"uri": "relative/path.pkg"}, "not an absolute URI"),
        ("not a url", "not an absolute URI"),
        ({"uri": "https://example/f.pkg", "last_modified": 1.5}, "float"),
        ({"uri": "https://example/f.pkg", "last_modified": None}, "null"),
        ({"uri": "https://example/f.pkg", "last_modified": True}, "boolean"),
        ({"uri": "https://example/f.pkg", "last_modified": "next tuesday"}, "next tuesday"),
    ],
)
def test_malformed_entries(value: object, message: str) -> None:
    with pytest.raises(MalformedEntry, match=message):
        lookup({"Frobnicate": value}, "Frobnicate")


def test_last_modified_representations() -> None:
    expected = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
    assert parse_last_modified(1700000000) == expected
    assert parse_last_modified("2023-11-14T22:13:20Z") == expected
    assert parse_last_modified("2023-11-14T23:13:20+01:00") == expected
    assert parse_last_modified("Tue, 14 Nov 2023 22:13:20 GMT") == expected
    assert parse_last_modified(datetime(2023, 11, 14, 22, 13, 20)) == expected
    assert parse_last_modified(expected.astimezone(timezone(timedelta(hours=-5)))) == expected
