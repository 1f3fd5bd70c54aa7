import json

import pytest

from rnmaps.codec import MappingEntry, Position, decode_mappings, encode_mappings, parse_source_map
from rnmaps.errors import MalformedSourceMapError


def _raw(mappings: str, **extra) -> dict:
    data = {"version": 3, "sources": ["a.js"], "names": ["foo"], "mappings": mappings}
    data.update(extra)
    return data


def test_decode_accumulates_state_across_lines() -> None:
    entries = decode_mappings("AAAA;AACA,EAAE", ["a.js"], [])
    assert entries == (
        MappingEntry(Position(1, 0), Position(1, 0), "a.js"),
        MappingEntry(Position(2, 0), Position(2, 0), "a.js"),
        MappingEntry(Position(2, 2), Position(2, 2), "a.js"),
    )


def test_decode_generated_only_and_named_segments() -> None:
    entries = decode_mappings("A,CAAAA", ["a.js"], ["foo"])
    assert entries[0] == MappingEntry(Position(1, 0))
    assert not entries[0].is_mapped
    assert entries[1] == MappingEntry(Position(1, 1), Position(1, 0), "a.js", "foo")


def test_encode_matches_standard_layout() -> None:
    entries = [
        MappingEntry(Position(1, 0), Position(1, 0), "a.js"),
        MappingEntry(Position(2, 0), Position(2, 0), "a.js"),
        MappingEntry(Position(2, 2), Position(2, 2), "a.js"),
        MappingEntry(Position(4, 1), Position(2, 2), "a.js", "foo"),
    ]
    assert encode_mappings(entries, ["a.js"], ["foo"]) == "AAAA;AACA,EAAE;;CAAAA"


def test_parse_from_text_strips_xssi_guard() -> None:
    text = ")]}'" + json.dumps(_raw("AAAA", sourceRoot="src/", file="out.js"))
    parsed = parse_source_map(text)
    assert parsed.version == 3
    assert parsed.source_root == "src/"
    assert parsed.file == "out.js"
    assert parsed.entries[0].source == "a.js"


@pytest.mark.parametrize(
    "data",
    [
        "{not json",
        "[]",
        json.dumps(_raw("AAAA", version=2)),
        json.dumps({"version": 3, "sections": []}),
        json.dumps(_raw("AC")),
        json.dumps(_raw("AAC")),
        json.dumps(_raw("ACAA")),
        json.dumps(_raw("AAAAC")),
        json.dumps(_raw(42)),
    ],
)
def test_parse_rejects_malformed_maps(data) -> None:
    with pytest.raises(MalformedSourceMapError):
        parse_source_map(data)
