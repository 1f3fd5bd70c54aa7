from rnmaps.codec import MappingEntry, Position, parse_source_map
from rnmaps.generator import SourceMapGenerator

from conftest import entry


def test_to_json_rebuilds_sources_and_names_in_first_use_order() -> None:
    generator = SourceMapGenerator(file="bundle.js", source_root="")
    assert generator.add_mapping(entry((1, 0), (1, 0), "b.ts", "x"))
    assert generator.add_mapping(entry((1, 5), (2, 0), "a.ts"))
    assert generator.add_mapping(entry((2, 0), (3, 1), "b.ts", "y"))
    data = generator.to_json()
    assert data["version"] == 3
    assert data["file"] == "bundle.js"
    assert data["sourceRoot"] == ""
    assert data["sources"] == ["b.ts", "a.ts"]
    assert data["names"] == ["x", "y"]
    assert "sourcesContent" not in data
    assert parse_source_map(data).entries == tuple(generator.entries())


def test_entries_are_serialized_in_generated_order() -> None:
    generator = SourceMapGenerator()
    generator.add_mapping(entry((3, 0), (1, 0), "a.ts"))
    generator.add_mapping(entry((1, 4), (2, 0), "a.ts"))
    generated = [item.generated for item in parse_source_map(generator.to_json()).entries]
    assert generated == [Position(1, 4), Position(3, 0)]


def test_add_mapping_rejects_invalid_entries() -> None:
    generator = SourceMapGenerator()
    assert not generator.add_mapping(MappingEntry(Position(0, 0), Position(1, 0), "a.ts"))
    assert not generator.add_mapping(MappingEntry(Position(1, -1), Position(1, 0), "a.ts"))
    assert not generator.add_mapping(MappingEntry(Position(1, 0), Position(0, 0), "a.ts"))
    assert not generator.add_mapping(MappingEntry(Position(1, 0), Position(1, 0), None))
    assert not generator.add_mapping(MappingEntry(Position(1, 0), None, "a.ts"))
    assert not generator.add_mapping(MappingEntry(Position(1, 0), name="orphan"))
    assert len(generator) == 0
    assert generator.to_json()["mappings"] == ""


def test_add_mapping_rejects_exact_duplicates_only() -> None:
    generator = SourceMapGenerator()
    assert generator.add_mapping(entry((1, 0), (1, 0), "a.ts"))
    assert not generator.add_mapping(entry((1, 0), (1, 0), "a.ts"))
    assert generator.add_mapping(entry((1, 0), (2, 0), "a.ts"))
    assert len(generator) == 2


def test_sources_content_follows_sources() -> None:
    generator = SourceMapGenerator()
    generator.add_mapping(entry((1, 0), (1, 0), "a.ts"))
    generator.add_mapping(entry((1, 2), (1, 0), "b.ts"))
    generator.set_source_content("b.ts", "let b = 1;")
    assert generator.to_json()["sourcesContent"] == [None, "let b = 1;"]
    generator.set_source_content("b.ts", None)
    assert "sourcesContent" not in generator.to_json()
