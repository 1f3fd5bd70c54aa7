"""Read-only position queries over a parsed source map."""

from __future__ import annotations

import bisect
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from .codec import MappingEntry, OriginalPosition, Position, RawSourceMap, parse_source_map
from .paths import join_source_root


class SourceMapConsumer:
    """
    Query object built from one source map.

    Construction raises ``MalformedSourceMapError`` when the map cannot be
    parsed.  Reported sources have the map's own ``sourceRoot`` applied.
    """

    def __init__(self, raw_map: Union[RawSourceMap, str, bytes, Mapping[str, Any]]) -> None:
        self.raw = raw_map if isinstance(raw_map, RawSourceMap) else parse_source_map(raw_map)
        self.source_root = self.raw.source_root
        self._generated: List[MappingEntry] = sorted(
            (self._rooted(entry) for entry in self.raw.entries),
            key=lambda entry: entry.generated,
        )
        self._generated_keys: List[Tuple[int, int]] = [
            (entry.generated.line, entry.generated.column) for entry in self._generated
        ]
        self._by_source: Dict[str, List[MappingEntry]] = {}
        for entry in self._generated:
            if entry.is_mapped:
                self._by_source.setdefault(entry.source, []).append(entry)
        for mappings in self._by_source.values():
            mappings.sort(key=lambda entry: (entry.original, entry.generated))

    def _rooted(self, entry: MappingEntry) -> MappingEntry:
        if entry.source is None or not self.source_root:
            return entry
        return MappingEntry(
            entry.generated,
            entry.original,
            join_source_root(self.source_root, entry.source),
            entry.name,
        )

    @property
    def sources(self) -> List[str]:
        return [join_source_root(self.source_root, source) for source in self.raw.sources]

    def each_mapping(self) -> Iterator[MappingEntry]:
        """Yield every entry in generated order."""
        return iter(self._generated)

    def original_position_for(self, line: int, column: int) -> OriginalPosition:
        """
        Return the original position for a generated ``(line, column)``.

        The closest entry at or before ``column`` on the same generated line
        answers the query; when several entries share that position the first
        one encoded wins.
        """
        index = bisect.bisect_right(self._generated_keys, (line, column)) - 1
        if index < 0:
            return OriginalPosition()
        index = bisect.bisect_left(self._generated_keys, self._generated_keys[index])
        entry = self._generated[index]
        if entry.generated.line != line or not entry.is_mapped:
            return OriginalPosition()
        return OriginalPosition(entry.source, entry.original.line, entry.original.column, entry.name)

    def generated_position_for(self, source: str, line: int, column: int) -> Optional[Position]:
        """Return the first generated position mapped from ``source`` at or before ``(line, column)``."""
        mappings = self._by_source.get(source)
        if mappings is None:
            mappings = self._by_source.get(join_source_root(self.source_root, source))
        if not mappings:
            return None
        needle = Position(line, column)
        index = bisect.bisect_right([entry.original for entry in mappings], needle) - 1
        if index < 0:
            return None
        found = mappings[index].original
        while index > 0 and mappings[index - 1].original == found:
            index -= 1
        return mappings[index].generated

    def source_content_for(self, source: str) -> Optional[str]:
        content = self.raw.sources_content
        if not content:
            return None
        for idx, raw_source in enumerate(self.raw.sources):
            if source in (raw_source, join_source_root(self.source_root, raw_source)):
                return content[idx] if idx < len(content) else None
        return None
