"""Accumulates composed entries and serializes them as a source map."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Set, Tuple

from .codec import SUPPORTED_VERSION, MappingEntry, Position, encode_mappings


def _valid_position(position: Optional[Position]) -> bool:
    return (
        position is not None
        and isinstance(position.line, int)
        and isinstance(position.column, int)
        and position.line >= 1
        and position.column >= 0
    )


class SourceMapGenerator:
    """Output builder for a composed map."""

    def __init__(
        self,
        *,
        file: Optional[str] = None,
        source_root: Optional[str] = None,
        version: int = SUPPORTED_VERSION,
    ) -> None:
        self.file = file
        self.source_root = source_root
        self.version = version
        self._entries: List[MappingEntry] = []
        self._seen: Set[Tuple[Any, ...]] = set()
        self._sources: Dict[str, None] = {}
        self._names: Dict[str, None] = {}
        self._sources_content: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def add_mapping(self, entry: MappingEntry) -> bool:
        """
        Append ``entry``; returns False when it is rejected.

        Rejected: invalid generated or original positions, an original side
        without a source, and exact repeats of an accepted entry.
        """
        if not _valid_position(entry.generated):
            return False
        if entry.original is None and entry.source is None:
            if entry.name is not None:
                return False
        elif not (_valid_position(entry.original) and isinstance(entry.source, str)):
            return False
        key = (entry.generated, entry.original, entry.source, entry.name)
        if key in self._seen:
            return False
        self._seen.add(key)
        self._entries.append(entry)
        if entry.source is not None:
            self._sources.setdefault(entry.source, None)
        if entry.name is not None:
            self._names.setdefault(entry.name, None)
        return True

    def set_source_content(self, source: str, content: Optional[str]) -> None:
        if content is None:
            self._sources_content.pop(source, None)
        else:
            self._sources_content[source] = content

    def entries(self) -> List[MappingEntry]:
        return list(self._entries)

    def to_json(self) -> Dict[str, Any]:
        """Serialize to the interchange dict (JSON-compatible)."""
        ordered = sorted(self._entries, key=lambda entry: entry.generated)
        sources = list(self._sources)
        names = list(self._names)
        result: Dict[str, Any] = {
            "version": self.version,
            "sources": sources,
            "names": names,
            "mappings": encode_mappings(ordered, sources, names),
        }
        if self.file is not None:
            result["file"] = self.file
        if self.source_root is not None:
            result["sourceRoot"] = self.source_root
        if self._sources_content:
            result["sourcesContent"] = [self._sources_content.get(source) for source in sources]
        return result
