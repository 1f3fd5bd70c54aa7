"""
Source map (revision 3) interchange codec.

Positions exposed by this module use 1-based lines and 0-based columns.  The
``mappings`` string stores lines implicitly (one ``;`` group per generated
line) and original lines 0-based; the conversion happens only here.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from . import vlq
from .errors import MalformedSourceMapError

XSSI_PREFIX = ")]}'"
SUPPORTED_VERSION = 3


@dataclass(frozen=True, order=True)
class Position:
    line: int
    column: int


@dataclass(frozen=True)
class MappingEntry:
    """One generated ↔ original correspondence."""

    generated: Position
    original: Optional[Position] = None
    source: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_mapped(self) -> bool:
        return self.original is not None and self.source is not None


@dataclass(frozen=True)
class OriginalPosition:
    """Answer to a consumer lookup; every field is None when nothing matched."""

    source: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    name: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.source is not None


@dataclass(frozen=True)
class RawSourceMap:
    version: int
    sources: Tuple[str, ...]
    names: Tuple[str, ...]
    mappings: str
    entries: Tuple[MappingEntry, ...]
    source_root: str = ""
    file: Optional[str] = None
    sources_content: Optional[Tuple[Optional[str], ...]] = None


def load_json(data: Union[str, bytes]) -> Any:
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")
    if data.startswith(XSSI_PREFIX):
        data = data[len(XSSI_PREFIX) :]
    try:
        return json.loads(data)
    except (ValueError, RecursionError) as exc:
        # RecursionError: nesting deeper than the decoder can follow.
        raise MalformedSourceMapError(f"source map is not valid JSON: {exc}") from exc


def parse_source_map(data: Union[str, bytes, Mapping[str, Any]]) -> RawSourceMap:
    """Parse interchange JSON (text or an already-loaded dict)."""
    raw = data if isinstance(data, Mapping) else load_json(data)
    if not isinstance(raw, Mapping):
        raise MalformedSourceMapError("source map must be a JSON object")
    if "sections" in raw:
        raise MalformedSourceMapError("indexed source maps are not supported")
    try:
        version = int(raw.get("version"))
    except (TypeError, ValueError):
        raise MalformedSourceMapError(f"unsupported version: {raw.get('version')!r}") from None
    if version != SUPPORTED_VERSION:
        raise MalformedSourceMapError(f"unsupported version: {version}")

    mappings = raw.get("mappings", "")
    if not isinstance(mappings, str):
        raise MalformedSourceMapError("'mappings' must be a string")
    sources = tuple("null" if s is None else str(s) for s in _as_list(raw, "sources"))
    names = tuple(str(n) for n in _as_list(raw, "names"))
    root = raw.get("sourceRoot")
    content = raw.get("sourcesContent")
    sources_content = tuple(content) if isinstance(content, list) else None

    return RawSourceMap(
        version=version,
        sources=sources,
        names=names,
        mappings=mappings,
        entries=decode_mappings(mappings, sources, names),
        source_root=root if isinstance(root, str) else "",
        file=raw.get("file"),
        sources_content=sources_content,
    )


def _as_list(raw: Mapping[str, Any], key: str) -> List[Any]:
    value = raw.get(key) or []
    if not isinstance(value, list):
        raise MalformedSourceMapError(f"{key!r} must be a list")
    return value


def decode_mappings(mappings: str, sources: Sequence[str], names: Sequence[str]) -> Tuple[MappingEntry, ...]:
    """Decode the ``mappings`` string into entries, in encoded order."""
    entries: List[MappingEntry] = []
    src_id, src_line, src_col, name_id = 0, 0, 0, 0
    for line_index, group in enumerate(mappings.split(";")):
        dst_col = 0
        for segment in group.split(","):
            if not segment:
                continue
            fields = vlq.decode(segment)
            if len(fields) == 2:
                raise MalformedSourceMapError("found a source, but no line and column")
            if len(fields) == 3:
                raise MalformedSourceMapError("found a source and line, but no column")
            dst_col += fields[0]
            if dst_col < 0:
                raise MalformedSourceMapError(f"negative generated column on line {line_index + 1}")
            generated = Position(line_index + 1, dst_col)
            if len(fields) == 1:
                entries.append(MappingEntry(generated))
                continue

            src_id += fields[1]
            src_line += fields[2]
            src_col += fields[3]
            if not 0 <= src_id < len(sources):
                raise MalformedSourceMapError(f"source index {src_id} out of range")
            if src_line < 0 or src_col < 0:
                raise MalformedSourceMapError(f"negative original position on line {line_index + 1}")
            name = None
            if len(fields) > 4:
                name_id += fields[4]
                if not 0 <= name_id < len(names):
                    raise MalformedSourceMapError(f"name index {name_id} out of range")
                name = names[name_id]
            entries.append(MappingEntry(generated, Position(src_line + 1, src_col), sources[src_id], name))
    return tuple(entries)


def encode_mappings(entries: Sequence[MappingEntry], sources: Sequence[str], names: Sequence[str]) -> str:
    """
    Encode entries (already in generated order) into a ``mappings`` string.

    ``sources`` and ``names`` must contain every source/name referenced by
    ``entries``; their positions become the encoded indices.
    """
    source_index: Dict[str, int] = {source: idx for idx, source in enumerate(sources)}
    name_index: Dict[str, int] = {name: idx for idx, name in enumerate(names)}
    prev_gen_line, prev_gen_col = 1, 0
    prev_source, prev_orig_line, prev_orig_col, prev_name = 0, 0, 0, 0
    out: List[str] = []
    for position, entry in enumerate(entries):
        line = entry.generated.line
        if line != prev_gen_line:
            prev_gen_col = 0
            out.append(";" * (line - prev_gen_line))
            prev_gen_line = line
        elif position > 0:
            out.append(",")
        fields = [entry.generated.column - prev_gen_col]
        prev_gen_col = entry.generated.column
        if entry.is_mapped:
            idx = source_index[entry.source]
            fields += [
                idx - prev_source,
                entry.original.line - 1 - prev_orig_line,
                entry.original.column - prev_orig_col,
            ]
            prev_source = idx
            prev_orig_line = entry.original.line - 1
            prev_orig_col = entry.original.column
            if entry.name is not None:
                fields.append(name_index[entry.name] - prev_name)
                prev_name = name_index[entry.name]
        out.append(vlq.encode(fields))
    return "".join(out)
