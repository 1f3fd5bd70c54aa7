"""
Composition of a bundle source map with the maps of its intermediate sources.

For every bundle entry pointing at an intermediate file that has its own map,
the entry's original side is looked up in that map and replaced by the deeper
position.  Entries that cannot be resolved are dropped instead of falling
back, so the composed map never contains null positions.
"""

from __future__ import annotations

import copy
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .codec import MappingEntry, Position, RawSourceMap, load_json, parse_source_map
from .generator import SourceMapGenerator
from .locator import LocateReason, LocateResult, SourceMapLocator
from .paths import join_source_root, resolve_source

LOGGER = logging.getLogger("rnmaps.combinator")

BundleMap = Union[str, bytes, Mapping[str, Any]]


@dataclass
class ComposerConfig:
    vendored_marker: str = "node_modules"
    try_sibling_maps: bool = True
    include_sources_content: bool = False
    encoding: str = "utf-8"


@dataclass
class CompositionReport:
    """Per-run counters; one instance per ``compose_with_report`` call."""

    locate_results: Dict[str, LocateResult] = field(default_factory=dict)
    passed_through: int = 0
    rewritten: int = 0
    dropped_unmapped: int = 0
    dropped_unresolved: int = 0
    rejected: int = 0
    short_circuited: bool = False

    @property
    def consumers_found(self) -> int:
        return sum(1 for result in self.locate_results.values() if result.found)

    @property
    def emitted(self) -> int:
        return self.passed_through + self.rewritten

    def summary(self) -> str:
        return (
            f"sources with maps={self.consumers_found}/{len(self.locate_results)} "
            f"rewritten={self.rewritten} passed={self.passed_through} "
            f"dropped(unmapped={self.dropped_unmapped}, unresolved={self.dropped_unresolved}, "
            f"rejected={self.rejected})"
        )


class SourceMapsCombinator:
    """Flattens bundle → intermediate → original maps into bundle → original."""

    def __init__(
        self,
        config: Optional[ComposerConfig] = None,
        *,
        locator: Optional[SourceMapLocator] = None,
    ) -> None:
        self.config = config or ComposerConfig()
        self.locator = locator or SourceMapLocator(
            vendored_marker=self.config.vendored_marker,
            try_sibling_maps=self.config.try_sibling_maps,
            encoding=self.config.encoding,
        )

    def compose(self, bundle_map: BundleMap) -> Dict[str, Any]:
        composed, _ = self.compose_with_report(bundle_map)
        return composed

    def compose_with_report(self, bundle_map: BundleMap) -> Tuple[Dict[str, Any], CompositionReport]:
        """
        Compose ``bundle_map`` and report what happened to each entry.

        Raises ``MalformedSourceMapError`` only when the bundle map itself
        cannot be parsed.
        """
        raw = bundle_map if isinstance(bundle_map, Mapping) else load_json(bundle_map)
        bundle = parse_source_map(raw)
        report = CompositionReport(locate_results=self._locate_sources(bundle))

        if not report.consumers_found:
            LOGGER.info("no intermediate source maps found; bundle map returned unchanged")
            report.short_circuited = True
            return copy.deepcopy(dict(raw)), report

        generator = SourceMapGenerator(
            file=raw.get("file"),
            source_root=raw.get("sourceRoot"),
            version=bundle.version,
        )
        for entry in sorted(bundle.entries, key=lambda item: item.generated):
            if not entry.is_mapped:
                report.dropped_unmapped += 1
                continue
            result = report.locate_results.get(entry.source)
            mapping = entry
            if result is not None and result.found:
                mapping = self._rewrite(entry, result, bundle, generator)
                if mapping is None:
                    report.dropped_unresolved += 1
                    continue
            if not generator.add_mapping(mapping):
                LOGGER.debug("output rejected mapping at %s", mapping.generated)
                report.rejected += 1
            elif mapping is entry:
                report.passed_through += 1
            else:
                report.rewritten += 1

        LOGGER.info("composed source map: %s", report.summary())
        return generator.to_json(), report

    def _locate_sources(self, bundle: RawSourceMap) -> Dict[str, LocateResult]:
        results: Dict[str, LocateResult] = {}
        for source in bundle.sources:
            if source in results:
                continue
            if self.locator.is_vendored(source):
                results[source] = LocateResult(source, LocateReason.VENDORED)
                continue
            result = self.locator.locate(join_source_root(bundle.source_root, source))
            LOGGER.debug("locate %s: %s %s", source, result.reason.value, result.detail)
            results[source] = result
        return results

    def _rewrite(
        self,
        entry: MappingEntry,
        result: LocateResult,
        bundle: RawSourceMap,
        generator: SourceMapGenerator,
    ) -> Optional[MappingEntry]:
        deeper = result.consumer.original_position_for(entry.original.line, entry.original.column)
        if not deeper.found:
            return None
        source = resolve_source(deeper.source, bundle.source_root, os.path.dirname(entry.source))
        original = entry.original
        # Line and column are only taken together; a lone source or name keeps the shallower position.
        if deeper.line is not None and deeper.column is not None:
            original = Position(deeper.line, deeper.column)
        if self.config.include_sources_content:
            content = result.consumer.source_content_for(deeper.source)
            if content is not None:
                generator.set_source_content(source, content)
        return MappingEntry(entry.generated, original, source, deeper.name or entry.name)


def compose(bundle_map: BundleMap, config: Optional[ComposerConfig] = None) -> Dict[str, Any]:
    """Compose ``bundle_map`` with a fresh combinator."""
    return SourceMapsCombinator(config).compose(bundle_map)
