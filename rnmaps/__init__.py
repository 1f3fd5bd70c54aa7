"""
rnmaps - Chained source map composition for bundled JavaScript.

A React Native (or any bundler) build produces a bundle whose source map points
at intermediate JavaScript files.  When those intermediate files were
themselves compiled (TypeScript, Flow, ...) they carry their own source maps.
This package flattens the two hops into one map from bundle positions straight
to the authored sources, so a debugger only needs the bundle map.

    paths.py       → source path resolution (drive letters, sourceRoot joins)
    vlq.py         → base64 VLQ digit codec
    codec.py       → interchange parsing/encoding, mapping data model
    consumer.py    → position queries over a parsed map
    generator.py   → accumulation and serialization of composed entries
    locator.py     → sourceMappingURL discovery for intermediate files
    combinator.py  → the composition pass itself
    shell/         → ``rnmaps`` command-line entry point and lookup REPL
"""

from .errors import MalformedSourceMapError, SourceMapError, VlqDecodeError  # noqa: F401
from .codec import MappingEntry, OriginalPosition, Position, RawSourceMap, parse_source_map  # noqa: F401
from .consumer import SourceMapConsumer  # noqa: F401
from .generator import SourceMapGenerator  # noqa: F401
from .locator import LocateReason, LocateResult, SourceMapLocator  # noqa: F401
from .combinator import CompositionReport, ComposerConfig, SourceMapsCombinator, compose  # noqa: F401

__all__ = [
    "SourceMapError",
    "MalformedSourceMapError",
    "VlqDecodeError",
    "Position",
    "MappingEntry",
    "OriginalPosition",
    "RawSourceMap",
    "parse_source_map",
    "SourceMapConsumer",
    "SourceMapGenerator",
    "LocateReason",
    "LocateResult",
    "SourceMapLocator",
    "ComposerConfig",
    "CompositionReport",
    "SourceMapsCombinator",
    "compose",
]

__version__ = "0.1.0"
