"""Shared state for the rnmaps command line and REPL."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..combinator import ComposerConfig, CompositionReport, SourceMapsCombinator
from ..consumer import SourceMapConsumer

LOGGER = logging.getLogger("rnmaps.shell.context")


class ShellError(RuntimeError):
    """Raised when a command cannot run against the current state."""


@dataclass
class ShellContext:
    """Holds the composed map and the settings it was built with."""

    json_output: bool = False
    config: ComposerConfig = field(default_factory=ComposerConfig)
    bundle_path: Optional[Path] = None
    composed: Optional[Dict[str, Any]] = None
    report: Optional[CompositionReport] = None
    _consumer: Optional[SourceMapConsumer] = field(default=None, init=False, repr=False)

    def load_bundle(self, path: Path) -> Dict[str, Any]:
        """Read ``path`` and compose it; errors from the bundle itself propagate."""
        text = Path(path).read_text(encoding=self.config.encoding)
        composed, report = SourceMapsCombinator(self.config).compose_with_report(text)
        self.bundle_path = Path(path)
        self.composed = composed
        self.report = report
        self._consumer = None
        LOGGER.debug("loaded %s: %s", path, report.summary())
        return composed

    @property
    def consumer(self) -> SourceMapConsumer:
        if self.composed is None:
            raise ShellError("no source map loaded")
        if self._consumer is None:
            self._consumer = SourceMapConsumer(self.composed)
        return self._consumer

    def dumps(self) -> str:
        if self.composed is None:
            raise ShellError("no source map loaded")
        return json.dumps(self.composed, indent=2)

    def source_completions(self) -> List[str]:
        if self.composed is None:
            return []
        return self.consumer.sources
