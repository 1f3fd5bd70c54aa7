"""Rendering of lookup answers, as text lines or JSON envelopes."""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

from ..codec import OriginalPosition, Position
from .context import ShellContext


def original_fields(found: OriginalPosition) -> Dict[str, Any]:
    return {"source": found.source, "line": found.line, "column": found.column, "name": found.name}


def generated_fields(position: Position) -> Dict[str, Any]:
    return {"line": position.line, "column": position.column}


def describe_original(found: OriginalPosition) -> str:
    """``source:line:column``, followed by ``(name)`` when the mapping carries one."""
    location = f"{found.source}:{found.line}:{found.column}"
    return f"{location} ({found.name})" if found.name else location


def describe_generated(position: Position) -> str:
    return f"bundle:{position.line}:{position.column}"


def report(
    ctx: ShellContext,
    text: str,
    fields: Optional[Mapping[str, Any]] = None,
    *,
    exit_code: int = 0,
) -> int:
    """
    Print one command outcome and return ``exit_code``.

    In JSON mode a zero exit code produces ``{"status": "ok", "result": ...}``
    and anything else ``{"status": "error", "error": text}``, with ``fields``
    attached as the query that failed.
    """
    if not ctx.json_output:
        print(text if exit_code == 0 else f"error: {text}")
        return exit_code
    if exit_code == 0:
        envelope: Dict[str, Any] = {"status": "ok", "result": dict(fields or {})}
    else:
        envelope = {"status": "error", "error": text}
        if fields:
            envelope["query"] = dict(fields)
    print(json.dumps(envelope, indent=2, sort_keys=True))
    return exit_code
