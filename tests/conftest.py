"""
Pytest fixtures for rnmaps tests.
"""
import json
from pathlib import Path
from typing import Iterable, Optional

import pytest

from rnmaps.codec import MappingEntry, Position
from rnmaps.generator import SourceMapGenerator


def entry(gen, orig=None, source=None, name=None) -> MappingEntry:
    return MappingEntry(Position(*gen), Position(*orig) if orig else None, source, name)


def build_map(entries: Iterable[MappingEntry], *, source_root: Optional[str] = None, file: Optional[str] = None) -> dict:
    generator = SourceMapGenerator(file=file, source_root=source_root)
    for item in entries:
        assert generator.add_mapping(item)
    return generator.to_json()


def write_js(path: Path, body: str, map_ref: Optional[str] = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    text = body
    if map_ref is not None:
        text += f"\n//# sourceMappingURL={map_ref}\n"
    path.write_text(text, encoding="utf-8")
    return path


def write_map(path: Path, data: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def app_chain(tmp_path):
    """
    app.js compiled from app.ts, referenced by a bundle at (10, 4).

    app.js.map maps app.js (3, 2) back to app.ts (1, 0).
    """
    app_js = write_js(tmp_path / "app.js", "var a;\nvar b;\n  run();", map_ref="app.js.map")
    write_map(
        tmp_path / "app.js.map",
        build_map([entry((3, 2), (1, 0), "app.ts", "run")]),
    )
    bundle = build_map([entry((10, 4), (3, 2), str(app_js))])
    return {"root": tmp_path, "app_js": app_js, "bundle": bundle}
