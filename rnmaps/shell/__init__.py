"""
rnmaps command-line package.

``rnmaps BUNDLE.map`` composes a bundle map with the maps of its intermediate
sources and writes the result; ``--interactive`` opens a lookup REPL over the
composed map.  Use ``python -m rnmaps.shell`` or the ``rnmaps`` script.
"""

from __future__ import annotations

from .cli import main

__all__ = ["main"]
