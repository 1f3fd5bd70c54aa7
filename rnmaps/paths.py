from __future__ import annotations

import os
import posixpath
import re

DISK_LETTER_RE = re.compile(r"^[a-z]:", re.IGNORECASE)
_URL_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


def drive_letter(path: str) -> str:
    """Return the ``X:`` prefix of a Windows-style path, or an empty string."""
    matched = DISK_LETTER_RE.match(path or "")
    return matched.group(0) if matched else ""


def is_absolute_source(path: str) -> bool:
    if not path:
        return False
    return path.startswith("/") or bool(DISK_LETTER_RE.match(path)) or bool(_URL_RE.match(path))


def join_source_root(root: str | None, source: str) -> str:
    """
    Join a map's ``sourceRoot`` onto one of its sources.

    Absolute sources and URLs win over the root; an empty root leaves the
    source untouched.
    """
    if not root or is_absolute_source(source):
        return source
    if _URL_RE.match(root):
        return root.rstrip("/") + "/" + source.lstrip("/")
    return posixpath.normpath(root.rstrip("/") + "/" + source)


def resolve_source(candidate: str, source_root: str | None, intermediate_dir: str) -> str:
    """
    Resolve a deeper source reference reported by a per-file map.

    Drive-letter paths are already absolute on the host that produced them and
    are returned verbatim (they may be processed on a POSIX machine).  Anything
    else is joined onto the intermediate file's directory and the bundle
    ``sourceRoot`` and normalised, the same way ``path.resolve`` would.  Pure
    string computation; the filesystem is never consulted.
    """
    if DISK_LETTER_RE.match(candidate):
        return candidate
    return os.path.abspath(os.path.join(source_root or "", intermediate_dir, candidate))