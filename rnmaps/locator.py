"""
Per-file source map discovery.

Given an intermediate JavaScript file, find the map that describes how it was
generated: an inline ``data:`` URL, a file referenced by a
``sourceMappingURL`` comment, or (optionally) a ``<file>.map`` sibling.
Every failure is reported as a ``LocateResult`` reason, never raised.
"""

from __future__ import annotations

import base64
import binascii
import enum
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import unquote, unquote_to_bytes

from .consumer import SourceMapConsumer
from .errors import SourceMapError
from .paths import DISK_LETTER_RE, drive_letter

LOGGER = logging.getLogger("rnmaps.locator")

SOURCE_MAPPING_URL_RE = re.compile(
    r"(?:/\*(?:\s*\r?\n(?://)?)?[#@] sourceMappingURL=([^\s'\"]*)\s*\*/"
    r"|//[#@] sourceMappingURL=([^\s'\"]*))"
)
DATA_URI_RE = re.compile(r"^data:([^,;]*)((?:;[^,;]*)*)(?:,(.*))?$", re.DOTALL)
JSON_MIME_RE = re.compile(r"^(?:application|text)/json$")

ReadFile = Callable[[str], bytes]


class LocateReason(enum.Enum):
    FOUND = "found"
    VENDORED = "vendored"
    UNREADABLE = "unreadable"
    NO_MAPPING = "no-mapping"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class LocateResult:
    source: str
    reason: LocateReason
    consumer: Optional[SourceMapConsumer] = None
    map_location: Optional[str] = None
    detail: str = ""

    @property
    def found(self) -> bool:
        return self.consumer is not None


def _read_bytes(path: str) -> bytes:
    return Path(path).read_bytes()


def find_source_mapping_url(code: str) -> Optional[str]:
    """Return the last ``sourceMappingURL`` reference in ``code``."""
    url = None
    for match in SOURCE_MAPPING_URL_RE.finditer(code):
        url = match.group(1) if match.group(1) is not None else match.group(2)
    return url or None


def decode_data_uri(uri: str) -> str:
    """Decode a JSON ``data:`` URI; raises SourceMapError for other payloads."""
    matched = DATA_URI_RE.match(uri)
    if not matched:
        raise SourceMapError("invalid data URI")
    mime = matched.group(1) or "text/plain"
    if not JSON_MIME_RE.match(mime):
        raise SourceMapError(f"unusable data URI mime type: {mime}")
    params = [p.strip().lower() for p in matched.group(2).split(";") if p.strip()]
    payload = matched.group(3) or ""
    if "base64" in params:
        try:
            raw = base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError) as exc:
            raise SourceMapError(f"invalid base64 data URI: {exc}") from exc
    else:
        raw = unquote_to_bytes(payload)
    return raw.decode("utf-8", errors="replace")


class SourceMapLocator:
    """Finds and builds consumers for intermediate source files."""

    def __init__(
        self,
        *,
        vendored_marker: str = "node_modules",
        try_sibling_maps: bool = True,
        encoding: str = "utf-8",
        read_file: Optional[ReadFile] = None,
    ) -> None:
        self.vendored_marker = vendored_marker
        self.try_sibling_maps = try_sibling_maps
        self.encoding = encoding
        self.read_file: ReadFile = read_file or _read_bytes

    def is_vendored(self, source: str) -> bool:
        return bool(self.vendored_marker) and self.vendored_marker in source

    def locate(self, path: str) -> LocateResult:
        """Return the consumer for ``path``'s own map, or the reason there is none."""
        if self.is_vendored(path):
            return LocateResult(path, LocateReason.VENDORED)
        try:
            code = self._read_text(path)
        except OSError as exc:
            return LocateResult(path, LocateReason.UNREADABLE, detail=str(exc))

        url = find_source_mapping_url(code)
        if url is None:
            if not self.try_sibling_maps:
                return LocateResult(path, LocateReason.NO_MAPPING)
            return self._locate_sibling(path)

        if url.startswith("data:"):
            try:
                payload = decode_data_uri(url)
            except SourceMapError as exc:
                return LocateResult(path, LocateReason.MALFORMED, map_location="inline", detail=str(exc))
            return self._build(path, payload, "inline")

        map_path = self._resolve_map_path(path, url)
        try:
            payload = self._read_text(map_path, drive=drive_letter(self._posix(path)))
        except OSError as exc:
            return LocateResult(path, LocateReason.UNREADABLE, map_location=map_path, detail=str(exc))
        return self._build(path, payload, map_path)

    def _locate_sibling(self, path: str) -> LocateResult:
        sibling = path + ".map"
        try:
            payload = self._read_text(sibling)
        except OSError:
            return LocateResult(path, LocateReason.NO_MAPPING)
        return self._build(path, payload, sibling)

    def _build(self, path: str, payload: str, location: str) -> LocateResult:
        try:
            consumer = SourceMapConsumer(payload)
        except SourceMapError as exc:
            LOGGER.debug("malformed source map for %s (%s): %s", path, location, exc)
            return LocateResult(path, LocateReason.MALFORMED, map_location=location, detail=str(exc))
        return LocateResult(path, LocateReason.FOUND, consumer=consumer, map_location=location)

    def _read_text(self, path: str, *, drive: str = "") -> str:
        # Resolved map URLs can lose the drive letter of the file they came from.
        if drive and not DISK_LETTER_RE.match(path):
            path = f"{drive}{path}"
        return self.read_file(path).decode(self.encoding, errors="replace")

    @staticmethod
    def _posix(path: str) -> str:
        return path.replace("\\", "/") if drive_letter(path) else path

    def _resolve_map_path(self, path: str, url: str) -> str:
        reference = unquote(url)
        if reference.startswith("file://"):
            reference = reference[len("file://") :]
        if reference.startswith("/") or DISK_LETTER_RE.match(reference):
            return reference
        base = os.path.dirname(self._posix(path))
        return os.path.normpath(os.path.join(base, reference)) if base else os.path.normpath(reference)
