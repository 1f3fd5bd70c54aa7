"""Exceptions raised by the source map codec."""

from __future__ import annotations


class SourceMapError(ValueError):
    """Base class for source map failures."""


class MalformedSourceMapError(SourceMapError):
    """Raised when a source map cannot be parsed into a consumer."""


class VlqDecodeError(MalformedSourceMapError):
    """Raised for invalid base64 digits or a truncated VLQ sequence."""
