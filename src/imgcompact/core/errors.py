"""Exception taxonomy for the compression engine."""

from __future__ import annotations


class CompressionError(Exception):
    """Base class for errors raised by imgcompact."""


class NotEligibleError(CompressionError):
    """The asset may not be compressed under the given policy.

    Callers should fall back to the original asset unmodified.
    """

    def __init__(self, format_name: str, reason: str) -> None:
        self.format_name = format_name
        self.reason = reason
        super().__init__(f"{format_name} asset not eligible: {reason}")


class CodecError(CompressionError):
    """The encoder failed to produce output."""
