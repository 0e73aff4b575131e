"""Exceptions raised by the document engine.

Only failures that abort a generation request are exceptions. Degraded
states (missing Persian font, unshapeable text, a block taller than a
page) are recovered where they occur and reported through logging.
"""

from __future__ import annotations


class RtlDocsError(Exception):
    """Base class for all engine errors."""


class MissingRecordError(RtlDocsError):
    """The referenced contract or estimate does not exist."""

    def __init__(self, kind: str, record_id: int | str) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id!r} not found")


class TemplateError(RtlDocsError):
    """A template references an unknown generator or has a bad shape."""


class EmitterError(RtlDocsError):
    """The binary writer failed; no output was produced."""

    def __init__(self, fmt: str, cause: BaseException) -> None:
        self.format = fmt
        self.cause = cause
        super().__init__(f"{fmt} generation failed: {cause}")
