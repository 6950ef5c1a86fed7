"""Exception types raised while rendering a markup tree."""

from __future__ import annotations


class Markup2XlsxError(Exception):
    """Base class for all markup2xlsx errors."""


class InvalidElementName(Markup2XlsxError, ValueError):
    """The head of an element is not a valid tag token."""

    def __init__(self, tag: object) -> None:
        super().__init__(f"{tag!r} is not a valid element name.")
        self.tag = tag


class UnsupportedAlignment(Markup2XlsxError, ValueError):
    """A ``text-align`` value other than left, center or right."""

    def __init__(self, align: object) -> None:
        super().__init__(
            f"Unsupported text-align {align!r}. Choose from: left, center, right"
        )
        self.align = align


class SinkFailure(Markup2XlsxError, RuntimeError):
    """The underlying worksheet rejected a write, style or merge."""
