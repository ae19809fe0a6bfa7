"""
Load and Merge Exceptions

Structural failures abort a whole document load and carry a single
human-readable message. Per-record anomalies (unresolved underlying ids,
unmatched positions, non-numeric cells) are never raised; they are counted
on the parse/aggregation result objects instead.
"""


class MaxSpanError(Exception):
    """
    Base class for all fatal load/merge errors.

    Attributes:
        message: Human-readable error message
        source: Which document the error refers to (e.g. "SPAN", "Bhav")
    """

    def __init__(self, message: str, *, source: str | None = None):
        self.message = message
        self.source = source
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.source:
            return f"{self.source}: {self.message}"
        return self.message


class MalformedDocument(MaxSpanError):
    """Input text is not parseable as the expected markup at all."""


class SchemaMismatch(MaxSpanError):
    """
    Parseable markup lacking required structural elements or columns.

    Attributes:
        missing: Names of the required elements/columns that were not found
    """

    def __init__(self, message: str, *, source: str | None = None, missing: list[str] | None = None):
        self.missing = list(missing or [])
        super().__init__(message, source=source)


class MissingDocument(MaxSpanError):
    """A snapshot merge mode was requested without the document it requires."""
