from __future__ import annotations


class AuditError(Exception):
    """Base class for failures that abort an upload."""


class ReadError(AuditError):
    """A source file could not be read."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Could not read file: {source} ({reason})")
        self.source = source
        self.reason = reason


class EmptyInputError(AuditError):
    """Parsing produced no records."""

    def __init__(self, message: str = "File is empty.") -> None:
        super().__init__(message)


class MalformedRowError(AuditError):
    """A row whose structure cannot be recovered."""

    def __init__(self, source: str, line: int, reason: str) -> None:
        super().__init__(f"{source}: line {line}: {reason}")
        self.source = source
        self.line = line
        self.reason = reason
