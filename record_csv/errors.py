from __future__ import annotations


class CodecError(ValueError):
    """Base class for failures the codec reports to callers."""


class InsufficientDataError(CodecError):
    def __init__(self, line_count: int):
        self.line_count = line_count
        super().__init__("CSV file must have at least a header row and one data row")


class ImportMappingError(CodecError):
    """Raised when none of a document's headers map onto a table column."""


class UnknownTableError(KeyError):
    def __init__(self, table: str):
        self.table = table
        super().__init__(table)

    def __str__(self) -> str:
        return f"Unknown table: {self.table}"
