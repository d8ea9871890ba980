"""
Error Types for the PRA Pipeline.

Three failure families are fatal and surface before (or instead of) any
parallel work:

    ConfigurationError: unknown operation tag, unknown keys, bad option values
    DatasetParseError: a malformed line in a dataset file
    MissingDataError: a relation has no data for the requested operation

Per-instance feature extraction failures are never raised; the feature
generator turns them into absent rows.
"""

from typing import Optional


class PraError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(PraError):
    """Raised when a configuration block contains something we do not recognize."""


class DatasetParseError(PraError):
    """
    Raised when a dataset line cannot be parsed.

    Attributes:
        line_number: 1-based line number of the offending record
        source: File name (or other description) of the input, if known
    """

    def __init__(self, message: str, line_number: int, source: Optional[str] = None):
        location = f"line {line_number}"
        if source is not None:
            location = f"{source}, {location}"
        super().__init__(f"{message} ({location})")
        self.line_number = line_number
        self.source = source


class MissingDataError(PraError):
    """Raised when no dataset exists for a relation."""

    def __init__(self, message: str, relation: str):
        super().__init__(message)
        self.relation = relation
