"""Domain errors shared by the core modules."""


class TimeflowError(Exception):
    """Base class for timeflow errors."""


class InvalidTimestamp(TimeflowError, ValueError):
    """A core instant could not be parsed as a UTC timestamp."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid timestamp: {value!r}")


class UnknownTaskType(TimeflowError, KeyError):
    """A task type key has no built-in default."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"Unknown task type: {self.key!r}"


class CsvError(TimeflowError):
    """A problem found while importing CSV data.

    These are collected rather than raised out of the importer, so that one
    bad row never aborts the whole import.
    """

    def __init__(self, message: str, row: int | None = None):
        self.message = message
        self.row = row
        super().__init__(message)

    def __str__(self) -> str:
        if self.row is None:
            return self.message
        return f"Row {self.row}: {self.message}"


class HeaderError(CsvError):
    """Header row is missing a required column, or there is no data."""


class RowError(CsvError):
    """A data row was malformed and skipped."""
