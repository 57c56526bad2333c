"""Statistics-related exceptions."""


class StatisticsUnavailable(Exception):
    """Raised when a cardinality entry is missing.

    Never escapes GraphStatistics: lookups recover with a default estimate.
    """

    def __init__(self, message: str, key: object = None):
        self.key = key
        super().__init__(message)


class StatisticsLoadError(Exception):
    """Raised when a statistics file cannot be loaded."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


class StatisticsValidationError(Exception):
    """Raised when statistics data fails validation."""

    def __init__(self, message: str, errors: list[dict] | None = None):
        self.errors = errors or []
        super().__init__(message)
