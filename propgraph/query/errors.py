"""Exception classes for query handling."""


class QueryError(Exception):
    """Base exception for query errors."""

    pass


class QuerySyntaxError(QueryError):
    """Raised when the pattern text is malformed."""

    def __init__(self, message: str, position: int | None = None, token: str | None = None):
        self.position = position
        self.token = token
        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)


class DuplicateVariableError(QuerySyntaxError):
    """Raised when a variable is declared twice in conflicting ways."""

    pass


class UnresolvedVariableError(QueryError):
    """Raised when a predicate or edge references an undeclared variable."""

    def __init__(self, message: str, variable: str | None = None):
        self.variable = variable
        super().__init__(message)


class UnsupportedPatternError(QueryError):
    """Raised when a pattern cannot be evaluated by the available operators."""

    pass
