"""Exception classes for plan execution."""


class ExecutionFailure(Exception):
    """Raised when evaluating a plan on the substrate fails.

    No partial result is returned; the failing cause is chained.
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)
