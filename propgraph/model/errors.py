"""Graph model exceptions."""


class GraphLoadError(Exception):
    """Raised when a graph file cannot be read."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


class GraphFormatError(Exception):
    """Raised when graph data is malformed or inconsistent."""

    def __init__(self, message: str, position: int | None = None):
        self.position = position
        super().__init__(message)
