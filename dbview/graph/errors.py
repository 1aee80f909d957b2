"""Graph-related exceptions."""


class GraphEditError(Exception):
    """Raised when a user graph edit refers to something that does not exist."""

    def __init__(self, message: str, node: str | None = None):
        self.node = node
        super().__init__(message)
