"""Exceptions raised by the backend transport client."""


class TransportError(Exception):
    """Raised when a backend call fails at the network or HTTP level."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        server_message: str | None = None,
    ):
        self.status_code = status_code
        self.server_message = server_message
        super().__init__(message)


class ResponseFormatError(TransportError):
    """Raised when a response body does not match the expected contract."""

    def __init__(self, message: str, errors: list[dict] | None = None):
        self.errors = errors or []
        super().__init__(message)
