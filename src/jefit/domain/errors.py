"""Error taxonomy shared by services, adapters and the HTTP API."""


class JefitError(Exception):
    """Base error carrying a machine-readable classification."""

    code = "server_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(JefitError):
    """Missing identity or malformed input, rejected before any mutation."""

    code = "client_error"


class NotFoundError(JefitError):
    """Unknown reference-table key or unknown remote user."""

    code = "not_found"


class StorageError(JefitError):
    """Local persistence or remote store failure."""

    code = "server_error"
