"""Error taxonomy for permission server operations."""


class PermissionsError(Exception):
    """Base class for every failure surfaced by the permission server."""


class TransportError(PermissionsError):
    """The request/response exchange with snapd did not complete.

    Covers network failures, non-2xx statuses and snapd error envelopes.
    ``status`` is set when snapd answered with an HTTP status.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class DecodeError(PermissionsError):
    """The response body was not the JSON shape the operation expects."""
