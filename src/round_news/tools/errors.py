class NewsClientError(Exception):
    """Base class for failures talking to the news API."""


class TransportError(NewsClientError):
    """Network, timeout or HTTP-status failure with no usable payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(NewsClientError):
    """The response body did not match any expected payload shape."""


class ApiError(NewsClientError):
    """Structured ``status: "error"`` payload where no error variant is modelled."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code
