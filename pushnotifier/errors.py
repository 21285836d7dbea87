"""Exception types for PushNotifier client failures."""

from typing import List, Optional


class PushNotifierError(Exception):
    """Base error for PushNotifier client failures."""


# ── transport ──────────────────────────────────────────────


class TransportError(PushNotifierError):
    """Network or HTTP-layer failure."""


class ServiceUnreachableError(TransportError):
    """The service could not be reached (DNS, refused connection, timeout)."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class NonSuccessResponseError(TransportError):
    """The service answered with a status other than 200."""

    def __init__(self, status: int, reason: str, body: str):
        super().__init__(f"{status} {reason} - {body}".strip())
        self.status = status
        self.reason = reason
        self.body = body


# ── authentication ─────────────────────────────────────────


class AuthError(PushNotifierError):
    """Failure while obtaining or renewing an app token."""


class MissingCredentialsError(AuthError):
    """User name or password was not supplied."""


class TokenTransportError(AuthError):
    """Login or token refresh failed at the transport layer."""

    def __init__(self, message: str, cause: TransportError):
        super().__init__(f"{message}: {cause}")
        self.cause = cause

    @property
    def status(self) -> Optional[int]:
        """HTTP status of the failed call, if the service answered at all."""
        return getattr(self.cause, "status", None)


class TokenDecodeError(AuthError):
    """Login or refresh response did not have the expected shape."""

    def __init__(self, raw_body: str):
        super().__init__("unable to decode token response body")
        self.raw_body = raw_body


# ── client / request validation ────────────────────────────


class ClientError(PushNotifierError):
    """Invalid request input or a rejected/undecodable service response."""


class EmptyContentError(ClientError):
    """Notification content was empty."""


class InvalidUrlError(ClientError):
    """URL content could not be parsed as a URL."""

    def __init__(self, url: str):
        super().__init__(f"invalid URL: {url!r}")
        self.url = url


class MissingFieldError(ClientError):
    """A required notification field was absent."""

    def __init__(self, field: str):
        super().__init__(f"missing required field: {field}")
        self.field = field


class ImageNotFoundError(ClientError):
    """Image path does not exist."""

    def __init__(self, path: str):
        super().__init__(f"image file not found: {path}")
        self.path = path


class ImageIsDirectoryError(ClientError):
    """Image path points to a directory."""

    def __init__(self, path: str):
        super().__init__(f"image path is a directory, not a file: {path}")
        self.path = path


class ImageUnreadableError(ClientError):
    """Image file exists but cannot be read, e.g. for lack of permission."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"cannot read image {path}: {reason}")
        self.path = path


class PayloadTooLargeError(ClientError):
    """Image file exceeds the upload limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"image is {size} bytes, limit is {limit} bytes")
        self.size = size
        self.limit = limit


class ServiceRejectedError(ClientError):
    """The service accepted the request but reported errors."""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class ResponseDecodeError(ClientError):
    """Response body did not match the expected JSON shape."""

    def __init__(self, raw_body: str):
        super().__init__("unable to decode response body as JSON")
        self.raw_body = raw_body
