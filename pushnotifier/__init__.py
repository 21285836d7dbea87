"""
Client library and CLI for the PushNotifier push notification service.
"""

from pushnotifier.client import PushNotifier
from pushnotifier.errors import (
    AuthError,
    ClientError,
    EmptyContentError,
    ImageIsDirectoryError,
    ImageUnreadableError,
    ImageNotFoundError,
    InvalidUrlError,
    MissingCredentialsError,
    MissingFieldError,
    NonSuccessResponseError,
    PayloadTooLargeError,
    PushNotifierError,
    ResponseDecodeError,
    ServiceRejectedError,
    ServiceUnreachableError,
    TokenDecodeError,
    TokenTransportError,
    TransportError,
)
from pushnotifier.models import NO_EXPIRY, AppToken, Device, LoginResult, ServiceEnvelope
from pushnotifier.payloads import (
    ImageNotification,
    Notification,
    TextNotification,
    TextUrlNotification,
    UrlNotification,
)
from pushnotifier.tokens import REFRESH_THRESHOLD_SECONDS, TokenLifecycle
from pushnotifier.transport import DEFAULT_BASE_URL, Transport

__version__ = "0.1.0"

__all__ = [
    "AppToken",
    "AuthError",
    "ClientError",
    "DEFAULT_BASE_URL",
    "Device",
    "EmptyContentError",
    "ImageIsDirectoryError",
    "ImageUnreadableError",
    "ImageNotFoundError",
    "ImageNotification",
    "InvalidUrlError",
    "LoginResult",
    "MissingCredentialsError",
    "MissingFieldError",
    "NO_EXPIRY",
    "NonSuccessResponseError",
    "Notification",
    "PayloadTooLargeError",
    "PushNotifier",
    "PushNotifierError",
    "REFRESH_THRESHOLD_SECONDS",
    "ResponseDecodeError",
    "ServiceEnvelope",
    "ServiceRejectedError",
    "ServiceUnreachableError",
    "TextNotification",
    "TextUrlNotification",
    "TokenDecodeError",
    "TokenLifecycle",
    "TokenTransportError",
    "Transport",
    "TransportError",
    "UrlNotification",
]
