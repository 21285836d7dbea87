"""
App token lifecycle.

An app token obtained through login expires at an absolute Unix timestamp.
Before each discovery or send call the client asks ``needs_refresh``; when the
token has less than ``REFRESH_THRESHOLD_SECONDS`` left it is renewed through
``GET user/refresh`` on the calling thread. Tokens supplied by the caller carry
the ``NO_EXPIRY`` sentinel and are never renewed.
"""

import logging
import time
from typing import TYPE_CHECKING

from .decoder import decode_login
from .errors import (
    MissingCredentialsError,
    ResponseDecodeError,
    TokenDecodeError,
    TokenTransportError,
    TransportError,
)
from .models import AppToken
from .transport import Transport

if TYPE_CHECKING:
    from .client import PushNotifier

logger = logging.getLogger(__name__)

REFRESH_RESOURCE = "user/refresh"
REFRESH_THRESHOLD_SECONDS = 1000


class TokenLifecycle:
    """Decides when a session's app token is stale and renews it."""

    def __init__(self, transport: Transport, threshold: int = REFRESH_THRESHOLD_SECONDS):
        self._transport = transport
        self.threshold = threshold

    def needs_refresh(self, session: "PushNotifier") -> bool:
        token = session.token
        if token is not None and not token.tracks_expiry:
            return False
        expires_at = token.expires_at if token is not None else 0
        return expires_at - int(time.time()) < self.threshold

    def refresh(self, session: "PushNotifier") -> AppToken:
        """
        Renew the session's app token.

        The token and its expiry are replaced together, and only once the
        response has been decoded; on failure the session keeps its old token.

        Raises:
            MissingCredentialsError: The session holds no token to renew.
            TokenTransportError: The refresh call failed.
            TokenDecodeError: The refresh response was malformed.
        """
        current = session.token
        if current is None or not current.value:
            raise MissingCredentialsError("no app token to refresh; log in first")

        try:
            resp = self._transport.send("GET", REFRESH_RESOURCE, app_token=current.value)
        except TransportError as e:
            raise TokenTransportError("token refresh failed", e) from e

        try:
            result = decode_login(resp.text)
        except ResponseDecodeError as e:
            raise TokenDecodeError(e.raw_body) from e

        session.token = AppToken.from_login(result)
        logger.info("App token refreshed, expires at %d", result.expires_at)
        return session.token

    def ensure_fresh(self, session: "PushNotifier") -> None:
        """Refresh the token first if it is close to expiry."""
        if self.needs_refresh(session):
            logger.debug("App token near expiry, refreshing")
            self.refresh(session)
