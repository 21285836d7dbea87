"""
Session client for the PushNotifier API (https://api.pushnotifier.de/v2/doc/).

A ``PushNotifier`` instance holds one account's credentials, the current app
token and a cache of device ids. It is not safe for concurrent use; callers
sharing one instance across threads must serialise access themselves.
"""

import logging
import os
from typing import TYPE_CHECKING, List, Optional, Sequence, Union

import requests

from .decoder import decode_devices, decode_envelope, decode_login
from .errors import (
    MissingCredentialsError,
    ResponseDecodeError,
    TokenDecodeError,
    TokenTransportError,
    TransportError,
)
from .models import NO_EXPIRY, AppToken, Device, ServiceEnvelope
from .payloads import (
    ImageNotification,
    Notification,
    TextNotification,
    TextUrlNotification,
    UrlNotification,
)
from .tokens import TokenLifecycle
from .transport import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, Transport

if TYPE_CHECKING:
    from .config import PushNotifierConfig

logger = logging.getLogger(__name__)

LOGIN_RESOURCE = "login"
DEVICES_RESOURCE = "devices"


class PushNotifier:
    """Client for one PushNotifier account."""

    def __init__(
        self,
        package_name: str,
        api_token: str,
        app_token: Optional[str] = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Args:
            package_name: Application package name, the Basic auth user.
            api_token: API token, the Basic auth password.
            app_token: Long-lived app token obtained elsewhere. When given it
                is used as-is and never refreshed.
            base_url: Service root, overridable for testing.
            session: Optional ``requests.Session`` to issue requests with.
            timeout: Per-request timeout in seconds.
        """
        self._package_name = package_name
        self._api_token = api_token
        self.username: Optional[str] = None
        self.token: Optional[AppToken] = (
            AppToken(value=app_token, expires_at=NO_EXPIRY) if app_token else None
        )
        self.devices: List[str] = []

        self._transport = Transport(
            package_name,
            api_token,
            base_url=base_url,
            session=session,
            timeout=timeout,
        )
        self._lifecycle = TokenLifecycle(self._transport)

    @classmethod
    def from_config(
        cls, config: "PushNotifierConfig", session: Optional[requests.Session] = None
    ) -> "PushNotifier":
        """Build a client from a ``PushNotifierConfig``."""
        return cls(
            config.package_name,
            config.api_token,
            config.app_token,
            base_url=config.base_url,
            session=session,
            timeout=config.timeout,
        )

    # ── account identity ───────────────────────────────────────

    @property
    def package_name(self) -> str:
        return self._package_name

    @property
    def api_token(self) -> str:
        return self._api_token

    @property
    def base_url(self) -> str:
        return self._transport.base_url

    @property
    def app_token(self) -> Optional[str]:
        return self.token.value if self.token is not None else None

    @property
    def app_token_expiry(self) -> int:
        """Absolute Unix expiry, ``NO_EXPIRY`` for caller-supplied tokens, 0 if unset."""
        return self.token.expires_at if self.token is not None else 0

    # ── token lifecycle ────────────────────────────────────────

    def needs_refresh(self) -> bool:
        return self._lifecycle.needs_refresh(self)

    def refresh_token(self) -> AppToken:
        """Renew the app token now. See ``TokenLifecycle.refresh``."""
        return self._lifecycle.refresh(self)

    def login(self, username: str, password: str) -> None:
        """
        Obtain an app token on behalf of a user.

        Raises:
            MissingCredentialsError: ``username`` or ``password`` is empty.
            TokenTransportError: The login call failed, e.g. 401 for a wrong
                package name or API token.
            TokenDecodeError: The login response was malformed.
        """
        if not username or not password:
            raise MissingCredentialsError(
                "username and password are required to obtain an app token"
            )

        try:
            resp = self._transport.send(
                "POST",
                LOGIN_RESOURCE,
                body={"username": username, "password": password},
            )
        except TransportError as e:
            raise TokenTransportError("login failed", e) from e

        try:
            result = decode_login(resp.text)
        except ResponseDecodeError as e:
            raise TokenDecodeError(e.raw_body) from e

        self.username = username
        self.token = AppToken.from_login(result)
        logger.info("App token obtained for user %s", username)

    # ── devices ────────────────────────────────────────────────

    def list_devices(self, replace_cache: bool = False) -> List[Device]:
        """
        Fetch the devices registered on the account.

        Each returned id is appended to ``self.devices``, so repeated calls
        accumulate duplicates unless ``replace_cache`` is set.
        """
        self._lifecycle.ensure_fresh(self)
        resp = self._transport.send("GET", DEVICES_RESOURCE, app_token=self.app_token)
        devices = decode_devices(resp.text)

        if replace_cache:
            self.devices = []
        self.devices.extend(device.id for device in devices)
        logger.info("Obtained %d registered device(s)", len(devices))
        return devices

    def _resolve_devices(self, devices: Optional[Sequence[str]]) -> List[str]:
        if devices:
            return list(devices)
        if not self.devices:
            logger.info("No devices given, acquiring devices")
            self.list_devices()
        return list(self.devices)

    # ── notifications ──────────────────────────────────────────

    def send(self, notification: Notification) -> ServiceEnvelope:
        """
        Send any notification variant.

        An empty ``notification.devices`` addresses the cached devices,
        discovering them first when the cache is empty.

        Raises:
            ClientError: Invalid notification fields, rejection by the
                service or an undecodable response.
            AuthError: The token refresh preceding the request failed.
            TransportError: The request itself failed.
        """
        notification.validate()
        devices = self._resolve_devices(notification.devices)
        body = notification.body(devices)

        self._lifecycle.ensure_fresh(self)
        resp = self._transport.send(
            "PUT", notification.resource, body=body, app_token=self.app_token
        )
        envelope = decode_envelope(resp.text)
        logger.info(
            "%s sent to %d device(s): %s",
            type(notification).__name__,
            len(devices),
            envelope.success,
        )
        return envelope

    def send_text(
        self,
        content: str,
        devices: Optional[Sequence[str]] = None,
        silent: bool = False,
    ) -> ServiceEnvelope:
        return self.send(TextNotification(content, devices or (), silent))

    def send_url(
        self,
        url: str,
        devices: Optional[Sequence[str]] = None,
        silent: bool = False,
    ) -> ServiceEnvelope:
        return self.send(UrlNotification(url, devices or (), silent))

    def send_text_and_url(
        self,
        content: str,
        url: str,
        devices: Optional[Sequence[str]] = None,
        silent: bool = False,
    ) -> ServiceEnvelope:
        """Send text that opens ``url`` when the notification is tapped."""
        return self.send(TextUrlNotification(content, url, devices or (), silent))

    def send_image(
        self,
        path: Union[str, "os.PathLike[str]"],
        devices: Optional[Sequence[str]] = None,
        silent: bool = False,
    ) -> ServiceEnvelope:
        """Send the image file at ``path`` (base64-encoded, under 5 MB)."""
        return self.send(ImageNotification.from_path(path, devices or (), silent))

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> "PushNotifier":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
