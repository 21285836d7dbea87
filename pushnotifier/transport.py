"""
HTTP transport for the PushNotifier REST API.

Every request carries HTTP Basic auth (package name / API token), a JSON
content type and, when an app token is held, the ``X-AppToken`` header.
Any status other than 200 is an error; retries are left to the caller.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import urljoin

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout

from .errors import NonSuccessResponseError, ServiceUnreachableError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.pushnotifier.de/v2/"
DEFAULT_TIMEOUT = 15
APP_TOKEN_HEADER = "X-AppToken"
JSON_HEADERS = {
    "Content-Type": "application/json; charset=utf-8",
    "Accept": "application/json",
}


class Transport:
    """Thin wrapper around a ``requests.Session`` bound to one account."""

    def __init__(
        self,
        package_name: str,
        api_token: str,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        if not base_url.endswith("/"):
            base_url += "/"
        self.base_url = base_url
        self.timeout = timeout
        self._auth = (package_name, api_token)
        self._session = session if session is not None else requests.Session()

    def url(self, resource: str) -> str:
        return urljoin(self.base_url, resource)

    def send(
        self,
        method: str,
        resource: str,
        body: Optional[Dict[str, Any]] = None,
        app_token: Optional[str] = None,
    ) -> requests.Response:
        """
        Issue a request against ``resource`` relative to the base URL.

        Args:
            method: HTTP method (GET, POST, PUT).
            resource: Resource path, e.g. ``notifications/text``.
            body: JSON body, omitted when None.
            app_token: Session token sent as ``X-AppToken`` when non-empty.

        Returns:
            The 200 response.

        Raises:
            ServiceUnreachableError: The request never got a response.
            NonSuccessResponseError: The service answered with a non-200 status.
        """
        url = self.url(resource)
        headers: Dict[str, str] = dict(JSON_HEADERS)
        if app_token:
            headers[APP_TOKEN_HEADER] = app_token

        kwargs: Dict[str, Any] = {
            "headers": headers,
            "auth": self._auth,
            "timeout": self.timeout,
        }
        if body is not None:
            kwargs["json"] = body

        try:
            resp = self._session.request(method, url, **kwargs)
        except Timeout as e:
            logger.error("PushNotifier %s %s timed out", method, resource)
            raise ServiceUnreachableError(f"{method} {resource} timed out", e) from e
        except ConnectionError as e:
            logger.error("PushNotifier %s %s connection failed: %s", method, resource, e)
            raise ServiceUnreachableError(f"{method} {resource} connection failed", e) from e
        except RequestException as e:
            logger.error("PushNotifier %s %s failed: %s", method, resource, e)
            raise ServiceUnreachableError(f"{method} {resource} failed", e) from e

        logger.debug("PushNotifier %s %s - Status: %d", method, resource, resp.status_code)

        if resp.status_code != 200:
            logger.error(
                "PushNotifier %s %s returned %d: %s",
                method,
                resource,
                resp.status_code,
                resp.text[:500],
            )
            raise NonSuccessResponseError(resp.status_code, resp.reason or "", resp.text)

        return resp

    def close(self) -> None:
        self._session.close()
