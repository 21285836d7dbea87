"""
Notification variants and the JSON bodies sent for them.

Each variant knows its resource, validates its own fields and renders its
request body once the recipient device list is resolved.
"""

import base64
import logging
import os
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Sequence, Tuple, Union

from pydantic import AnyUrl, TypeAdapter, ValidationError

from .errors import (
    EmptyContentError,
    ImageIsDirectoryError,
    ImageUnreadableError,
    ImageNotFoundError,
    InvalidUrlError,
    MissingFieldError,
    PayloadTooLargeError,
)

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 5_000_000

_url_adapter = TypeAdapter(AnyUrl)


def validate_url(url: str) -> str:
    """Return ``url`` unchanged if it parses as an absolute URL."""
    try:
        _url_adapter.validate_python(url)
    except ValidationError as e:
        raise InvalidUrlError(url) from e
    return url


def encode_image(data: bytes) -> str:
    """Standard base64 text for raw image bytes."""
    return base64.b64encode(data).decode("ascii")


def load_image(path: Union[str, "os.PathLike[str]"]) -> Tuple[bytes, str]:
    """
    Read an image file for upload.

    Returns:
        ``(content, filename)`` where filename is the base name of ``path``.

    Raises:
        MissingFieldError: ``path`` is empty.
        ImageNotFoundError: Nothing exists at ``path``.
        ImageIsDirectoryError: ``path`` is a directory.
        ImageUnreadableError: The file cannot be read.
        PayloadTooLargeError: The file is ``MAX_IMAGE_BYTES`` or larger.
    """
    path = os.fspath(path)
    if not path:
        raise MissingFieldError("path")
    if not os.path.exists(path):
        raise ImageNotFoundError(path)
    if os.path.isdir(path):
        raise ImageIsDirectoryError(path)

    try:
        size = os.path.getsize(path)
        if size >= MAX_IMAGE_BYTES:
            raise PayloadTooLargeError(size, MAX_IMAGE_BYTES)

        with open(path, "rb") as f:
            content = f.read()
    except OSError as e:
        raise ImageUnreadableError(path, e.strerror or str(e)) from e
    return content, os.path.basename(path)


class _Notification:
    resource: ClassVar[str]
    devices: Sequence[str]
    silent: bool

    def validate(self) -> None:
        raise NotImplementedError

    def payload(self) -> Dict[str, Any]:
        raise NotImplementedError

    def body(self, devices: Sequence[str]) -> Dict[str, Any]:
        """Full request body addressed to ``devices``."""
        return {"devices": list(devices), **self.payload(), "silent": self.silent}


@dataclass(frozen=True)
class TextNotification(_Notification):
    content: str
    devices: Sequence[str] = ()
    silent: bool = False

    resource: ClassVar[str] = "notifications/text"

    def validate(self) -> None:
        if not self.content:
            raise EmptyContentError("text content to send as notification was empty")

    def payload(self) -> Dict[str, Any]:
        return {"content": self.content}


@dataclass(frozen=True)
class UrlNotification(_Notification):
    url: str
    devices: Sequence[str] = ()
    silent: bool = False

    resource: ClassVar[str] = "notifications/url"

    def validate(self) -> None:
        if not self.url:
            raise EmptyContentError("URL to send as notification was empty")
        validate_url(self.url)

    def payload(self) -> Dict[str, Any]:
        return {"url": self.url}


@dataclass(frozen=True)
class TextUrlNotification(_Notification):
    """Text notification that opens ``url`` when tapped."""

    content: str
    url: str
    devices: Sequence[str] = ()
    silent: bool = False

    resource: ClassVar[str] = "notifications/notification"

    def validate(self) -> None:
        if not self.content:
            raise MissingFieldError("content")
        if not self.url:
            raise MissingFieldError("url")
        validate_url(self.url)

    def payload(self) -> Dict[str, Any]:
        return {"content": self.content, "url": self.url}


@dataclass(frozen=True)
class ImageNotification(_Notification):
    content: bytes
    filename: str
    devices: Sequence[str] = ()
    silent: bool = False

    resource: ClassVar[str] = "notifications/image"

    @classmethod
    def from_path(
        cls,
        path: Union[str, "os.PathLike[str]"],
        devices: Sequence[str] = (),
        silent: bool = False,
    ) -> "ImageNotification":
        content, filename = load_image(path)
        logger.debug("Loaded image %s (%d bytes)", filename, len(content))
        return cls(content=content, filename=filename, devices=devices, silent=silent)

    def validate(self) -> None:
        if not self.filename:
            raise MissingFieldError("filename")
        if len(self.content) >= MAX_IMAGE_BYTES:
            raise PayloadTooLargeError(len(self.content), MAX_IMAGE_BYTES)

    def payload(self) -> Dict[str, Any]:
        return {"content": encode_image(self.content), "filename": self.filename}


Notification = Union[
    TextNotification,
    UrlNotification,
    TextUrlNotification,
    ImageNotification,
]
