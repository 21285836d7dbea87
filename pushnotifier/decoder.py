"""Decoding of PushNotifier JSON responses into typed models."""

import logging
from typing import List

from pydantic import TypeAdapter, ValidationError

from .errors import ResponseDecodeError, ServiceRejectedError
from .models import Device, LoginResult, ServiceEnvelope

logger = logging.getLogger(__name__)

_devices_adapter = TypeAdapter(List[Device])


def decode_login(raw_body: str) -> LoginResult:
    """Decode a login/refresh body. Raises ResponseDecodeError on bad shape."""
    try:
        return LoginResult.model_validate_json(raw_body)
    except ValidationError as e:
        logger.debug("Login response did not validate: %s", e)
        raise ResponseDecodeError(raw_body) from e


def decode_devices(raw_body: str) -> List[Device]:
    try:
        return _devices_adapter.validate_json(raw_body)
    except ValidationError as e:
        logger.debug("Devices response did not validate: %s", e)
        raise ResponseDecodeError(raw_body) from e


def decode_envelope(raw_body: str) -> ServiceEnvelope:
    """
    Decode the envelope returned by the notification endpoints.

    Raises:
        ResponseDecodeError: The body is not a JSON object of the envelope shape.
        ServiceRejectedError: The envelope lists one or more errors.
    """
    try:
        envelope = ServiceEnvelope.model_validate_json(raw_body)
    except ValidationError as e:
        logger.debug("Envelope response did not validate: %s", e)
        raise ResponseDecodeError(raw_body) from e

    if envelope.error:
        raise ServiceRejectedError(envelope.error)
    return envelope
