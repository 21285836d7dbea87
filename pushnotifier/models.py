"""
Pydantic models for data exchanged with the PushNotifier API.

Field names follow the wire format of https://api.pushnotifier.de/v2/.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Expiry sentinel for app tokens supplied by the caller; such tokens are
# never refreshed.
NO_EXPIRY = -1


class Device(BaseModel):
    """A device registered on the user's account."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Device identifier, unique per account.")
    title: Optional[str] = Field(default=None, description="Display title.")
    model: Optional[str] = Field(default=None, description="Device model.")
    image: Optional[str] = Field(default=None, description="Image reference.")


class LoginResult(BaseModel):
    """Body returned by ``POST login`` and ``GET user/refresh``."""

    username: str
    avatar: Optional[str] = None
    app_token: str
    expires_at: int


# The refresh endpoint answers with the same shape as login.
RefreshResult = LoginResult


class ServiceEnvelope(BaseModel):
    """Success/error envelope returned by the notification endpoints."""

    success: Any
    error: List[str] = Field(default_factory=list)

    @field_validator("error", mode="before")
    @classmethod
    def _null_error_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def ok(self) -> bool:
        return not self.error


class AppToken(BaseModel):
    """An app token and its absolute Unix expiry, always replaced as a pair."""

    model_config = ConfigDict(frozen=True)

    value: str
    expires_at: int = NO_EXPIRY

    @property
    def tracks_expiry(self) -> bool:
        return self.expires_at != NO_EXPIRY

    @classmethod
    def from_login(cls, result: LoginResult) -> "AppToken":
        return cls(value=result.app_token, expires_at=result.expires_at)
