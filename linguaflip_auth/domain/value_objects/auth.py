from __future__ import annotations

"""Request and result models for the authentication operations."""

from typing import Any, Dict, Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Requests -------------------------------------------------------------------
# ---------------------------------------------------------------------------


class _Request(BaseModel):
    model_config = ConfigDict(extra="ignore")


class RegisterData(_Request):
    """Payload for ``register``."""

    email: str = Field(default="", examples=["a@x.com"])
    username: Optional[str] = Field(default=None, examples=["learner_01"])
    password: str = Field(default="", examples=["Abc12345"])
    confirm_password: str = Field(default="", examples=["Abc12345"])


class LoginData(_Request):
    """Payload for ``login``."""

    email: str = Field(default="", examples=["a@x.com"])
    password: str = Field(default="", examples=["Abc12345"])
    device_info: Optional[str] = None
    ip_address: Optional[str] = None


class RefreshTokenData(_Request):
    """Payload for ``refresh_token``."""

    refresh_token: str = Field(default="", examples=["eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."])
    device_info: Optional[str] = None
    ip_address: Optional[str] = None


class PasswordResetData(_Request):
    """Payload for ``initiate_password_reset``."""

    email: str = Field(default="", examples=["a@x.com"])


class PasswordResetConfirmData(_Request):
    """Payload for ``confirm_password_reset``."""

    token: str = ""
    new_password: str = ""
    confirm_password: str = ""


class EmailVerificationData(_Request):
    """Payload for ``verify_email``."""

    token: str = ""


class SessionInfo(BaseModel):
    """Where a session was opened from."""

    device_info: str = "web"
    ip_address: str = "unknown"


# ---------------------------------------------------------------------------
# Token payloads -------------------------------------------------------------
# ---------------------------------------------------------------------------


class AccessTokenPayload(BaseModel):
    """Decoded claims of an access token."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str = Field(alias="userId")
    email: str
    type: Literal["access"] = "access"
    iat: Optional[int] = None
    exp: Optional[int] = None


class RefreshTokenPayload(BaseModel):
    """Decoded claims of a refresh token."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_id: str = Field(alias="userId")
    type: Literal["refresh"] = "refresh"
    iat: Optional[int] = None
    exp: Optional[int] = None


# ---------------------------------------------------------------------------
# Results --------------------------------------------------------------------
# ---------------------------------------------------------------------------


class AuthTokens(BaseModel):
    """Token pair handed to the client. ``expires_in`` is in milliseconds."""

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: Literal["Bearer"] = "Bearer"


class AuthResult(BaseModel):
    """Sanitized user view plus freshly issued tokens."""

    user: Dict[str, Any]
    tokens: AuthTokens


class MessageResult(BaseModel):
    message: str


class OperationResult(BaseModel, Generic[T]):
    """Uniform success wrapper returned by every operation; failures raise."""

    success: Literal[True] = True
    data: T
