from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
OTP_PATTERN = r"^\d{4,10}$"


def normalize_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Email must be a valid address")
    return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(validate_by_name=True, str_strip_whitespace=True)


class SendOtpRequestDTO(_CamelModel):
    full_name: str = Field(alias="fullName", min_length=1, max_length=128)
    email: str = Field(max_length=255)
    password: str = Field(min_length=8, max_length=128)
    confirm_password: str = Field(alias="confirmPassword", min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class VerifyOtpRequestDTO(_CamelModel):
    full_name: str = Field(alias="fullName", min_length=1, max_length=128)
    email: str = Field(max_length=255)
    otp: str = Field(pattern=OTP_PATTERN)
    hash_otp: str = Field(alias="hashOtp", min_length=1, max_length=1024)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class LoginRequestDTO(_CamelModel):
    email: str = Field(max_length=255)
    password: str = Field(min_length=1, max_length=128)  # No strength check on login

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class OtpSentDTO(BaseModel):
    full_name: str = Field(serialization_alias="fullName")
    email: str
    hash_otp: str = Field(serialization_alias="hashOtp")


class UserDTO(BaseModel):
    id: int
    full_name: str = Field(serialization_alias="fullName")
    email: str
    role: str
    avatar: str | None = None
    created_at: str | None = Field(None, serialization_alias="createdAt")

    @classmethod
    def from_user(cls, user: Any) -> UserDTO:
        return cls(
            id=user.id,
            full_name=user.full_name,
            email=user.email,
            role=user.role.value,
            avatar=user.avatar_url,
            created_at=user.created_at.isoformat() if user.created_at else None,
        )

    def dump(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class LogoutDTO(BaseModel):
    user: None = None
    message: str = "User successfully logout."
