from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .auth import OTP_PATTERN, normalize_email


class _CamelModel(BaseModel):
    model_config = ConfigDict(validate_by_name=True, str_strip_whitespace=True)


class UpdateFullNameDTO(_CamelModel):
    full_name: str = Field(alias="fullName", min_length=1, max_length=128)


class ChangePasswordDTO(_CamelModel):
    old_password: str = Field(alias="oldPassword", min_length=1, max_length=128)
    new_password: str = Field(alias="newPassword", min_length=8, max_length=128)
    confirm_password: str = Field(alias="confirmPassword", min_length=1, max_length=128)


class VerifyEmailOtpDTO(_CamelModel):
    otp: str = Field(pattern=OTP_PATTERN)
    hash_otp: str = Field(alias="hashOtp", min_length=1, max_length=1024)


class NewEmailDTO(_CamelModel):
    email: str = Field(max_length=255)
    grant: str = Field(min_length=1, max_length=1024)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class VerifyNewEmailDTO(NewEmailDTO):
    otp: str = Field(pattern=OTP_PATTERN)
    hash_otp: str = Field(alias="hashOtp", min_length=1, max_length=1024)


class EmailOtpSentDTO(BaseModel):
    email: str
    hash_otp: str = Field(serialization_alias="hashOtp")


class EmailChangeGrantDTO(BaseModel):
    grant: str
