# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class ChangePasswordRequest:
    user_id: int
    old_password: str
    new_password: str
    confirm_password: str


@dataclass(slots=True, frozen=True)
class EmailChangeOtpSent:
    email: str
    hash_otp: str


@dataclass(slots=True, frozen=True)
class VerifyCurrentEmailRequest:
    user_id: int
    otp: str
    hash_otp: str


@dataclass(slots=True, frozen=True)
class EmailChangeGranted:
    grant: str


@dataclass(slots=True, frozen=True)
class SendNewEmailOtpRequest:
    user_id: int
    new_email: str
    grant: str


@dataclass(slots=True, frozen=True)
class VerifyNewEmailRequest:
    user_id: int
    new_email: str
    otp: str
    hash_otp: str
    grant: str


@dataclass(slots=True, frozen=True)
class AvatarUpload:
    user_id: int
    filename: str
    content: bytes
