# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Typed inputs and outputs of the authentication use cases."""

from __future__ import annotations

from dataclasses import dataclass

from userauth.domain.users.entities import User


@dataclass(slots=True, frozen=True)
class SendOtpRequest:
    full_name: str
    email: str
    password: str
    confirm_password: str


@dataclass(slots=True, frozen=True)
class OtpSent:
    full_name: str
    email: str
    hash_otp: str


@dataclass(slots=True, frozen=True)
class VerifyOtpRequest:
    full_name: str
    email: str
    otp: str
    hash_otp: str


@dataclass(slots=True, frozen=True)
class LoginRequest:
    email: str
    password: str


@dataclass(slots=True, frozen=True)
class SessionIssued:
    user: User
    access_token: str
    refresh_token: str


@dataclass(slots=True, frozen=True)
class LoggedOut:
    revoked: bool


__all__ = [
    "LoggedOut",
    "LoginRequest",
    "OtpSent",
    "SendOtpRequest",
    "SessionIssued",
    "VerifyOtpRequest",
]
