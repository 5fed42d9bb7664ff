# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from userauth.shared.errors.base import DomainError


class EmailAlreadyRegisteredError(DomainError):
    code = "email_already_registered"
    status = HTTPStatus.CONFLICT


class PasswordConfirmationError(DomainError):
    code = "password_confirmation_mismatch"
    status = HTTPStatus.BAD_REQUEST


class InvalidCredentialsError(DomainError):
    code = "invalid_credentials"
    status = HTTPStatus.UNAUTHORIZED


class OtpInvalidError(DomainError):
    code = "otp_invalid"
    status = HTTPStatus.BAD_REQUEST


class OtpExpiredError(DomainError):
    code = "otp_expired"
    status = HTTPStatus.REQUEST_TIMEOUT


class UserNotFoundError(DomainError):
    code = "user_not_found"
    status = HTTPStatus.NOT_FOUND


class InvalidTokenError(DomainError):
    code = "invalid_token"
    status = HTTPStatus.UNAUTHORIZED


class TokenExpiredError(DomainError):
    code = "token_expired"
    status = HTTPStatus.UNAUTHORIZED


class TokenRevokedError(DomainError):
    code = "token_revoked"
    status = HTTPStatus.UNAUTHORIZED


class AuthenticationRequiredError(DomainError):
    code = "authentication_required"
    status = HTTPStatus.UNAUTHORIZED


class PermissionDeniedError(DomainError):
    code = "permission_denied"
    status = HTTPStatus.FORBIDDEN


class CryptoError(DomainError):
    code = "crypto_error"
    status = HTTPStatus.INTERNAL_SERVER_ERROR


class TokenConfigurationError(DomainError):
    code = "token_configuration_error"
    status = HTTPStatus.INTERNAL_SERVER_ERROR
