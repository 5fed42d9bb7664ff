# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Wire codec for OTP envelopes: ``<proof>#<expiresAtEpochMs>#<passwordHash>``."""

from __future__ import annotations

from userauth.domain.users.entities import OtpEnvelope
from userauth.domain.users.exceptions import OtpInvalidError

SEPARATOR = "#"


def encode(envelope: OtpEnvelope) -> str:
    return SEPARATOR.join(
        (envelope.proof, str(envelope.expires_at_ms), envelope.password_hash)
    )


def decode(raw: str) -> OtpEnvelope:
    parts = raw.split(SEPARATOR) if raw else []
    if len(parts) != 3:
        raise OtpInvalidError()

    proof, expires, password_hash = parts
    if not proof or not expires.isdigit():
        raise OtpInvalidError()

    return OtpEnvelope(proof=proof, expires_at_ms=int(expires), password_hash=password_hash)


__all__ = ["SEPARATOR", "decode", "encode"]
