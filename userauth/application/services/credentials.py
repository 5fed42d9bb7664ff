# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Password hashing, OTP generation and the keyed OTP envelope."""

from __future__ import annotations

import hashlib
import hmac
import secrets
import time
from collections.abc import Callable

from userauth.application.services import otp_envelope
from userauth.domain.users.entities import OtpEnvelope
from userauth.domain.users.exceptions import OtpExpiredError, OtpInvalidError
from userauth.domain.users.repositories import PasswordHasher
from userauth.shared.config import OtpConfig
from userauth.shared.errors.base import ValidationError

Clock = Callable[[], int]

GRANT_MARKER = "email-change"


def epoch_ms() -> int:
    return time.time_ns() // 1_000_000


class CredentialService:
    def __init__(
        self,
        *,
        config: OtpConfig,
        password_hasher: PasswordHasher,
        clock: Clock = epoch_ms,
    ) -> None:
        self._secret = config.hash_secret.encode()
        self._ttl_ms = config.ttl_seconds * 1000
        self._otp_length = config.length
        self._password_hasher = password_hasher
        self._clock = clock

    def now_ms(self) -> int:
        return self._clock()

    def hash_password(self, plaintext: str) -> str:
        if not plaintext:
            raise ValidationError(context={"fields": ["password"]})
        return self._password_hasher.hash(plaintext)

    def compare_password(self, plaintext: str, hashed: str) -> bool:
        return self._password_hasher.verify(plaintext, hashed)

    def generate_otp(self) -> str:
        return str(secrets.randbelow(10**self._otp_length)).zfill(self._otp_length)

    def hash_proof(self, material: str) -> str:
        return hmac.new(self._secret, material.encode(), hashlib.sha256).hexdigest()

    @staticmethod
    def proof_material(otp: str, email: str, expires_at_ms: int, password_hash: str) -> str:
        return f"{otp}.{email}.{expires_at_ms}.{password_hash}"

    def seal(self, otp: str, email: str, password_hash: str) -> OtpEnvelope:
        expires_at_ms = self.now_ms() + self._ttl_ms
        proof = self.hash_proof(self.proof_material(otp, email, expires_at_ms, password_hash))
        return OtpEnvelope(proof=proof, expires_at_ms=expires_at_ms, password_hash=password_hash)

    def open(self, otp: str, email: str, raw_envelope: str) -> OtpEnvelope:
        """Check an envelope returned by the client.

        Raises ``OtpInvalidError`` for a malformed or tampered envelope and
        ``OtpExpiredError`` once the clock has passed its expiry. Nothing in
        the error tells which part failed to match.
        """
        if not otp.isdigit():
            raise OtpInvalidError()
        return self._verify(otp, email, raw_envelope)

    def _verify(self, otp: str, email: str, raw_envelope: str) -> OtpEnvelope:
        envelope = otp_envelope.decode(raw_envelope)
        if self.now_ms() > envelope.expires_at_ms:
            raise OtpExpiredError()

        expected = self.hash_proof(
            self.proof_material(otp, email, envelope.expires_at_ms, envelope.password_hash)
        )
        if not hmac.compare_digest(expected, envelope.proof):
            raise OtpInvalidError()
        return envelope

    def issue_grant(self, email: str, password_hash: str) -> OtpEnvelope:
        return self.seal(GRANT_MARKER, email, password_hash)

    def check_grant(self, email: str, raw_grant: str) -> OtpEnvelope:
        return self._verify(GRANT_MARKER, email, raw_grant)


__all__ = ["Clock", "CredentialService", "epoch_ms"]
