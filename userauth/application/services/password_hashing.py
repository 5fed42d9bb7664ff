"""Password hashing strategies."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from userauth.domain.users.exceptions import CryptoError
from userauth.domain.users.repositories import PasswordHasher


class WerkzeugPasswordHasher(PasswordHasher):
    """Salted scrypt hashes; the cost parameters travel inside the hash string."""

    def __init__(self, method: str = "scrypt") -> None:
        self._method = method

    def hash(self, password: str) -> str:
        return str(generate_password_hash(password, method=self._method))

    def verify(self, password: str, hashed: str) -> bool:
        if not hashed or hashed.count("$") != 2:
            raise CryptoError(context={"reason": "malformed_hash"})
        try:
            return bool(check_password_hash(hashed, password))
        except (ValueError, TypeError) as exc:
            raise CryptoError(context={"reason": "malformed_hash"}) from exc
