# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from typing import Any

SENSITIVE_PATTERNS = [
    # Secrets
    (r"(secret\s*[:=]\s*['\"]?)([a-zA-Z0-9_\-]{8,})(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),

    # JWTs, wherever they show up
    (r"eyJ[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+", r"***JWT***"),
    (r"(bearer\s+)([a-zA-Z0-9_\-\.]{20,})", r"\1***REDACTED***", re.IGNORECASE),
    (r"((?:access|refresh)_?token\s*[:=]\s*['\"]?)([^'\"\s]{8,})(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),

    # OTP envelopes: <hex>#<expiry>#<hash>
    (r"\b[0-9a-f]{64}#\d{10,}#\S+", r"***ENVELOPE***"),
    (r"(otp\s*[:=]\s*['\"]?)(\d{4,10})(['\"]?)", r"\1******\3", re.IGNORECASE),

    # Passwords and password hashes
    (r"(password\s*[:=]\s*['\"]?)([^'\"\s]{1,})(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),
    (r"(scrypt|pbkdf2):[^\s$]+\$[^\s$]+\$[0-9a-f]+", r"***HASH***"),

    # Database URLs with credentials
    (r"(postgres(?:ql)?|mysql|mongodb)://([^:]+):([^@]+)@", r"\1://\2:***REDACTED***@"),

    # Email addresses (partial masking)
    (r"([a-zA-Z0-9._%+-]+)@([a-zA-Z0-9.-]+\.[a-zA-Z]{2,})", r"***@\2"),

    # Authorization headers
    (r"(authorization\s*:\s*['\"]?)([^'\"]{10,})(['\"]?)", r"\1***REDACTED***\3", re.IGNORECASE),
]


def sanitize_message(message: str) -> str:
    sanitized = message

    for pattern_tuple in SENSITIVE_PATTERNS:
        if len(pattern_tuple) == 2:
            pattern, replacement = pattern_tuple
            flags = 0
        else:
            pattern, replacement, flags = pattern_tuple

        sanitized = re.sub(pattern, replacement, sanitized, flags=flags)

    return sanitized


def sanitize_record(record: dict[str, Any]) -> bool:
    if record.get("extra", {}).get("unsanitized"):
        return True
    if "message" in record:
        record["message"] = sanitize_message(record["message"])
    return True
