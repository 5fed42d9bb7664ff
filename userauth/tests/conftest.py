from __future__ import annotations

import os

# Config, engine and rate limiters are built at import time.
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENABLE_RATE_LIMIT"] = "false"
os.environ["ACCESS_TOKEN_SECRET"] = "access-secret-for-tests-0123456789abcdef"
os.environ["REFRESH_TOKEN_SECRET"] = "refresh-secret-for-tests-0123456789abcdef"
os.environ["OTP_HASH_SECRET"] = "otp-secret-for-tests-0123456789abcdef"
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("CLOUDINARY_CLOUD_NAME", None)
