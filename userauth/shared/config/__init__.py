# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .settings import AppConfig, MediaConfig, OtpConfig, TokenConfig, load_config

__all__ = ["AppConfig", "MediaConfig", "OtpConfig", "TokenConfig", "load_config"]
