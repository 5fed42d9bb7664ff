# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Avatar storage adapters."""

from __future__ import annotations

import secrets
from pathlib import Path

import cloudinary
import cloudinary.uploader

from userauth.domain.users.repositories import AvatarStore
from userauth.shared.config import MediaConfig
from userauth.shared.errors.base import MediaUploadError
from userauth.shared.logging import logger


class LocalAvatarStore(AvatarStore):
    """Stores avatars on the local filesystem within the configured root."""

    def __init__(self, root: Path, base_url: str) -> None:
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)
        self._base_url = base_url.rstrip("/")

    def _resolve(self, relative_path: str) -> Path:
        path = (self._root / relative_path).resolve()
        if not path.is_relative_to(self._root.resolve()):
            msg = "Attempted directory traversal outside storage root"
            raise ValueError(msg)
        return path

    def upload(self, user_id: int, filename: str, content: bytes) -> str:
        name = f"{secrets.token_hex(8)}{Path(filename).suffix.lower()}"
        relative = f"avatars/{user_id}/{name}"
        file_path = self._resolve(relative)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(content)
        except OSError as exc:
            logger.error(f"media.local: write failed path={file_path}: {exc}")
            raise MediaUploadError() from exc
        logger.debug(f"media.local: write path={file_path} size={len(content)}")
        return f"{self._base_url}/{relative}"


class CloudinaryAvatarStore(AvatarStore):
    def __init__(self, config: MediaConfig) -> None:
        cloudinary.config(
            cloud_name=config.cloudinary_cloud_name,
            api_key=config.cloudinary_api_key,
            api_secret=config.cloudinary_api_secret,
            secure=True,
        )
        self._folder = config.cloudinary_folder

    def upload(self, user_id: int, filename: str, content: bytes) -> str:
        try:
            result = cloudinary.uploader.upload(
                content,
                resource_type="image",
                folder=f"{self._folder}/{user_id}",
                overwrite=True,
                invalidate=True,
            )
        except Exception as exc:
            logger.error(f"media.cloudinary: upload failed user_id={user_id}: {type(exc).__name__}")
            raise MediaUploadError() from exc

        url = result.get("secure_url") or result.get("url")
        if not url:
            raise MediaUploadError()
        logger.info(f"media.cloudinary: uploaded user_id={user_id} public_id={result.get('public_id')}")
        return str(url)


def build_avatar_store(config: MediaConfig) -> AvatarStore:
    if config.cloudinary_enabled():
        return CloudinaryAvatarStore(config)
    return LocalAvatarStore(config.root, config.base_url)


__all__ = ["CloudinaryAvatarStore", "LocalAvatarStore", "build_avatar_store"]
