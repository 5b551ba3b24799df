from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from settings.config import settings


class LocalArtifactStorage:
    """
    Filesystem-backed storage for uploaded statement files.
    Stores under base_dir/<key>, where key is "<bank_account_id>/<ts>_<filename>".
    """

    def __init__(self, base_dir: Optional[str] = None) -> None:
        self.base_dir = base_dir or settings.STATEMENT_LOCAL_DIR
        os.makedirs(self.base_dir, exist_ok=True)

    def _path(self, key: str) -> str:
        path = os.path.normpath(os.path.join(self.base_dir, key))
        if not path.startswith(os.path.normpath(self.base_dir) + os.sep):
            raise ValueError(f"Invalid storage key: {key}")
        return path

    def has(self, key: str) -> bool:
        return os.path.exists(self._path(key))

    def read(self, key: str) -> bytes:
        path = self._path(key)
        if not os.path.exists(path):
            raise FileNotFoundError(f"No stored file for {key}")
        with open(path, "rb") as f:
            return f.read()

    async def save(self, key: str, data: bytes, content_type: str = "application/pdf") -> str:
        path = self._path(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
        return Path(path).as_uri()
