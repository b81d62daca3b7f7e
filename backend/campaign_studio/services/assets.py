"""
Asset intake — stores uploaded brand assets and hands back opaque references.

File contents are never inspected.
"""
from __future__ import annotations

import logging
import re
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from .draft import AssetReference

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_filename(filename: str) -> str:
    name = Path(filename or "").name
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name[:128] or "asset"


class AssetIntake(ABC):
    @abstractmethod
    def accept(self, filename: str, data: bytes, content_type: str | None = None) -> AssetReference:
        ...


class LocalAssetIntake(AssetIntake):
    """Writes each asset to <base_dir>/<asset id>/<filename>."""

    def __init__(self, base_dir: Path | str):
        self.base_dir = Path(base_dir)

    def accept(self, filename: str, data: bytes, content_type: str | None = None) -> AssetReference:
        asset_id = uuid.uuid4().hex[:12]
        safe_name = sanitize_filename(filename)
        target_dir = self.base_dir / asset_id
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / safe_name).write_bytes(data)
        logger.info(f"[assets] Stored {safe_name} ({len(data)} bytes) as {asset_id}")
        return AssetReference(
            id=asset_id,
            filename=safe_name,
            size=len(data),
            content_type=content_type,
        )
