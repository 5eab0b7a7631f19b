"""Thumbnail URLs for browser items of entities with media."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

if TYPE_CHECKING:
    from browserforge.metadata.loader import EntityModel


@dataclass
class MediaSettings:
    """Base URL that stored image paths are served from."""

    media_url: str = "/media"

    @classmethod
    def from_env(cls) -> MediaSettings:
        return cls(media_url=os.environ.get("BROWSERFORGE_MEDIA_URL", "/media"))


class ThumbnailResolver:
    """Builds a cropped thumbnail URL from an entity's thumbnail field."""

    def __init__(self, settings: MediaSettings | None = None):
        self.settings = settings or MediaSettings.from_env()

    def __call__(
        self, record: dict[str, Any], entity: EntityModel, w: int = 100, h: int = 100
    ) -> str | None:
        if entity.media is None:
            return None

        image = record.get(entity.media.thumbnail_field)
        if not image:
            return None

        if image.startswith(("http://", "https://")):
            base = image
        else:
            base = f"{self.settings.media_url.rstrip('/')}/{image.lstrip('/')}"

        query = urlencode({"w": w, "h": h, "fit": "crop"})
        return f"{base}?{query}"
