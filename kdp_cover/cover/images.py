"""
Image resolution for cover panels

Images are fetched and decoded before compositing; the compositor only
reads the decoded Pillow images. A failed image becomes None so the panel
falls back to its placeholder.
"""

import base64
import binascii
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import requests
from PIL import Image, UnidentifiedImageError

from kdp_cover.config.profiles import load_settings

logger = logging.getLogger(__name__)


class ImageDecodeError(Exception):
    """Raised when an image source cannot be fetched or decoded."""


@dataclass(frozen=True)
class CoverImages:
    front: Optional[Image.Image] = None
    ai_back: Optional[Image.Image] = None


def _decode(data: bytes, source: str) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageDecodeError(f"Cannot decode image from {source[:80]}: {e}") from e
    if image.mode not in ("RGB", "RGBA"):
        image = image.convert("RGBA")
    return image


def _read_data_url(source: str) -> bytes:
    header, _, payload = source.partition(",")
    if not payload:
        raise ImageDecodeError("Empty data URL")
    try:
        if header.endswith(";base64"):
            return base64.b64decode(payload, validate=False)
        return payload.encode("latin-1")
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ImageDecodeError(f"Malformed data URL: {e}") from e


def resolve_image(source: str, timeout: Optional[float] = None) -> Image.Image:
    """Fetch and decode an http(s) URL, data: URL or local file path."""
    if not source:
        raise ImageDecodeError("No image source")
    if source.startswith("data:"):
        return _decode(_read_data_url(source), "data URL")
    if source.startswith(("http://", "https://")):
        timeout = timeout if timeout is not None else load_settings().image_timeout_s
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ImageDecodeError(f"Cannot fetch {source}: {e}") from e
        return _decode(response.content, source)
    path = Path(source)
    if not path.is_file():
        raise ImageDecodeError(f"Image file not found: {source}")
    return _decode(path.read_bytes(), source)


def load_cover_images(front: Optional[str] = None, ai_back: Optional[str] = None,
                      timeout: Optional[float] = None) -> CoverImages:
    loaded = {}
    for role, source in (("front", front), ("ai_back", ai_back)):
        if not source:
            continue
        try:
            loaded[role] = resolve_image(source, timeout)
        except ImageDecodeError as e:
            logger.warning("Using placeholder for %s image: %s", role, e)
    return CoverImages(**loaded)
