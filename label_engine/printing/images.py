"""
Raster images as ZPL ^GFA graphic fields.

The image is flattened onto white, scaled to the element box, converted
to 1 bit with a fixed grey threshold and hex encoded, one bit per dot,
rows padded to whole bytes, 1 = printed.
"""

from __future__ import annotations

import base64
import binascii
import io

from PIL import Image, UnidentifiedImageError


class ImageDecodeError(ValueError):
    """Raised when element image data cannot be decoded."""


def decode_image_data(image_data: str) -> bytes:
    """Decode base64 image data, with or without a ``data:`` URL prefix."""
    payload = image_data.strip()
    if payload.startswith("data:"):
        _, _, payload = payload.partition(",")
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Invalid base64 image data: {e}") from e


def load_monochrome(image_data: str, width: int, height: int, threshold: int = 128) -> Image.Image:
    raw = decode_image_data(image_data)
    try:
        with Image.open(io.BytesIO(raw)) as source:
            rgba = source.convert("RGBA")
    except (UnidentifiedImageError, OSError) as e:
        raise ImageDecodeError(f"Unreadable image: {e}") from e
    except Image.DecompressionBombError as e:
        raise ImageDecodeError(f"Image too large: {e}") from e

    flat = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
    flat.alpha_composite(rgba)
    grey = flat.convert("L").resize((max(width, 1), max(height, 1)), Image.Resampling.LANCZOS)
    return grey.point(lambda p: 255 if p <= threshold else 0).convert("1")


def image_to_gfa(image_data: str, width: int, height: int, threshold: int = 128) -> str:
    """
    Convert image data to a ``^GFA`` command sized ``width`` x ``height`` dots.

    Raises:
        ImageDecodeError: if the data is not a decodable image
    """
    bitmap = load_monochrome(image_data, width, height, threshold)
    bytes_per_row = (bitmap.width + 7) // 8
    data = bitmap.tobytes()
    return f"^GFA,{len(data)},{len(data)},{bytes_per_row},{data.hex().upper()}"
