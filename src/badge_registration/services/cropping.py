"""Square photo crop engine backed by Pillow."""

import asyncio
import base64
import binascii
import io

from PIL import Image, ImageOps

from badge_registration.domain.errors import (
    EncodeError,
    ImageLoadError,
    ValidationError,
)
from badge_registration.domain.photos import CropRect, CropSource, EncodedPhoto

JPEG_QUALITY = 90
MIN_ZOOM = 1.0
MAX_ZOOM = 3.0

_LOAD_ERRORS = (OSError, ValueError, Image.DecompressionBombError)


def read_as_data_url(data: bytes, content_type: str | None = None) -> str:
    """Encode raw file bytes as a base64 data URL."""
    mime_type = content_type or _detect_mime_type(data)
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def decode_data_url(data_url: str) -> bytes:
    """Return the bytes carried by a base64 data URL."""
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ImageLoadError("Could not load image.")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ImageLoadError("Could not load image.") from exc


def load_source(data: bytes, content_type: str | None = None) -> CropSource:
    """Decode a selected file and describe it as a crop source."""
    image = _open_image(data)
    width, height = image.size
    return CropSource(
        data_url=read_as_data_url(data, content_type),
        width=width,
        height=height,
    )


def clamp_zoom(zoom: float) -> float:
    """Clamp a zoom factor into the supported slider range."""
    return min(max(float(zoom), MIN_ZOOM), MAX_ZOOM)


def centered_square(width: int, height: int, zoom: float = MIN_ZOOM) -> CropRect:
    """Return the centred square crop an aspect-1 cropper starts from."""
    side = max(1, round(min(width, height) / clamp_zoom(zoom)))
    return CropRect(
        x=(width - side) // 2,
        y=(height - side) // 2,
        width=side,
        height=side,
    )


def fit_square(rect: CropRect, width: int, height: int) -> CropRect:
    """Shrink and shift a square crop so it lies inside the source.

    Empty rectangles, rectangles that miss the source and non-square
    rectangles raise ``ValidationError``.
    """
    if rect.width <= 0 or rect.height <= 0:
        raise ValidationError("Select a crop area.")
    if rect.width != rect.height:
        raise ValidationError("Crop must be square.")
    if (
        rect.x >= width
        or rect.y >= height
        or rect.x + rect.width <= 0
        or rect.y + rect.height <= 0
    ):
        raise ValidationError("Select a crop area.")
    side = min(rect.width, width, height)
    return CropRect(
        x=min(max(rect.x, 0), width - side),
        y=min(max(rect.y, 0), height - side),
        width=side,
        height=side,
    )


def render_crop(source: bytes, rect: CropRect) -> EncodedPhoto:
    """Render the pixels inside ``rect`` and encode them as JPEG.

    The output canvas is exactly ``rect.width`` x ``rect.height``. Parts of
    the rectangle lying outside the source stay black, the same way a canvas
    draw leaves them unpainted.
    """
    if rect.width <= 0 or rect.height <= 0:
        raise ValidationError("Select a crop area.")
    image = _open_image(source)
    cropped = image.convert("RGB").crop(rect.box)
    buffer = io.BytesIO()
    try:
        cropped.save(buffer, format="JPEG", quality=JPEG_QUALITY)
    except (OSError, ValueError) as exc:
        raise EncodeError("Could not crop image.") from exc
    blob = buffer.getvalue()
    if not blob:
        raise EncodeError("Could not crop image.")
    return EncodedPhoto(
        blob=blob,
        preview=read_as_data_url(blob, "image/jpeg"),
        width=cropped.width,
        height=cropped.height,
    )


async def crop(source: CropSource | str, rect: CropRect) -> EncodedPhoto:
    """Crop a source image without blocking the event loop."""
    data_url = source.data_url if isinstance(source, CropSource) else source
    data = decode_data_url(data_url)
    return await asyncio.to_thread(render_crop, data, rect)


def _open_image(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except _LOAD_ERRORS as exc:
        raise ImageLoadError("Could not load image.") from exc
    return ImageOps.exif_transpose(image)


def _detect_mime_type(data: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data[:6] in {b"GIF87a", b"GIF89a"}:
        return "image/gif"
    return "application/octet-stream"
