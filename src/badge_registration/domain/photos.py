"""Domain models for photo cropping."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CropRect:
    """Crop rectangle in the source image's pixel space."""

    x: int
    y: int
    width: int
    height: int

    @property
    def box(self) -> tuple[int, int, int, int]:
        """Return the (left, top, right, bottom) box."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)


@dataclass(frozen=True)
class EncodedPhoto:
    """Encoded crop output and a renderable preview of the same bytes."""

    blob: bytes
    preview: str
    width: int
    height: int
    content_type: str = "image/jpeg"


@dataclass(frozen=True)
class CropSource:
    """A selected source image awaiting a crop."""

    data_url: str
    width: int
    height: int


@dataclass(frozen=True)
class PhotoArtifact:
    """Crop geometry together with the photo derived from it."""

    source: CropSource
    rect: CropRect
    zoom: float
    photo: EncodedPhoto
