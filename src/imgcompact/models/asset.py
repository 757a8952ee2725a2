"""Data models for assets, geometry and encode requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import NamedTuple


class ImageFormat(str, Enum):
    JPEG = "JPEG"
    PNG = "PNG"
    WEBP = "WEBP"
    GIF = "GIF"
    BMP = "BMP"
    TIFF = "TIFF"


# Every spelling we accept for a format tag: Pillow names, MIME types, extensions.
_FORMAT_ALIASES: dict[str, ImageFormat] = {
    "jpeg": ImageFormat.JPEG,
    "jpg": ImageFormat.JPEG,
    "image/jpeg": ImageFormat.JPEG,
    "image/jpg": ImageFormat.JPEG,
    "png": ImageFormat.PNG,
    "image/png": ImageFormat.PNG,
    "webp": ImageFormat.WEBP,
    "image/webp": ImageFormat.WEBP,
    "gif": ImageFormat.GIF,
    "image/gif": ImageFormat.GIF,
    "bmp": ImageFormat.BMP,
    "image/bmp": ImageFormat.BMP,
    "tif": ImageFormat.TIFF,
    "tiff": ImageFormat.TIFF,
    "image/tiff": ImageFormat.TIFF,
}


def normalize_format(tag: ImageFormat | str) -> ImageFormat | str:
    """Map a Pillow name, MIME type or extension to an ImageFormat.

    Unknown tags are returned upper-cased so they can still be reported.
    """
    if isinstance(tag, ImageFormat):
        return tag
    key = tag.strip().lower().lstrip(".")
    return _FORMAT_ALIASES.get(key, tag.strip().upper())


class Dimensions(NamedTuple):
    width: int
    height: int

    @property
    def is_known(self) -> bool:
        return self.width > 0 and self.height > 0

    @property
    def longest_edge(self) -> int:
        return max(self.width, self.height)

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


def format_label(fmt: ImageFormat | str) -> str:
    return fmt.value if isinstance(fmt, ImageFormat) else str(fmt)


# Sentinel returned by probes that could not decode the image.
UNKNOWN_DIMENSIONS = Dimensions(0, 0)

# Asset.size placeholder meaning "use len(data)".
UNSET_SIZE = -1


@dataclass(frozen=True, slots=True)
class Asset:
    """An image payload with its declared format and byte size."""

    data: bytes = field(repr=False)
    format: ImageFormat | str
    size: int = UNSET_SIZE
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "format", normalize_format(self.format))
        if self.size == UNSET_SIZE:
            object.__setattr__(self, "size", len(self.data))
        elif self.size < 0:
            raise ValueError(f"size must be non-negative, got {self.size}")
        if self.size == 0:
            raise ValueError("asset is empty")

    @property
    def format_name(self) -> str:
        return format_label(self.format)

    @classmethod
    def from_path(cls, path: str | Path) -> Asset:
        """Read an asset from disk, taking the format from the file extension."""
        path = Path(path)
        data = path.read_bytes()
        return cls(data=data, format=path.suffix or "unknown", name=path.name)


@dataclass(frozen=True, slots=True)
class EncodeRequest:
    quality: float
    format: ImageFormat | str
    longest_edge: int | None = None

    def describe(self) -> str:
        edge = f", longest edge {self.longest_edge}px" if self.longest_edge else ""
        return f"{format_label(self.format)} at quality {self.quality:.2f}{edge}"
