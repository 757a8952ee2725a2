"""Shared fixtures: programmatic test images and scripted collaborators."""

from __future__ import annotations

from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from imgcompact.models.asset import Asset, Dimensions, EncodeRequest, ImageFormat


class FakeEncoder:
    """Returns scripted outputs in order; Exception instances are raised."""

    def __init__(self, *outputs: bytes | Exception) -> None:
        self.outputs = list(outputs)
        self.requests: list[EncodeRequest] = []

    async def encode(self, data: bytes, request: EncodeRequest) -> bytes:
        self.requests.append(request)
        out = self.outputs.pop(0)
        if isinstance(out, Exception):
            raise out
        return out


class FakeProber:
    def __init__(self, dims: Dimensions = Dimensions(0, 0)) -> None:
        self.dims = dims
        self.calls = 0

    async def probe(self, data: bytes) -> Dimensions:
        self.calls += 1
        return self.dims


def make_asset(size: int = 1000, fmt: ImageFormat | str = ImageFormat.JPEG) -> Asset:
    return Asset(data=b"\x00" * size, format=fmt, name="test")


def image_bytes(
    width: int = 200,
    height: int = 150,
    fmt: str = "JPEG",
    mode: str = "RGB",
    **save_kwargs: object,
) -> bytes:
    """Encode a random-noise image; noise keeps lossy sizes quality-sensitive."""
    channels = len(mode)
    arr = np.random.randint(0, 256, (height, width, channels), dtype=np.uint8)
    img = Image.fromarray(arr if channels > 1 else arr[:, :, 0])
    buf = BytesIO()
    img.save(buf, format=fmt, **save_kwargs)
    return buf.getvalue()


@pytest.fixture
def jpeg_bytes() -> bytes:
    return image_bytes(400, 300, "JPEG", quality=95)


@pytest.fixture
def png_bytes() -> bytes:
    return image_bytes(200, 150, "PNG")


@pytest.fixture
def rgba_png_bytes() -> bytes:
    return image_bytes(120, 80, "PNG", mode="RGBA")


@pytest.fixture
def jpeg_file(tmp_path, jpeg_bytes):
    path = tmp_path / "photo.jpg"
    path.write_bytes(jpeg_bytes)
    return path
