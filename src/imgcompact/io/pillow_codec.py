"""Pillow-backed encoder and dimension prober."""

from __future__ import annotations

import asyncio
import logging
from io import BytesIO
from typing import Any

from PIL import Image, ImageOps, ImageSequence

from imgcompact.core.errors import CodecError
from imgcompact.models.asset import UNKNOWN_DIMENSIONS, Dimensions, EncodeRequest, format_label

logger = logging.getLogger(__name__)

_EXIF_ORIENTATION = 0x0112  # 274, image rotation tag
# Orientations 5-8 rotate by 90 degrees, swapping width and height
_TRANSPOSED_ORIENTATIONS = {5, 6, 7, 8}

MIN_PNG_COLORS = 2
# Formats Pillow can write as multi-frame
ANIMATED_FORMATS = {"GIF", "WEBP", "PNG"}
DEFAULT_FRAME_MS = 100
WEBP_METHOD = 4


class PillowProber:
    """Reads pixel dimensions without decoding the full image."""

    async def probe(self, data: bytes) -> Dimensions:
        return await asyncio.to_thread(probe_dimensions, data)


class PillowEncoder:
    """Re-encodes an image in its own format at the requested quality and size."""

    def __init__(self, jpeg_background: tuple[int, int, int] = (255, 255, 255)) -> None:
        self.jpeg_background = jpeg_background

    async def encode(self, data: bytes, request: EncodeRequest) -> bytes:
        return await asyncio.to_thread(self.encode_sync, data, request)

    def encode_sync(self, data: bytes, request: EncodeRequest) -> bytes:
        fmt = format_label(request.format)
        try:
            with BytesIO(data) as src, Image.open(src) as img:
                if getattr(img, "n_frames", 1) > 1 and fmt in ANIMATED_FORMATS:
                    return self._encode_frames(img, fmt, request)

                img.load()
                with self._render(img, fmt, request) as im:
                    out = BytesIO()
                    im.save(out, format=fmt, **_save_kwargs(fmt, request.quality))
                    return out.getvalue()
        except (OSError, ValueError, KeyError, Image.DecompressionBombError) as e:
            raise CodecError(f"could not encode {fmt}: {e}") from e

    def _encode_frames(self, img: Image.Image, fmt: str, request: EncodeRequest) -> bytes:
        """Re-encode every frame of an animation, keeping timing and loop count."""
        frames: list[Image.Image] = []
        durations: list[int] = []
        try:
            for frame in ImageSequence.Iterator(img):
                durations.append(frame.info.get("duration", img.info.get("duration", DEFAULT_FRAME_MS)))
                frames.append(self._render(frame, fmt, request))

            out = BytesIO()
            frames[0].save(
                out,
                format=fmt,
                save_all=True,
                append_images=frames[1:],
                duration=durations,
                loop=img.info.get("loop", 0),
                **_save_kwargs(fmt, request.quality),
            )
            return out.getvalue()
        finally:
            for frame in frames:
                frame.close()

    def _render(self, frame: Image.Image, fmt: str, request: EncodeRequest) -> Image.Image:
        """Orient, fit and convert one frame into a new image.

        Intermediate images are closed; the source frame is left open.
        """
        # Bake orientation into pixels; EXIF is not carried over
        oriented = ImageOps.exif_transpose(frame)
        fitted = _fit_longest_edge(oriented, request.longest_edge)
        if fitted is not oriented:
            oriented.close()
        prepared = self._prepare_mode(fitted, fmt, request.quality)
        if prepared is not fitted:
            fitted.close()
        return prepared

    def _prepare_mode(self, im: Image.Image, fmt: str, quality: float) -> Image.Image:
        if fmt == "JPEG":
            if _has_alpha(im):
                return _flatten_alpha(im, self.jpeg_background)
            if im.mode not in ("RGB", "L", "CMYK"):
                return im.convert("RGB")
            return im

        if fmt == "PNG" and quality < 1.0:
            mode = "RGBA" if _has_alpha(im) else "RGB"
            if im.mode == mode:
                return im.quantize(colors=max(MIN_PNG_COLORS, round(256 * quality)))
            with im.convert(mode) as converted:
                return converted.quantize(colors=max(MIN_PNG_COLORS, round(256 * quality)))

        return im


def probe_dimensions(data: bytes) -> Dimensions:
    """Return display dimensions of an encoded image, or (0, 0) if undecodable."""
    try:
        with BytesIO(data) as src, Image.open(src) as img:
            width, height = img.size
            if img.getexif().get(_EXIF_ORIENTATION) in _TRANSPOSED_ORIENTATIONS:
                width, height = height, width
            return Dimensions(width, height)
    except Exception as e:
        logger.debug("Dimension probe failed: %s", e)
        return UNKNOWN_DIMENSIONS


def _fit_longest_edge(im: Image.Image, longest_edge: int | None) -> Image.Image:
    """Downscale so the longer side equals longest_edge. Never upscales."""
    if not longest_edge or max(im.size) <= longest_edge:
        return im
    ratio = longest_edge / max(im.size)
    new_size = (max(1, int(im.width * ratio)), max(1, int(im.height * ratio)))
    return im.resize(new_size, Image.Resampling.LANCZOS)


def _save_kwargs(fmt: str, quality: float) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}

    if fmt == "JPEG":
        kwargs["quality"] = _percent(quality)
        kwargs["optimize"] = True

    elif fmt == "WEBP":
        kwargs["quality"] = _percent(quality)
        kwargs["method"] = WEBP_METHOD

    elif fmt in ("PNG", "GIF"):
        kwargs["optimize"] = True

    return kwargs


def _percent(quality: float) -> int:
    return max(1, min(100, round(quality * 100)))


def _flatten_alpha(im: Image.Image, background_rgb: tuple[int, int, int]) -> Image.Image:
    with im.convert("RGBA") as rgba, Image.new("RGBA", rgba.size, background_rgb + (255,)) as bg:
        with Image.alpha_composite(bg, rgba) as composite:
            return composite.convert("RGB")


def _has_alpha(im: Image.Image) -> bool:
    if im.mode in ("RGBA", "LA"):
        return True
    return im.mode == "P" and "transparency" in im.info
