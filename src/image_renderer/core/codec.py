"""Pillow backed decode/resize/encode primitives."""

import io
from typing import Any, BinaryIO, Dict, Optional

from PIL import Image, UnidentifiedImageError

from .exceptions import DecodeError, EncodeError, with_error_handling
from .models import TargetFormat

# Modes each encoder can write without conversion.
_SUPPORTED_MODES = {
    TargetFormat.JPEG: {"RGB", "L", "CMYK"},
    TargetFormat.WEBP: {"RGB", "RGBA"},
    TargetFormat.PNG: {"RGB", "RGBA", "L", "LA", "P", "1", "I", "I;16"},
    TargetFormat.GIF: {"P", "L", "1"},
    TargetFormat.ICO: {"RGB", "RGBA"},
}

# Largest frame the ICO container can describe.
ICO_MAX_SIDE = 256


def _prepare_for_format(image: Image.Image, target_format: TargetFormat) -> Image.Image:
    if image.mode in _SUPPORTED_MODES[target_format]:
        return image
    if target_format is TargetFormat.JPEG:
        return image.convert("RGB")
    if target_format is TargetFormat.GIF:
        return image.convert("RGB").convert("P", palette=Image.Palette.ADAPTIVE)
    has_alpha = "A" in image.getbands() or "transparency" in image.info
    return image.convert("RGBA" if has_alpha else "RGB")


def _ico_frame_count(data: bytes) -> int:
    # ICONDIR header: reserved, type, count as little-endian uint16
    if len(data) < 6:
        return 0
    return int.from_bytes(data[4:6], "little")


class PillowCodec:
    """Pure image codec with no storage dependencies."""

    def __init__(self, resample: Image.Resampling = Image.Resampling.BICUBIC):
        self._resample = resample

    @with_error_handling
    def decode(self, stream: BinaryIO) -> Image.Image:
        """Decode a byte stream into a fully loaded image."""
        try:
            image = Image.open(stream)
            image.load()
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            SyntaxError,
            OSError,
        ) as img_err:
            raise DecodeError(str(img_err)) from img_err
        return image

    @with_error_handling
    def resize(
        self, image: Image.Image, width: int, height: int
    ) -> Optional[Image.Image]:
        """Resize to exactly width x height with a cubic filter."""
        if width <= 0 or height <= 0:
            return None
        resized = image.resize((width, height), resample=self._resample)
        if resized.width == 0 or resized.height == 0:
            return None
        return resized

    @with_error_handling
    def encode(
        self, image: Image.Image, target_format: TargetFormat, quality: int
    ) -> bytes:
        """Encode an image to target_format at the given quality."""
        prepared = _prepare_for_format(image, target_format)
        save_options: Dict[str, Any] = {"quality": quality}
        if target_format is TargetFormat.ICO:
            if max(prepared.size) > ICO_MAX_SIDE:
                raise EncodeError(
                    f"ico images are limited to {ICO_MAX_SIDE}x{ICO_MAX_SIDE}, "
                    f"got {prepared.width}x{prepared.height}"
                )
            # Only the exact size, otherwise Pillow writes its default ladder
            save_options["sizes"] = [prepared.size]

        output_stream = io.BytesIO()
        try:
            prepared.save(
                output_stream, format=target_format.pillow_format, **save_options
            )
        except (OSError, ValueError, KeyError) as enc_err:
            raise EncodeError(str(enc_err)) from enc_err

        data = output_stream.getvalue()
        if target_format is TargetFormat.ICO and _ico_frame_count(data) == 0:
            raise EncodeError("ico encoder wrote no frames")
        return data
