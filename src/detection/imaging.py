"""
Decoded image buffers fed to the candidate generator.

Decoding is done with Pillow; the generator itself only ever sees an
ImageSource holding a read-only RGBA array.
"""
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Optional, Union

import numpy as np
from PIL import Image


# ============================================================================
# Image Source
# ============================================================================

@dataclass(frozen=True, eq=False)
class ImageSource:
    """
    Decoded pixel buffer.

    Attributes:
        pixels: uint8 array of shape (height, width, 4) in RGBA order.
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        """Validate the buffer and freeze it against writes."""
        pixels = np.asarray(self.pixels)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(
                f"Expected an RGBA array of shape (height, width, 4), got {pixels.shape}"
            )
        if pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise ValueError("Image dimensions must be positive")
        pixels = pixels.astype(np.uint8, copy=False).view()
        pixels.flags.writeable = False
        object.__setattr__(self, "pixels", pixels)

    @classmethod
    def from_rgba_bytes(cls, width: int, height: int, data: bytes) -> "ImageSource":
        """Wrap a flat RGBA byte string, as a browser canvas would hand it over."""
        if len(data) != width * height * 4:
            raise ValueError(
                f"Expected {width * height * 4} bytes for a {width}x{height} "
                f"RGBA image, got {len(data)}"
            )
        pixels = np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4)
        return cls(pixels)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def region_rgb(
        self, start_x: int, start_y: int, end_x: int, end_y: int
    ) -> np.ndarray:
        """Color channels of a pixel rectangle as int32. Only the slice is copied."""
        return self.pixels[start_y:end_y, start_x:end_x, :3].astype(np.int32)


def load_image(
    source: Union[str, Path, bytes, BinaryIO],
    max_side: Optional[int] = 512,
) -> ImageSource:
    """
    Decode an image file into an ImageSource.

    Args:
        source: File path, raw encoded bytes, or a binary file object.
        max_side: Downscale so neither side exceeds this (None keeps size).

    Returns:
        RGBA image source.
    """
    if isinstance(source, (bytes, bytearray)):
        source = BytesIO(source)
    with Image.open(source) as image:
        image = image.convert("RGBA")
        if max_side is not None:
            image.thumbnail((max_side, max_side))
        return ImageSource(np.asarray(image, dtype=np.uint8))
