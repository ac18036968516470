"""
Frame Data Model
================

Pixel buffers passed between pipeline stages.

Design Rules:
    - Frame holds RGBA bytes, row-major, top-left origin
    - BinaryFrame holds one byte per pixel, valued exactly 0 or 1
    - Both are transient: created and discarded every tick
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, slots=True, eq=False)
class Frame:
    """
    RGBA frame buffer.

    Attributes:
        width: Frame width in pixels (> 0)
        height: Frame height in pixels (> 0)
        data: ``(height, width, 4)`` uint8 array of RGBA values

    Raises:
        ValueError: If dimensions are not positive or the buffer does not
            hold exactly width * height * 4 bytes
    """

    width: int
    height: int
    data: np.ndarray

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Frame dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.data.dtype != np.uint8:
            raise ValueError(f"Frame data must be uint8, got {self.data.dtype}")
        if self.data.shape != (self.height, self.width, 4):
            raise ValueError(
                f"Frame data shape {self.data.shape} does not match "
                f"{self.width}x{self.height} RGBA"
            )

    @classmethod
    def from_rgba(cls, data: np.ndarray) -> "Frame":
        """Wrap an ``(H, W, 4)`` uint8 array."""
        if data.ndim != 3:
            raise ValueError(f"Expected (H, W, 4) array, got shape {data.shape}")
        height, width = data.shape[:2]
        return cls(width=width, height=height, data=data)

    @classmethod
    def from_bytes(cls, width: int, height: int, buffer: bytes) -> "Frame":
        """Build a frame from a flat RGBA byte string."""
        if len(buffer) != width * height * 4:
            raise ValueError(
                f"Buffer length {len(buffer)} != {width}*{height}*4"
            )
        data = np.frombuffer(buffer, dtype=np.uint8).reshape(height, width, 4)
        return cls(width=width, height=height, data=data)

    @classmethod
    def filled(cls, width: int, height: int, rgba: tuple) -> "Frame":
        """Frame where every pixel has the same RGBA value."""
        data = np.empty((height, width, 4), dtype=np.uint8)
        data[:, :] = rgba
        return cls(width=width, height=height, data=data)

    def to_bytes(self) -> bytes:
        return self.data.tobytes()

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the pixels."""
        return f"Frame(width={self.width}, height={self.height})"


@dataclass(frozen=True, slots=True, eq=False)
class BinaryFrame:
    """
    Black/white frame, one byte per pixel.

    Logically one bit per pixel, stored as a byte per pixel (0 = black,
    1 = white) because that is what the device transport expects.

    Attributes:
        width: Frame width in pixels
        height: Frame height in pixels
        pixels: ``(height, width)`` uint8 array with values in {0, 1}
    """

    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.pixels.shape != (self.height, self.width):
            raise ValueError(
                f"BinaryFrame shape {self.pixels.shape} does not match "
                f"{self.width}x{self.height}"
            )
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"BinaryFrame must be uint8, got {self.pixels.dtype}")
        if self.pixels.size and int(self.pixels.max()) > 1:
            raise ValueError("BinaryFrame values must be 0 or 1")

    @classmethod
    def from_levels(cls, levels: np.ndarray) -> "BinaryFrame":
        """Build from a ``(H, W)`` array of 0/255 output levels."""
        height, width = levels.shape
        pixels = (levels != 0).astype(np.uint8)
        return cls(width=width, height=height, pixels=pixels)

    @property
    def white_count(self) -> int:
        return int(self.pixels.sum())

    def to_rgba(self) -> Frame:
        """
        Render as an RGBA frame.

        RGB channels are 0 (black) or 255 (white); alpha is always 255.
        """
        data = np.empty((self.height, self.width, 4), dtype=np.uint8)
        data[..., :3] = (self.pixels * 255)[..., np.newaxis]
        data[..., 3] = 255
        return Frame(width=self.width, height=self.height, data=data)

    def __repr__(self) -> str:
        return (
            f"BinaryFrame(width={self.width}, height={self.height}, "
            f"white={self.white_count})"
        )
