"""
Preview Surface
===============

Local drawing surface that shows the quantized output.

The surface also fixes the working frame size: captured regions are
scaled to the surface's width x height before quantization. Rendering
is a side effect only; nothing reads the preview back into the pipeline.
"""

import base64
import logging
from typing import Optional

import cv2
import numpy as np

from antimirror.stream.frame import Frame


logger = logging.getLogger(__name__)


class PreviewSurface:
    """
    In-memory preview canvas.

    Attributes:
        width: Surface width in pixels
        height: Surface height in pixels
        frames_drawn: Number of frames rendered so far
    """

    def __init__(self, width: int = 400, height: int = 240) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("Preview surface dimensions must be positive")

        self.width = width
        self.height = height
        self.frames_drawn: int = 0
        self._latest: Optional[Frame] = None

    @property
    def latest(self) -> Optional[Frame]:
        """Most recently drawn frame."""
        return self._latest

    def draw(self, frame: Frame) -> None:
        """
        Render ``frame`` on the surface.

        Raises:
            ValueError: If the frame size does not match the surface
        """
        if (frame.width, frame.height) != (self.width, self.height):
            raise ValueError(
                f"Frame {frame.width}x{frame.height} does not fit "
                f"surface {self.width}x{self.height}"
            )
        self._latest = frame
        self.frames_drawn += 1

    def snapshot_png(self) -> Optional[bytes]:
        """Encode the latest frame as PNG bytes, or None if nothing was drawn."""
        if self._latest is None:
            return None

        bgra = cv2.cvtColor(self._latest.data, cv2.COLOR_RGBA2BGRA)
        ok, encoded = cv2.imencode(".png", bgra)
        if not ok:
            logger.error("PNG encoding of preview failed")
            return None
        return np.asarray(encoded).tobytes()

    def snapshot_b64(self) -> Optional[str]:
        """Base64 PNG of the latest frame."""
        png = self.snapshot_png()
        if png is None:
            return None
        return base64.b64encode(png).decode()
