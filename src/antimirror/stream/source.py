"""
Frame Sources
=============

Boundary to the live pixel feed (e.g. an OS screen-capture stream).

This module provides the FrameSource protocol the pipeline depends on,
and ArrayFrameSource, an in-memory implementation fed with numpy arrays.

Design Rules:
    - A source is a live feed, not a queue: reads return the latest image
    - End of stream is signalled by ``is_active`` becoming False
    - Sources never resample; the pipeline crops and scales
"""

import logging
from typing import Optional, Protocol

import numpy as np


logger = logging.getLogger(__name__)


class FrameSource(Protocol):
    """
    Protocol for live frame feeds.

    Implementations must expose ``is_active`` and provide async
    ``read_frame`` and ``close`` methods.
    """

    @property
    def is_active(self) -> bool:
        """False once the stream has ended (stopped or revoked)."""
        ...

    async def read_frame(self) -> Optional[np.ndarray]:
        """
        Return the current full source image.

        Returns:
            ``(H, W, 4)`` uint8 RGBA array, or None if no image is available yet
        """
        ...

    async def close(self) -> None:
        """Stop the stream and release its resources."""
        ...


class ArrayFrameSource:
    """
    In-memory frame source.

    Holds the most recently pushed image and hands it out on every read,
    the way a video element always shows its current frame.

    Example:
        source = ArrayFrameSource()
        source.push(rgba_array)

        pipeline.start_capture(source)
        ...
        source.end()  # pipeline goes idle on its next tick
    """

    def __init__(self, image: Optional[np.ndarray] = None) -> None:
        self._image: Optional[np.ndarray] = image
        self._active: bool = True
        self._reads: int = 0

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def reads(self) -> int:
        """Number of frames handed out so far."""
        return self._reads

    def push(self, image: np.ndarray) -> None:
        """Replace the current image."""
        if not self._active:
            logger.warning("Ignoring frame pushed to an ended source")
            return
        self._image = image

    def end(self) -> None:
        """Signal end of stream."""
        if self._active:
            logger.info("Frame source ended")
        self._active = False

    async def read_frame(self) -> Optional[np.ndarray]:
        if not self._active or self._image is None:
            return None
        self._reads += 1
        return self._image

    async def close(self) -> None:
        self.end()
        self._image = None
