"""
Bitmap Packer
=============

Converts quantized frames to the device's indexed bitmap format:
one byte per pixel, row-major, 0 = black, 1 = white.

This is a representation shim, not compression.
"""

import numpy as np

from antimirror.stream.frame import BinaryFrame, Frame


def pack_bitmap(frame: BinaryFrame) -> bytes:
    """
    Pack a BinaryFrame for transport.

    Returns:
        ``width * height`` bytes, each 0 (black) or 1 (white)
    """
    return (frame.pixels != 0).astype(np.uint8).tobytes()


def pack_rgba(frame: Frame) -> bytes:
    """
    Pack a quantized RGBA frame by its red channel.

    A zero red channel is black; anything else is white.
    """
    return (frame.data[..., 0] != 0).astype(np.uint8).tobytes()
