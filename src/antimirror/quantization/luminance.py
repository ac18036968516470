"""
Luminance
=========

Scalar grayscale intensity used as the input of every quantizer.

Formula:
    luminance = 0.299 * R + 0.587 * G + 0.114 * B     (alpha ignored)

The weights are applied as integers over a common denominator,
``(299 R + 587 G + 114 B) / 1000``, so a neutral gray of level g has
luminance exactly g.
"""

import numpy as np

from antimirror.stream.frame import Frame


LUMA_WEIGHTS = (299, 587, 114)
LUMA_SCALE = 1000


def compute_luminance(frame: Frame) -> np.ndarray:
    """
    Compute per-pixel luminance.

    Args:
        frame: RGBA frame

    Returns:
        ``(H, W)`` float64 array in [0, 255]
    """
    rgb = frame.data[..., :3].astype(np.int64)
    weighted = (
        rgb[..., 0] * LUMA_WEIGHTS[0]
        + rgb[..., 1] * LUMA_WEIGHTS[1]
        + rgb[..., 2] * LUMA_WEIGHTS[2]
    )
    return weighted / LUMA_SCALE


def seed_scratch(luminance: np.ndarray) -> list:
    """
    Seed an error-diffusion scratch buffer from luminance.

    The scratch buffer behaves like an 8-bit clamped buffer: values are
    rounded half-to-even and clamped to 0..255.

    Returns:
        Flat row-major list of ints
    """
    return np.clip(np.rint(luminance), 0, 255).astype(np.int64).ravel().tolist()
