"""
Dithering Algorithms
====================

Maps an RGBA frame to a black/white BinaryFrame.

Algorithms:
    - threshold:      white iff luminance >= threshold
    - bayer:          4x4 ordered dither, white iff floor((lum + bias) / 2) >= threshold
    - floydsteinberg: error diffusion, 7/3/5/1 sixteenths
    - atkinson:       error diffusion, 1/8 to six neighbours (2/8 discarded)

Error diffusion walks pixels in row-major order over a scratch buffer and
writes ahead into pixels not yet emitted. There is no row-edge handling:
at column 0 the ``l + W - 1`` write lands on the last pixel of the current
row. Writes past the end of the buffer are skipped.

Every call is independent; no state is kept between frames.
"""

import logging
from typing import List, Sequence, Tuple

import numpy as np

from antimirror.models.quantization import QuantizationConfig
from antimirror.quantization.luminance import compute_luminance, seed_scratch
from antimirror.stream.frame import BinaryFrame, Frame


logger = logging.getLogger(__name__)


BAYER_MATRIX = np.array(
    [
        [15, 135, 45, 165],
        [195, 75, 225, 105],
        [60, 180, 30, 150],
        [240, 120, 210, 90],
    ],
    dtype=np.int64,
)

# Error diffusion cut-off: scratch values below this are black
DIFFUSION_THRESHOLD = 129


def bayer_bias(width: int, height: int) -> np.ndarray:
    """
    Bias for every pixel position, indexed ``BAYER_MATRIX[x % 4][y % 4]``.

    Returns:
        ``(height, width)`` int array
    """
    xs = np.arange(width) % 4
    ys = np.arange(height) % 4
    return BAYER_MATRIX[xs[np.newaxis, :], ys[:, np.newaxis]]


def apply_threshold(frame: Frame, threshold: int) -> BinaryFrame:
    """Plain threshold, no spatial dependency."""
    luminance = compute_luminance(frame)
    levels = np.where(luminance >= threshold, 255, 0).astype(np.uint8)
    return BinaryFrame.from_levels(levels)


def apply_bayer(frame: Frame, threshold: int) -> BinaryFrame:
    """Ordered dither with the 4x4 Bayer bias matrix."""
    luminance = compute_luminance(frame)
    biased = np.floor((luminance + bayer_bias(frame.width, frame.height)) / 2)
    levels = np.where(biased >= threshold, 255, 0).astype(np.uint8)
    return BinaryFrame.from_levels(levels)


def floyd_steinberg_taps(width: int) -> List[Tuple[int, int]]:
    """(offset, weight) pairs for Floyd-Steinberg."""
    return [(1, 7), (width - 1, 3), (width, 5), (width + 1, 1)]


def atkinson_taps(width: int) -> List[Tuple[int, int]]:
    """(offset, weight) pairs for Atkinson. Weights sum to 6 of 8."""
    return [
        (1, 1),
        (2, 1),
        (width - 1, 1),
        (width, 1),
        (width + 1, 1),
        (2 * width, 1),
    ]


def diffuse_error(
    frame: Frame,
    taps: Sequence[Tuple[int, int]],
    divisor: int,
) -> BinaryFrame:
    """
    Single row-major error-diffusion pass.

    For each index ``l``: the pixel becomes 0 if the scratch value is
    below 129, else 255; ``error = floor((scratch[l] - value) / divisor)``;
    ``scratch[l + offset] += weight * error`` for every tap, clamped to
    0..255. Taps that land past the end of the buffer are skipped.

    Args:
        frame: RGBA input frame
        taps: (offset, weight) pairs, offsets relative to ``l``
        divisor: Error divisor (16 for Floyd-Steinberg, 8 for Atkinson)

    Returns:
        Quantized frame
    """
    scratch = seed_scratch(compute_luminance(frame))
    n = len(scratch)
    out = bytearray(n)

    for l in range(n):
        current = scratch[l]
        if current < DIFFUSION_THRESHOLD:
            value = 0
        else:
            value = 255
            out[l] = 1

        error = (current - value) // divisor
        if error == 0:
            continue

        for offset, weight in taps:
            j = l + offset
            if j >= n:
                continue
            updated = scratch[j] + error * weight
            if updated < 0:
                updated = 0
            elif updated > 255:
                updated = 255
            scratch[j] = updated

    pixels = np.frombuffer(bytes(out), dtype=np.uint8).reshape(frame.height, frame.width)
    return BinaryFrame(width=frame.width, height=frame.height, pixels=pixels)


def apply_floyd_steinberg(frame: Frame) -> BinaryFrame:
    """Floyd-Steinberg error diffusion."""
    return diffuse_error(frame, floyd_steinberg_taps(frame.width), divisor=16)


def apply_atkinson(frame: Frame) -> BinaryFrame:
    """Atkinson error diffusion."""
    return diffuse_error(frame, atkinson_taps(frame.width), divisor=8)


def apply_quantization(config: QuantizationConfig, frame: Frame) -> BinaryFrame:
    """
    Quantize ``frame`` with the algorithm selected by ``config``.

    Raises:
        ValueError: If ``config.kind`` is not a known algorithm
    """
    kind = config.kind
    if kind == "threshold":
        return apply_threshold(frame, config.threshold)
    elif kind == "bayer":
        return apply_bayer(frame, config.threshold)
    elif kind == "floydsteinberg":
        return apply_floyd_steinberg(frame)
    elif kind == "atkinson":
        return apply_atkinson(frame)
    raise ValueError(f"Unknown quantization kind: {kind}")


def quantize(frame: Frame, config: QuantizationConfig) -> BinaryFrame:
    """Argument-order alias of ``apply_quantization``."""
    return apply_quantization(config, frame)
