"""
Capture Region Extraction
=========================

Crops the configured region out of a source image and scales it onto
the display-sized working frame.

Design Rules:
    - This is the ONLY place that resamples source pixels
    - Scaling is nearest-neighbour (no smoothing), so hard edges survive
    - Parts of the region that fall outside the source read as transparent black
"""

import logging

import cv2
import numpy as np

from antimirror.models.capture import CaptureRegion
from antimirror.stream.frame import Frame


logger = logging.getLogger(__name__)


class CaptureError(Exception):
    """Raised when a source image cannot be turned into a frame."""
    pass


def to_rgba(image: np.ndarray) -> np.ndarray:
    """
    Normalize a source image to ``(H, W, 4)`` uint8 RGBA.

    Accepts RGBA, RGB and single-channel grayscale inputs.

    Raises:
        CaptureError: If the array cannot be interpreted as an image
    """
    if image.dtype != np.uint8:
        raise CaptureError(f"Source image must be uint8, got {image.dtype}")

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.ndim == 3 and image.shape[2] == 4:
        return image
    if image.ndim == 3 and image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_RGB2RGBA)

    raise CaptureError(f"Unsupported source image shape: {image.shape}")


def crop_region(image: np.ndarray, region: CaptureRegion) -> np.ndarray:
    """
    Cut ``region`` out of an RGBA image.

    The result always has shape ``(region.h, region.w, 4)``; pixels outside
    the source bounds are zero.
    """
    src_h, src_w = image.shape[:2]
    out = np.zeros((region.h, region.w, 4), dtype=np.uint8)

    x0 = min(region.x, src_w)
    y0 = min(region.y, src_h)
    x1 = min(region.x + region.w, src_w)
    y1 = min(region.y + region.h, src_h)

    if x1 > x0 and y1 > y0:
        out[: y1 - y0, : x1 - x0] = image[y0:y1, x0:x1]

    return out


def extract_region(
    image: np.ndarray,
    region: CaptureRegion,
    width: int,
    height: int,
) -> Frame:
    """
    Crop ``region`` from ``image`` and scale it to ``width`` x ``height``.

    Args:
        image: Full source image (RGBA, RGB or grayscale uint8)
        region: Source rectangle to capture
        width: Output frame width
        height: Output frame height

    Returns:
        RGBA Frame of the requested size
    """
    rgba = to_rgba(image)
    cropped = crop_region(rgba, region)

    if cropped.shape[:2] == (height, width):
        scaled = cropped
    else:
        scaled = cv2.resize(
            cropped,
            (width, height),
            interpolation=cv2.INTER_NEAREST,
        )

    return Frame(width=width, height=height, data=np.ascontiguousarray(scaled))
