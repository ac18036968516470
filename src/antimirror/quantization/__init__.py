"""
Quantization Module
===================

Reduces RGBA frames to 1-bit black/white output.

Components:
    - apply_quantization / quantize: dispatch on the configured algorithm
    - apply_threshold, apply_bayer, apply_floyd_steinberg, apply_atkinson
    - pack_bitmap: BinaryFrame -> one byte per pixel for the device

Example:
    from antimirror.models import BayerConfig
    from antimirror.quantization import quantize, pack_bitmap

    binary = quantize(frame, BayerConfig(threshold=128))
    payload = pack_bitmap(binary)
"""

from antimirror.quantization.luminance import compute_luminance
from antimirror.quantization.dither import (
    BAYER_MATRIX,
    apply_atkinson,
    apply_bayer,
    apply_floyd_steinberg,
    apply_quantization,
    apply_threshold,
    quantize,
)
from antimirror.quantization.packer import pack_bitmap, pack_rgba


__all__ = [
    "compute_luminance",
    "BAYER_MATRIX",
    "apply_threshold",
    "apply_bayer",
    "apply_floyd_steinberg",
    "apply_atkinson",
    "apply_quantization",
    "quantize",
    "pack_bitmap",
    "pack_rgba",
]
