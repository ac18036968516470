"""
Stream Module
=============

Frame types and the frame-source boundary.

This module provides the ingestion layer for AntiMirror:
    - Frame: RGBA pixel buffer
    - BinaryFrame: quantized one-byte-per-pixel buffer
    - FrameSource: protocol for live feeds
    - ArrayFrameSource: in-memory feed
    - extract_region: crop + nearest-neighbour scale onto the display size

Example:
    from antimirror.stream import ArrayFrameSource, extract_region

    source = ArrayFrameSource(screen_rgba)
    image = await source.read_frame()
    frame = extract_region(image, region, width=400, height=240)
"""

from antimirror.stream.frame import BinaryFrame, Frame
from antimirror.stream.source import ArrayFrameSource, FrameSource
from antimirror.stream.capture import CaptureError, extract_region


__all__ = [
    "Frame",
    "BinaryFrame",
    "FrameSource",
    "ArrayFrameSource",
    "CaptureError",
    "extract_region",
]
