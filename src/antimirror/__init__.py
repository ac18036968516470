"""
AntiMirror
==========

Streams live video to a small monochrome display as 1-bit bitmaps.

Each tick the pipeline captures a region of the source feed, reduces it to
black and white with one of four quantizers (threshold, 4x4 Bayer,
Floyd-Steinberg, Atkinson), shows it on a local preview surface, and sends
it to the attached device unless the device is still busy with the
previous frame.

Components:
    - stream: frame types, frame-source protocol, capture-region scaling
    - quantization: luminance, dithering algorithms, bitmap packing
    - device: device-channel protocol and connection lifecycle
    - signals: throughput counter
    - pipeline: fixed-cadence tick loop
    - observability: preview surface

Example:
    from antimirror.main import create_pipeline

    pipeline = create_pipeline()
    pipeline.start_capture(source)
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
