"""
Observability Module
====================

Local preview of the quantized output.

DESIGN RULES:
    - Does NOT influence what is sent to the device
    - Rendering failures surface as a per-tick error, never stop the loop
"""

from antimirror.observability.preview import PreviewSurface


__all__ = [
    "PreviewSurface",
]
