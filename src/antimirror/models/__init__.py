"""
Data Models
===========

Configuration and value models for AntiMirror.

Models:
    Quantization:
        - ThresholdConfig, BayerConfig, FloydSteinbergConfig, AtkinsonConfig
        - QuantizationConfig: discriminated union of the four variants

    Capture:
        - CaptureRegion: source sub-rectangle scaled onto the display

    Device:
        - DeviceVersion: sdk / serial reported by the device
"""

from antimirror.models.capture import CaptureRegion
from antimirror.models.device import DeviceVersion
from antimirror.models.quantization import (
    DEFAULT_QUANTIZATION_CONFIG,
    QUANTIZATION_KINDS,
    AtkinsonConfig,
    BayerConfig,
    FloydSteinbergConfig,
    QuantizationConfig,
    ThresholdConfig,
    config_for_kind,
    parse_quantization_config,
)

__all__ = [
    # Quantization
    "ThresholdConfig",
    "BayerConfig",
    "FloydSteinbergConfig",
    "AtkinsonConfig",
    "QuantizationConfig",
    "DEFAULT_QUANTIZATION_CONFIG",
    "QUANTIZATION_KINDS",
    "config_for_kind",
    "parse_quantization_config",
    # Capture
    "CaptureRegion",
    # Device
    "DeviceVersion",
]
