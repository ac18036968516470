"""
Quantization Configuration
==========================

Tagged configuration variants for the quantization engine.

Each variant is a frozen pydantic model discriminated by ``kind``:

    {"kind": "threshold", "threshold": 128}
    {"kind": "bayer", "threshold": 128}
    {"kind": "floydsteinberg"}
    {"kind": "atkinson"}

The set of variants is closed. Dispatch happens in exactly one place
(``antimirror.quantization.dither.apply_quantization``).

Example:
    from antimirror.models.quantization import parse_quantization_config

    config = parse_quantization_config({"kind": "threshold", "threshold": 100})
    print(config.kind, config.threshold)
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class ThresholdConfig(BaseModel):
    """Plain luminance threshold, no spatial dependency."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["threshold"] = "threshold"
    threshold: int = Field(
        default=128,
        ge=0,
        le=255,
        description="Pixels with luminance >= threshold become white",
    )


class BayerConfig(BaseModel):
    """Ordered dithering with the fixed 4x4 Bayer bias matrix."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["bayer"] = "bayer"
    threshold: int = Field(
        default=128,
        ge=0,
        le=255,
        description="Biased luminance >= threshold becomes white",
    )


class FloydSteinbergConfig(BaseModel):
    """Floyd-Steinberg error diffusion."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["floydsteinberg"] = "floydsteinberg"


class AtkinsonConfig(BaseModel):
    """Atkinson error diffusion (6/8 of the error is redistributed)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["atkinson"] = "atkinson"


QuantizationConfig = Annotated[
    Union[ThresholdConfig, BayerConfig, FloydSteinbergConfig, AtkinsonConfig],
    Field(discriminator="kind"),
]

QUANTIZATION_KINDS = ("threshold", "bayer", "floydsteinberg", "atkinson")

DEFAULT_QUANTIZATION_CONFIG = BayerConfig(threshold=128)

_adapter: TypeAdapter = TypeAdapter(QuantizationConfig)


def parse_quantization_config(data: Any) -> QuantizationConfig:
    """
    Validate a mapping into the matching quantization variant.

    Args:
        data: Mapping with a ``kind`` key, or an already-built variant

    Returns:
        The validated variant

    Raises:
        pydantic.ValidationError: On unknown kind or out-of-range threshold
    """
    return _adapter.validate_python(data)


def config_for_kind(kind: str) -> QuantizationConfig:
    """
    Build the config a selector produces when the user picks ``kind``.

    Threshold-based variants start at 128. Unknown kinds fall back to
    the default configuration.
    """
    if kind == "threshold":
        return ThresholdConfig(threshold=128)
    if kind == "bayer":
        return BayerConfig(threshold=128)
    if kind == "floydsteinberg":
        return FloydSteinbergConfig()
    if kind == "atkinson":
        return AtkinsonConfig()
    return DEFAULT_QUANTIZATION_CONFIG
