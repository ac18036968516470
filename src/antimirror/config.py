"""
AntiMirror Configuration
========================

This module handles configuration loading for the frame pipeline.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    ANTIMIRROR_TICK_HZ          -> pipeline.tick_hz
    ANTIMIRROR_QUANTIZATION     -> quantization.kind
    ANTIMIRROR_THRESHOLD        -> quantization.threshold
    ANTIMIRROR_CAPTURE_REGION   -> capture.region ("x,y,w,h")
    ANTIMIRROR_LOG_LEVEL        -> logging.level

Example:
    from antimirror.config import settings

    print(settings.pipeline.tick_hz)
    print(settings.quantization.kind)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from antimirror.models.capture import CaptureRegion
from antimirror.models.quantization import (
    DEFAULT_QUANTIZATION_CONFIG,
    QuantizationConfig,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class PipelineConfig(BaseModel):
    """Tick loop configuration."""

    tick_hz: float = Field(
        default=40.0,
        gt=0,
        le=1000,
        description="Tick frequency of the capture loop",
    )
    throughput_window_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Length of the frames-per-second window",
    )

    @property
    def tick_period(self) -> float:
        return 1.0 / self.tick_hz


class DisplayConfig(BaseModel):
    """Target display size (also the preview surface size)."""

    width: int = Field(default=400, ge=1, description="Display width in pixels")
    height: int = Field(default=240, ge=1, description="Display height in pixels")


class CaptureConfig(BaseModel):
    """Source capture configuration."""

    region: CaptureRegion = Field(default_factory=CaptureRegion)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for AntiMirror.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    quantization: QuantizationConfig = Field(
        default_factory=lambda: DEFAULT_QUANTIZATION_CONFIG
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    # Find config file
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    # Load from YAML if exists
    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    # An empty section (e.g. "quantization:" with no body) means defaults
    config_data = {key: value for key, value in config_data.items() if value is not None}

    # Apply environment variable overrides
    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Pipeline settings
    if env_hz := os.environ.get("ANTIMIRROR_TICK_HZ"):
        config_data.setdefault("pipeline", {})["tick_hz"] = float(env_hz)

    # Quantization settings
    if env_kind := os.environ.get("ANTIMIRROR_QUANTIZATION"):
        quantization = config_data.setdefault("quantization", {})
        if quantization.get("kind") != env_kind:
            quantization.clear()
        quantization["kind"] = env_kind
    if env_threshold := os.environ.get("ANTIMIRROR_THRESHOLD"):
        quantization = config_data.setdefault("quantization", {})
        quantization.setdefault("kind", DEFAULT_QUANTIZATION_CONFIG.kind)
        quantization["threshold"] = int(env_threshold)

    # Capture settings
    if env_region := os.environ.get("ANTIMIRROR_CAPTURE_REGION"):
        region = CaptureRegion.parse(env_region)
        config_data.setdefault("capture", {})["region"] = region.model_dump()

    # Logging settings
    if env_log := os.environ.get("ANTIMIRROR_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
