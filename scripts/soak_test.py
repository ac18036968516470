#!/usr/bin/env python3
"""
Pipeline Soak Test Script
=========================

Standalone script to exercise the capture pipeline without hardware.

This script:
    1. Feeds a scrolling gradient through an in-memory frame source
    2. Attaches a simulated device that stays busy for a while after each send
    3. Logs throughput every few seconds
    4. Reports final summary

Usage:
    python scripts/soak_test.py --duration 30
    python scripts/soak_test.py --quantization atkinson --busy-ms 30
"""

import argparse
import asyncio
import logging
import os
import sys
import time
from typing import Callable, Dict, List

import numpy as np

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from antimirror.config import load_config
from antimirror.main import create_pipeline
from antimirror.models.device import DeviceVersion
from antimirror.models.quantization import QUANTIZATION_KINDS, config_for_kind
from antimirror.stream import ArrayFrameSource


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


class SimulatedDevice:
    """Device that reports busy for ``busy_ms`` after every send."""

    def __init__(self, busy_ms: float) -> None:
        self.busy_seconds = busy_ms / 1000.0
        self.bytes_received = 0
        self._busy_until = 0.0
        self._listeners: Dict[str, List[Callable[[], None]]] = {}

    @property
    def is_busy(self) -> bool:
        return time.monotonic() < self._busy_until

    async def open(self) -> None:
        pass

    async def close(self) -> None:
        for callback in self._listeners.get("close", []):
            callback()

    async def get_version(self) -> DeviceVersion:
        return DeviceVersion(sdk="simulated", serial="SIM-0001")

    async def send_bitmap_indexed(self, bitmap: bytes) -> None:
        self.bytes_received += len(bitmap)
        self._busy_until = time.monotonic() + self.busy_seconds

    def on(self, event: str, callback: Callable[[], None]) -> None:
        self._listeners.setdefault(event, []).append(callback)


def gradient_image(width: int, height: int, offset: int) -> np.ndarray:
    """Horizontal gray ramp shifted by ``offset`` pixels."""
    ramp = ((np.arange(width) + offset) * 255 // max(width - 1, 1)) % 256
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[..., :3] = ramp.astype(np.uint8)[None, :, None]
    image[..., 3] = 255
    return image


async def run_test(
    duration: int,
    kind: str,
    busy_ms: float,
    report_interval: int,
) -> dict:
    """
    Run the soak test.

    Args:
        duration: Test duration in seconds
        kind: Quantization kind
        busy_ms: Simulated device busy time per frame
        report_interval: Seconds between progress reports

    Returns:
        Final metrics dict
    """
    settings = load_config()
    pipeline = create_pipeline(settings)
    pipeline.set_quantization(config_for_kind(kind))

    region = settings.capture.region
    screen_w = region.x + region.w
    screen_h = region.y + region.h

    logger.info("=" * 60)
    logger.info("Pipeline Soak Test")
    logger.info("=" * 60)
    logger.info(f"Duration: {duration} seconds")
    logger.info(f"Quantization: {kind}")
    logger.info(f"Tick rate: {pipeline.tick_hz:g} Hz")
    logger.info(f"Device busy time: {busy_ms:g} ms")
    logger.info("=" * 60)

    device = SimulatedDevice(busy_ms)

    async def request_device() -> SimulatedDevice:
        return device

    await pipeline.connection.connect(request_device)

    source = ArrayFrameSource(gradient_image(screen_w, screen_h, 0))
    pipeline.start_capture(source)

    start_time = time.time()
    last_report_time = start_time
    offset = 0

    try:
        while time.time() - start_time < duration:
            offset += 4
            source.push(gradient_image(screen_w, screen_h, offset))

            if time.time() - last_report_time >= report_interval:
                described = pipeline.connection.describe() or {}
                metrics = pipeline.metrics
                logger.info("-" * 40)
                logger.info(f"Progress Report (elapsed: {time.time() - start_time:.0f}s)")
                logger.info(f"  Device fps: {described.get('fps', 0)}")
                logger.info(f"  Frames sent: {metrics.frames_sent}")
                logger.info(f"  Dropped (busy): {metrics.frames_dropped_busy}")
                logger.info(f"  Ticks skipped: {metrics.ticks_skipped}")
                logger.info(f"  Tick errors: {metrics.tick_errors}")
                last_report_time = time.time()

            await asyncio.sleep(0.05)

    except KeyboardInterrupt:
        logger.info("Test interrupted by user")
    finally:
        await pipeline.stop_capture()
        await pipeline.connection.disconnect()

    total_time = time.time() - start_time
    metrics = pipeline.metrics
    avg_fps = metrics.frames_sent / total_time if total_time > 0 else 0

    logger.info("=" * 60)
    logger.info("FINAL SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Total runtime: {total_time:.1f} seconds")
    logger.info(f"Ticks completed: {metrics.ticks_completed}")
    logger.info(f"Frames sent: {metrics.frames_sent}")
    logger.info(f"Average FPS: {avg_fps:.1f}")
    logger.info(f"Dropped (busy): {metrics.frames_dropped_busy}")
    logger.info(f"Ticks skipped: {metrics.ticks_skipped}")
    logger.info(f"Tick errors: {metrics.tick_errors}")
    logger.info(f"Bytes sent: {device.bytes_received}")
    logger.info("=" * 60)

    if metrics.frames_sent > 0 and metrics.tick_errors == 0:
        logger.info("TEST PASSED - Frames sent without errors")
    else:
        logger.error("TEST FAILED - No frames sent or ticks failed")

    return {
        "duration": total_time,
        "frames_sent": metrics.frames_sent,
        "avg_fps": avg_fps,
        "dropped_busy": metrics.frames_dropped_busy,
        "ticks_skipped": metrics.ticks_skipped,
        "tick_errors": metrics.tick_errors,
    }


def main():
    parser = argparse.ArgumentParser(
        description="Soak test for the capture pipeline with a simulated device"
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=30,
        help="Test duration in seconds (default: 30)",
    )
    parser.add_argument(
        "--quantization",
        choices=QUANTIZATION_KINDS,
        default="bayer",
        help="Quantization kind (default: bayer)",
    )
    parser.add_argument(
        "--busy-ms",
        type=float,
        default=15.0,
        help="Milliseconds the device stays busy after a send (default: 15)",
    )
    parser.add_argument(
        "--report-interval",
        type=int,
        default=5,
        help="Seconds between progress reports (default: 5)",
    )

    args = parser.parse_args()

    result = asyncio.run(run_test(
        duration=args.duration,
        kind=args.quantization,
        busy_ms=args.busy_ms,
        report_interval=args.report_interval,
    ))

    sys.exit(0 if result["frames_sent"] > 0 and result["tick_errors"] == 0 else 1)


if __name__ == "__main__":
    main()
