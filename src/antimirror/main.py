"""
AntiMirror Application Wiring
=============================

Builds a FramePipeline from settings and runs a capture session.

Screen capture and the physical device transport are supplied by the
embedding application: a FrameSource for the pixels, and a coroutine
factory that returns an unopened DeviceChannel.

Example:
    from antimirror.main import run_capture

    await run_capture(source, request_device=request_playdate)
"""

import asyncio
import logging
import signal
from typing import Optional, Set

from antimirror.config import Settings, settings as default_settings
from antimirror.device.connection import DeviceConnection, DeviceFactory
from antimirror.observability.preview import PreviewSurface
from antimirror.pipeline.pipeline import FramePipeline
from antimirror.stream.source import FrameSource


logger = logging.getLogger(__name__)


def create_pipeline(
    settings: Optional[Settings] = None,
    connection: Optional[DeviceConnection] = None,
) -> FramePipeline:
    """
    Create a pipeline configured from ``settings``.

    Args:
        settings: Loaded settings; defaults to the global settings
        connection: Existing device connection to reuse

    Returns:
        Pipeline in IDLE state with a display-sized preview surface
    """
    settings = settings or default_settings

    if connection is None:
        connection = DeviceConnection(
            throughput_window_seconds=settings.pipeline.throughput_window_seconds,
        )

    surface = PreviewSurface(
        width=settings.display.width,
        height=settings.display.height,
    )

    logger.info(
        f"Creating pipeline: display={settings.display.width}x{settings.display.height}, "
        f"region={settings.capture.region.as_tuple()}"
    )
    return FramePipeline(
        connection=connection,
        surface=surface,
        quantization=settings.quantization,
        capture_region=settings.capture.region,
        tick_hz=settings.pipeline.tick_hz,
    )


async def run_capture(
    source: FrameSource,
    request_device: Optional[DeviceFactory] = None,
    settings: Optional[Settings] = None,
) -> FramePipeline:
    """
    Run one capture session until the source ends or SIGTERM arrives.

    Args:
        source: Live frame feed
        request_device: Optional factory for the device to attach
        settings: Loaded settings; defaults to the global settings

    Returns:
        The pipeline, back in IDLE state
    """
    pipeline = create_pipeline(settings)
    loop = asyncio.get_running_loop()
    stop_tasks: Set[asyncio.Task] = set()

    def _on_stop_done(task: asyncio.Task) -> None:
        stop_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Stopping capture failed: {task.exception()}")

    def _handle_sigterm() -> None:
        logger.info("Received SIGTERM, stopping capture...")
        task = loop.create_task(pipeline.stop_capture(), name="stop_capture")
        stop_tasks.add(task)
        task.add_done_callback(_on_stop_done)

    try:
        loop.add_signal_handler(signal.SIGTERM, _handle_sigterm)
    except (NotImplementedError, RuntimeError):
        logger.debug("Signal handlers not supported on this event loop")

    if request_device is not None:
        await pipeline.connection.connect(request_device)

    pipeline.start_capture(source)
    try:
        await pipeline.wait_idle()
    finally:
        if stop_tasks:
            await asyncio.gather(*stop_tasks, return_exceptions=True)
        await pipeline.stop_capture()
        try:
            await pipeline.connection.disconnect()
        except Exception:
            logger.exception("Failed to close device, continuing")
        try:
            loop.remove_signal_handler(signal.SIGTERM)
        except (NotImplementedError, RuntimeError):
            pass

    logger.info(f"Capture session finished: {pipeline.metrics.to_dict()}")
    return pipeline
