"""
Frame Pipeline
==============

Fixed-cadence capture -> quantize -> preview -> send loop.

States:
    IDLE:    no frame source, loop not running, window rate held at zero
    RUNNING: frame source active, loop ticking every period

Per tick:
    1. Skip entirely if the previous tick is still in progress (no queueing)
    2. Abort with ERROR if there is no drawing surface
    3. Read capture region, quantization config and device once
    4. Read the source frame, crop the region, scale to the surface size
    5. Quantize and draw the result on the preview surface
    6. Send if a device is attached and not busy; otherwise drop the frame
    7. Roll the device's throughput window

Design Rules:
    - One event loop drives ticks; the in-progress flag is the only guard
    - Quantization runs in a worker thread so the loop stays responsive
    - Per-tick failures are logged and counted, never stop the loop
    - Busy device means the frame is dropped, never retried
    - Config changes are picked up at the next tick boundary
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Optional

from antimirror.device.connection import DeviceConnection
from antimirror.models.capture import CaptureRegion
from antimirror.models.quantization import (
    DEFAULT_QUANTIZATION_CONFIG,
    QuantizationConfig,
    parse_quantization_config,
)
from antimirror.observability.preview import PreviewSurface
from antimirror.quantization.dither import apply_quantization
from antimirror.quantization.packer import pack_bitmap
from antimirror.stream.capture import extract_region
from antimirror.stream.source import FrameSource


logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    """Lifecycle state of the pipeline."""

    IDLE = "IDLE"
    RUNNING = "RUNNING"


class TickOutcome(str, Enum):
    """
    Result of a single tick.

    Attributes:
        DEVICE: Frame was sent to the device
        NO_DEVICE: No device attached, frame only previewed
        DEVICE_BUSY: Device busy, frame dropped
        ERROR: No surface, no source frame, or a stage failed
        SKIPPED: Previous tick still in progress
    """

    DEVICE = "device"
    NO_DEVICE = "no-device"
    DEVICE_BUSY = "device-busy"
    ERROR = "error"
    SKIPPED = "skipped"


class PipelineMetrics:
    """Counters for pipeline observability."""

    __slots__ = (
        "ticks_completed",
        "ticks_skipped",
        "tick_errors",
        "frames_sent",
        "frames_dropped_busy",
        "frames_without_device",
    )

    def __init__(self) -> None:
        self.ticks_completed: int = 0
        self.ticks_skipped: int = 0
        self.tick_errors: int = 0
        self.frames_sent: int = 0
        self.frames_dropped_busy: int = 0
        self.frames_without_device: int = 0

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "ticks_completed": self.ticks_completed,
            "ticks_skipped": self.ticks_skipped,
            "tick_errors": self.tick_errors,
            "frames_sent": self.frames_sent,
            "frames_dropped_busy": self.frames_dropped_busy,
            "frames_without_device": self.frames_without_device,
        }


class FramePipeline:
    """
    Drives the capture loop.

    Attributes:
        connection: Device attachment the pipeline borrows per send
        surface: Preview surface; also fixes the working frame size
        tick_hz: Loop frequency
        metrics: Operational counters

    Example:
        connection = DeviceConnection()
        pipeline = FramePipeline(connection, surface=PreviewSurface(400, 240))

        pipeline.start_capture(source)
        await connection.connect(request_device)
        pipeline.set_quantization(AtkinsonConfig())
        ...
        await pipeline.stop_capture()
    """

    def __init__(
        self,
        connection: DeviceConnection,
        surface: Optional[PreviewSurface] = None,
        quantization: QuantizationConfig = DEFAULT_QUANTIZATION_CONFIG,
        capture_region: Optional[CaptureRegion] = None,
        tick_hz: float = 40.0,
    ) -> None:
        """
        Initialize pipeline in IDLE state.

        Args:
            connection: Device connection to send through
            surface: Drawing surface; ticks abort with ERROR while None
            quantization: Initial quantization config
            capture_region: Initial source rectangle
            tick_hz: Tick frequency, must be > 0
        """
        if tick_hz <= 0:
            raise ValueError("tick_hz must be positive")

        self.connection = connection
        self.surface = surface
        self.tick_hz = tick_hz

        self._quantization: QuantizationConfig = quantization
        self._capture_region: CaptureRegion = capture_region or CaptureRegion()

        self._state: PipelineState = PipelineState.IDLE
        self._source: Optional[FrameSource] = None
        self._loop_task: Optional[asyncio.Task] = None
        self._tick_task: Optional[asyncio.Task] = None
        self._tick_in_progress: bool = False
        self._last_outcome: Optional[TickOutcome] = None

        self.metrics = PipelineMetrics()
        self._state_listeners: list = []

        logger.info(
            f"FramePipeline initialized: {tick_hz:g} Hz, "
            f"quantization={quantization.kind}"
        )

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == PipelineState.RUNNING

    @property
    def tick_period(self) -> float:
        """Seconds between ticks."""
        return 1.0 / self.tick_hz

    @property
    def tick_in_progress(self) -> bool:
        return self._tick_in_progress

    @property
    def last_outcome(self) -> Optional[TickOutcome]:
        return self._last_outcome

    @property
    def quantization(self) -> QuantizationConfig:
        return self._quantization

    @property
    def capture_region(self) -> CaptureRegion:
        return self._capture_region

    # -------------------------------------------------------------------------
    # Live configuration
    # -------------------------------------------------------------------------

    def set_quantization(self, config: Any) -> QuantizationConfig:
        """
        Replace the quantization config; used from the next tick on.

        Args:
            config: A config variant or a mapping such as ``{"kind": "atkinson"}``
        """
        validated = parse_quantization_config(config)
        self._quantization = validated
        logger.info(f"Quantization set to {validated.kind}")
        return validated

    def set_capture_region(self, region: CaptureRegion) -> None:
        """Replace the capture region; used from the next tick on."""
        self._capture_region = region
        logger.debug(f"Capture region set to {region.as_tuple()}")

    def add_state_listener(self, callback: Callable[[PipelineState], None]) -> None:
        """Register ``callback`` for IDLE/RUNNING transitions."""
        self._state_listeners.append(callback)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start_capture(self, source: FrameSource) -> asyncio.Task:
        """
        IDLE -> RUNNING: start ticking on ``source``.

        Must be called from a running event loop.

        Returns:
            The loop task

        Raises:
            RuntimeError: If capture is already running
        """
        if self._state == PipelineState.RUNNING:
            raise RuntimeError("Capture already running")

        self._source = source
        self._set_state(PipelineState.RUNNING)
        self._loop_task = asyncio.create_task(self.run(), name="frame_pipeline")
        return self._loop_task

    async def stop_capture(self) -> None:
        """RUNNING -> IDLE: stop the loop and close the source."""
        if self._state == PipelineState.IDLE:
            return

        logger.info("Stopping capture...")
        task = self._loop_task
        self._loop_task = None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        # Let the in-flight tick finish before the source is closed
        tick_task = self._tick_task
        if tick_task is not None and not tick_task.done():
            await asyncio.gather(tick_task, return_exceptions=True)

        await self._enter_idle()

    async def wait_idle(self) -> None:
        """Wait until the loop task has finished."""
        task = self._loop_task
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def run(self) -> None:
        """
        Tick loop.

        Schedules a tick every period while the source is active. A tick
        that would overlap the one in progress is skipped, not queued.
        Returns to IDLE when the source ends.
        """
        loop = asyncio.get_running_loop()
        period = self.tick_period
        next_tick = loop.time()

        logger.info(f"Capture loop started ({self.tick_hz:g} Hz)")

        while True:
            source = self._source
            if source is None or not source.is_active:
                logger.info("Frame source ended")
                break

            self._schedule_tick()

            next_tick += period
            delay = next_tick - loop.time()
            if delay < 0:
                # Fell behind; resynchronize instead of bursting
                next_tick = loop.time()
                delay = 0
            await asyncio.sleep(delay)

        if self._tick_task is not None and not self._tick_task.done():
            await asyncio.gather(self._tick_task, return_exceptions=True)

        self._loop_task = None
        await self._enter_idle()

    # -------------------------------------------------------------------------
    # Ticks
    # -------------------------------------------------------------------------

    async def tick(self) -> TickOutcome:
        """
        Run one tick now, unless one is already in progress.

        Returns:
            The tick outcome (SKIPPED if a tick was in progress)
        """
        if self._tick_in_progress:
            self.metrics.ticks_skipped += 1
            return TickOutcome.SKIPPED

        self._tick_in_progress = True
        return await self._guarded_tick(self._source)

    async def process_single_frame(
        self,
        source: Optional[FrameSource] = None,
    ) -> TickOutcome:
        """
        Process one frame on demand, outside the loop cadence.

        Args:
            source: Source to read from; defaults to the active source
        """
        if self._tick_in_progress:
            self.metrics.ticks_skipped += 1
            return TickOutcome.SKIPPED

        self._tick_in_progress = True
        return await self._guarded_tick(source or self._source)

    def _schedule_tick(self) -> None:
        """Start a tick task unless one is in flight."""
        if self._tick_in_progress:
            self.metrics.ticks_skipped += 1
            logger.debug("Previous tick still in progress, skipping")
            return

        self._tick_in_progress = True
        self._tick_task = asyncio.create_task(
            self._guarded_tick(self._source),
            name="frame_tick",
        )

    async def _guarded_tick(self, source: Optional[FrameSource]) -> TickOutcome:
        """Run a tick and release the in-progress flag. Caller sets the flag."""
        try:
            outcome = await self._process_frame(source)
        finally:
            self._tick_in_progress = False

        self._last_outcome = outcome
        return outcome

    async def _process_frame(self, source: Optional[FrameSource]) -> TickOutcome:
        """Body of a tick: capture, quantize, preview, send, count."""
        surface = self.surface
        if surface is None:
            self.metrics.tick_errors += 1
            logger.debug("No drawing surface available, tick aborted")
            return TickOutcome.ERROR

        if source is None:
            self.metrics.tick_errors += 1
            logger.debug("No frame source, tick aborted")
            return TickOutcome.ERROR

        # Read shared configuration once for the whole tick
        region = self._capture_region
        config = self._quantization
        device = self.connection.current

        try:
            image = await source.read_frame()
            if image is None:
                self.metrics.tick_errors += 1
                logger.debug("Source returned no frame")
                return TickOutcome.ERROR

            frame = extract_region(image, region, surface.width, surface.height)
            # Error diffusion is a per-pixel loop; keep it off the event loop
            binary = await asyncio.to_thread(apply_quantization, config, frame)
            surface.draw(binary.to_rgba())

            if device is None:
                self.metrics.frames_without_device += 1
                outcome = TickOutcome.NO_DEVICE
            elif device.channel.is_busy:
                self.metrics.frames_dropped_busy += 1
                outcome = TickOutcome.DEVICE_BUSY
            else:
                await device.channel.send_bitmap_indexed(pack_bitmap(binary))
                device.throughput.record_send()
                self.metrics.frames_sent += 1
                outcome = TickOutcome.DEVICE

            if device is not None:
                device.throughput.update()

        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.metrics.tick_errors += 1
            logger.error(f"Tick failed: {e}")
            return TickOutcome.ERROR

        self.metrics.ticks_completed += 1
        return outcome

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    async def _enter_idle(self) -> None:
        """Close the source, zero the window rate, and go IDLE."""
        source = self._source
        self._source = None

        if source is not None:
            try:
                await source.close()
            except Exception as e:
                logger.warning(f"Error closing frame source: {e}")

        device = self.connection.current
        if device is not None:
            device.throughput.clear_rate()

        if self._state != PipelineState.IDLE:
            self._set_state(PipelineState.IDLE)

    def _set_state(self, state: PipelineState) -> None:
        previous = self._state
        self._state = state
        logger.info(f"Pipeline {previous.value} -> {state.value}")
        for callback in self._state_listeners:
            callback(state)

    def status(self) -> dict:
        """Snapshot of pipeline state for observability."""
        return {
            "state": self._state.value,
            "tick_hz": self.tick_hz,
            "quantization": self._quantization.model_dump(),
            "capture_region": self._capture_region.model_dump(),
            "last_outcome": self._last_outcome.value if self._last_outcome else None,
            "device": self.connection.describe(),
            **self.metrics.to_dict(),
        }
