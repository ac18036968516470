"""
Device Connection
=================

Owns the currently attached device and its throughput counter.

This module:
    - Closes the previous device before attaching a new one
      (close failures are logged and ignored)
    - Opens the new channel and queries its version
    - Subscribes to "disconnect" / "close" and clears the handle when they fire
    - Creates a fresh ThroughputCounter for every attachment

Design Rules:
    - No automatic reconnection; reattaching is always an explicit call
    - Events from a device that is no longer current are ignored
"""

import logging
import time
from dataclasses import dataclass, field
from functools import partial
from typing import Awaitable, Callable, Optional

from antimirror.device.channel import DEVICE_EVENTS, DeviceChannel
from antimirror.models.device import DeviceVersion
from antimirror.signals.throughput import ThroughputCounter


logger = logging.getLogger(__name__)


DeviceFactory = Callable[[], Awaitable[DeviceChannel]]


@dataclass
class ConnectedDevice:
    """
    An attached, opened device.

    Attributes:
        channel: Transport to the device
        version: Version reported at attach time
        throughput: Frames sent since attach
    """

    channel: DeviceChannel
    version: DeviceVersion
    throughput: ThroughputCounter = field(default_factory=ThroughputCounter)


class DeviceConnection:
    """
    Attach / detach lifecycle for a single device.

    Example:
        connection = DeviceConnection()
        await connection.connect(request_device)

        device = connection.current
        if device and not device.channel.is_busy:
            await device.channel.send_bitmap_indexed(payload)
    """

    def __init__(
        self,
        throughput_window_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize an empty connection.

        Args:
            throughput_window_seconds: Window for the fps counter
            clock: Time source handed to each ThroughputCounter
        """
        self.throughput_window_seconds = throughput_window_seconds
        self._clock = clock
        self._current: Optional[ConnectedDevice] = None
        self.connect_count: int = 0
        self.close_errors: int = 0

    @property
    def current(self) -> Optional[ConnectedDevice]:
        """The attached device, or None."""
        return self._current

    @property
    def is_attached(self) -> bool:
        return self._current is not None

    async def connect(self, request_device: DeviceFactory) -> ConnectedDevice:
        """
        Attach a new device, replacing any current one.

        Args:
            request_device: Coroutine factory returning an unopened channel

        Returns:
            The newly attached device
        """
        previous = self._current
        self._current = None

        if previous is not None:
            try:
                await previous.channel.close()
            except Exception:
                self.close_errors += 1
                logger.exception("Failed to close previous device, continuing")

        channel = await request_device()
        await channel.open()
        for event in DEVICE_EVENTS:
            channel.on(event, partial(self._handle_lost, channel, event))

        version = await channel.get_version()
        connected = ConnectedDevice(
            channel=channel,
            version=version,
            throughput=ThroughputCounter(
                window_seconds=self.throughput_window_seconds,
                clock=self._clock,
            ),
        )
        self._current = connected
        self.connect_count += 1

        logger.info(f"Device attached: serial={version.serial}, sdk={version.sdk}")
        return connected

    async def disconnect(self) -> None:
        """Close and detach the current device, if any."""
        device = self._current
        if device is None:
            return

        self._current = None
        await device.channel.close()
        logger.info(f"Device detached: serial={device.version.serial}")

    def _handle_lost(self, channel: DeviceChannel, event: str) -> None:
        """Clear the handle when the current device reports disconnect/close."""
        if self._current is None or self._current.channel is not channel:
            return

        logger.info(
            f"Device {event}: serial={self._current.version.serial}, "
            f"frames_sent={self._current.throughput.total_frames_sent}"
        )
        self._current = None

    def describe(self) -> Optional[dict]:
        """Serial, version and send counters of the attached device."""
        device = self._current
        if device is None:
            return None

        return {
            "serial": device.version.serial,
            "version": device.version.sdk,
            "frames_sent": device.throughput.total_frames_sent,
            "fps": device.throughput.last_window_frames_sent,
        }
