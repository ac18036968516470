"""
Test Configuration
==================

Pytest fixtures and test doubles for AntiMirror.
"""

import asyncio
from typing import Callable, Dict, List, Optional

import numpy as np
import pytest

from antimirror.models.device import DeviceVersion
from antimirror.stream.frame import Frame


class FakeDevice:
    """
    In-memory DeviceChannel.

    ``is_busy`` is a plain attribute so tests can toggle it between ticks.
    Closing emits the "close" event, like a real transport.
    """

    def __init__(
        self,
        serial: str = "PDU1-Y012345",
        sdk: str = "2.6.2",
        busy: bool = False,
        close_error: Optional[Exception] = None,
        send_error: Optional[Exception] = None,
        send_delay: float = 0.0,
    ) -> None:
        self.serial = serial
        self.sdk = sdk
        self.is_busy = busy
        self.close_error = close_error
        self.send_error = send_error
        self.send_delay = send_delay

        self.opened = False
        self.closed = False
        self.sent: List[bytes] = []
        self._listeners: Dict[str, List[Callable[[], None]]] = {}

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        if self.close_error is not None:
            raise self.close_error
        self.closed = True
        self.emit("close")

    async def get_version(self) -> DeviceVersion:
        return DeviceVersion(sdk=self.sdk, serial=self.serial)

    async def send_bitmap_indexed(self, bitmap: bytes) -> None:
        if self.send_delay:
            await asyncio.sleep(self.send_delay)
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(bytes(bitmap))

    def on(self, event: str, callback: Callable[[], None]) -> None:
        self._listeners.setdefault(event, []).append(callback)

    def emit(self, event: str) -> None:
        for callback in list(self._listeners.get(event, [])):
            callback()


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SlowFrameSource:
    """Frame source whose reads take ``delay`` seconds; tracks overlap."""

    def __init__(self, image: np.ndarray, delay: float) -> None:
        self.image = image
        self.delay = delay
        self.active = True
        self.in_flight = 0
        self.max_in_flight = 0
        self.reads = 0

    @property
    def is_active(self) -> bool:
        return self.active

    async def read_frame(self) -> Optional[np.ndarray]:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            self.reads += 1
            return self.image
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        self.active = False


def device_factory(device: FakeDevice):
    """Coroutine factory handing out ``device``."""

    async def request_device() -> FakeDevice:
        return device

    return request_device


def gray_frame(width: int, height: int, level: int) -> Frame:
    """Uniform neutral-gray frame."""
    return Frame.filled(width, height, (level, level, level, 255))


def gray_row(levels: List[int], width: Optional[int] = None) -> Frame:
    """Frame from a flat list of gray levels, ``width`` columns wide."""
    width = width or len(levels)
    height = len(levels) // width
    data = np.empty((height, width, 4), dtype=np.uint8)
    grid = np.array(levels, dtype=np.uint8).reshape(height, width)
    data[..., 0] = grid
    data[..., 1] = grid
    data[..., 2] = grid
    data[..., 3] = 255
    return Frame(width=width, height=height, data=data)


@pytest.fixture
def fake_device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def random_frame() -> Frame:
    """Deterministic noisy 16x12 RGBA frame with random alpha."""
    rng = np.random.default_rng(1234)
    data = rng.integers(0, 256, size=(12, 16, 4), dtype=np.uint8)
    return Frame(width=16, height=12, data=data)


@pytest.fixture
def source_image() -> np.ndarray:
    """40x30 RGBA source: black background with a white 8x4 block at (10, 5)."""
    image = np.zeros((30, 40, 4), dtype=np.uint8)
    image[..., 3] = 255
    image[5:9, 10:18, :3] = 255
    return image
