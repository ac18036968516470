"""
Device Channel
==============

Protocol for the transport to an attached monochrome display.

The real USB/serial transport is injected; the pipeline depends only on
this capability surface:

    open() / close()            connection lifecycle
    get_version()               -> DeviceVersion(sdk, serial)
    is_busy                     True while the device is still consuming a frame
    send_bitmap_indexed(bytes)  one byte per pixel, 0 = black, 1 = white
    on(event, callback)         "disconnect" / "close" notifications
"""

from typing import Callable, Protocol

from antimirror.models.device import DeviceVersion


DEVICE_EVENTS = ("disconnect", "close")


class DeviceChannel(Protocol):
    """
    Protocol for device transports.

    Implementations must provide async ``open``, ``close``,
    ``get_version`` and ``send_bitmap_indexed`` methods, a readable
    ``is_busy`` flag, and ``on`` for event subscription.
    """

    @property
    def is_busy(self) -> bool:
        ...

    async def open(self) -> None:
        ...

    async def close(self) -> None:
        ...

    async def get_version(self) -> DeviceVersion:
        ...

    async def send_bitmap_indexed(self, bitmap: bytes) -> None:
        """
        Transmit one frame.

        Args:
            bitmap: ``width * height`` bytes, each 0 or 1
        """
        ...

    def on(self, event: str, callback: Callable[[], None]) -> None:
        """Register ``callback`` for ``event`` ("disconnect" or "close")."""
        ...
