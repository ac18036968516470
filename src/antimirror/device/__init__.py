"""
Device Module
=============

Boundary to the attached display and its connection lifecycle.

Components:
    - DeviceChannel: Protocol for the injected transport
    - DeviceConnection: attach / reconnect / detach, event handling
    - ConnectedDevice: channel + version + throughput counter
"""

from antimirror.device.channel import DEVICE_EVENTS, DeviceChannel
from antimirror.device.connection import (
    ConnectedDevice,
    DeviceConnection,
    DeviceFactory,
)

__all__ = [
    "DEVICE_EVENTS",
    "DeviceChannel",
    "ConnectedDevice",
    "DeviceConnection",
    "DeviceFactory",
]
