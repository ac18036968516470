"""
Device Models
=============

Data returned by the device transport.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DeviceVersion:
    """
    Version information reported by an attached device.

    Attributes:
        sdk: Firmware / SDK version string
        serial: Device serial number
    """

    sdk: str
    serial: str

    def to_dict(self) -> dict:
        return {"sdk": self.sdk, "serial": self.serial}
