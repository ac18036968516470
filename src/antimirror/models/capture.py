"""
Capture Region Model
====================

Rectangle of the source feed that is scaled onto the display each tick.
"""

from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field


class CaptureRegion(BaseModel):
    """
    Sub-rectangle ``{x, y, w, h}`` of the source frame, in source pixels.

    The default matches the screen offset of the desktop simulator window
    (measured empirically).
    """

    model_config = ConfigDict(frozen=True)

    x: int = Field(default=16, ge=0, description="Left edge in source pixels")
    y: int = Field(default=15, ge=0, description="Top edge in source pixels")
    w: int = Field(default=400, ge=1, description="Width in source pixels")
    h: int = Field(default=240, ge=1, description="Height in source pixels")

    @classmethod
    def parse(cls, text: str) -> "CaptureRegion":
        """Parse an ``x,y,w,h`` string (as used in environment overrides)."""
        parts = [p.strip() for p in text.split(",")]
        if len(parts) != 4:
            raise ValueError(f"Capture region must be 'x,y,w,h', got: {text!r}")
        x, y, w, h = (int(p) for p in parts)
        return cls(x=x, y=y, w=w, h=h)

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.w, self.h)
