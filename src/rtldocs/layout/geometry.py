"""Page geometry in PDF points (1/72 inch)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

A4_WIDTH_PT = 595.28
A4_HEIGHT_PT = 841.89


class PageGeometry(BaseModel):
    """Page size and margins. ``y`` coordinates grow downward from the top."""

    model_config = ConfigDict(frozen=True)

    width: float = Field(default=A4_WIDTH_PT, gt=0)
    height: float = Field(default=A4_HEIGHT_PT, gt=0)
    top_margin: float = Field(default=50, ge=0)
    bottom_margin: float = Field(default=50, ge=0)
    left_margin: float = Field(default=50, ge=0)
    right_margin: float = Field(default=50, ge=0)

    @property
    def printable_width(self) -> float:
        return self.width - self.left_margin - self.right_margin

    @property
    def printable_bottom(self) -> float:
        return self.height - self.bottom_margin

    @property
    def usable_height(self) -> float:
        return self.printable_bottom - self.top_margin
