from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

PALETTE_SIZE = 6


class MapCenter(BaseModel):
    lon: float
    lat: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.lon, self.lat)


class MapPalette(BaseModel):
    """
    Hue table keyed by a feature's colorIndex.

    Fill and outline share the hue; the outline is a darker shade.
    """

    fill: list[str] = Field(
        default_factory=lambda: [
            "hsl(210, 70%, 50%)",
            "hsl(270, 70%, 50%)",
            "hsl(330, 70%, 50%)",
            "hsl(30, 70%, 50%)",
            "hsl(90, 70%, 50%)",
            "hsl(150, 70%, 50%)",
        ]
    )
    outline: list[str] = Field(
        default_factory=lambda: [
            "hsl(210, 70%, 40%)",
            "hsl(270, 70%, 40%)",
            "hsl(330, 70%, 40%)",
            "hsl(30, 70%, 40%)",
            "hsl(90, 70%, 40%)",
            "hsl(150, 70%, 40%)",
        ]
    )
    fillOpacity: float = Field(default=0.3, ge=0.0, le=1.0)
    lineWidth: float = Field(default=2.0, gt=0.0)

    @field_validator("fill", "outline")
    @classmethod
    def _six_entries(cls, v: list[str]) -> list[str]:
        if len(v) != PALETTE_SIZE:
            raise ValueError(f"palette needs exactly {PALETTE_SIZE} colors, got {len(v)}")
        return v


class MapStyle(BaseModel):
    tileUrl: str = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"
    attribution: str = "&copy; OpenStreetMap contributors"


class MapConfig(BaseModel):
    # Azadi Square, Tehran. Used whenever device location is unavailable or declined.
    fallbackCenter: MapCenter = Field(
        default_factory=lambda: MapCenter(lon=51.3380, lat=35.6997)
    )
    defaultZoom: float = Field(default=11.0, ge=0.0, le=24.0)
    markerZoom: float = Field(default=14.0, ge=0.0, le=24.0)
    focusPadding: int = Field(default=50, ge=0)
    focusMaxZoom: float = Field(default=15.0, ge=0.0, le=24.0)
    searchDebounceMs: int = Field(default=500, ge=0)
    style: MapStyle = Field(default_factory=MapStyle)
    palette: MapPalette = Field(default_factory=MapPalette)
