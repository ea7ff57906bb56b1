from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel

from layers.types import PolygonRecord


class Court(BaseModel):
    id: str
    name: str


class Judicial(BaseModel):
    id: str | None = None
    name: str
    code: int


class CourtFindResult(BaseModel):
    id: str
    name: str
    polygon: str
    address: str | None = None
    phone: str | None = None
    description: str | None = None
    judicial: Judicial

    def to_polygon_record(self) -> PolygonRecord:
        return PolygonRecord(id=self.id, name=self.name, polygon=self.polygon)


@dataclass(frozen=True)
class FindParams:
    judicial_ids: tuple[str, ...]
    latitude: float
    longitude: float

    @property
    def key(self) -> tuple:
        # Responses are matched back to requests by this key.
        return ("courts", "find", ",".join(self.judicial_ids), self.latitude, self.longitude)

    def to_query(self) -> list[tuple[str, str | float]]:
        # Repeated keys for the id array: judicial_ids=a&judicial_ids=b
        out: list[tuple[str, str | float]] = [("judicial_ids", j) for j in self.judicial_ids]
        out.append(("lat", self.latitude))
        out.append(("lng", self.longitude))
        return out


def parse_judicial_ids(raw: str | None) -> tuple[str, ...]:
    """
    Split the comma-separated `courts` parameter, dropping blank entries.
    """
    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(",") if part.strip())
