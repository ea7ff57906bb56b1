from __future__ import annotations

import math
import re

Ring = list[tuple[float, float]]

# Only the outer ring of a single POLYGON is supported. Holes and MULTI* wrappers
# either fail the match or collapse into whatever the first "((...))" captures.
_POLYGON_RE = re.compile(r"POLYGON\s*\(\(([^)]+)\)\)", re.IGNORECASE)
_WS_RE = re.compile(r"\s+")


def _to_float(token: str | None) -> float:
    if token is None:
        return math.nan
    try:
        return float(token)
    except ValueError:
        return math.nan


def parse_wkt_polygon(text: str | None, *, strict: bool = False) -> Ring | None:
    """
    Parse `POLYGON((lon lat, lon lat, ...))` into a ring of (lon, lat) tuples.

    Returns None when the text does not look like a polygon. In the default
    (lenient) mode a malformed number inside an otherwise matching string turns
    into NaN instead of rejecting the whole geometry. `strict=True` rejects it,
    and also rejects rings with fewer than three distinct points.
    """
    if not text:
        return None
    match = _POLYGON_RE.search(text)
    if match is None:
        return None

    ring: Ring = []
    for pair in match.group(1).split(","):
        tokens = _WS_RE.split(pair.strip())
        lon = _to_float(tokens[0] if tokens and tokens[0] else None)
        lat = _to_float(tokens[1] if len(tokens) > 1 else None)
        if strict and not (math.isfinite(lon) and math.isfinite(lat)):
            return None
        ring.append((lon, lat))
    if strict and len(set(ring)) < 3:
        return None
    return ring
