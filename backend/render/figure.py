from __future__ import annotations

from typing import Any

from render.engine import InMemoryMapEngine, LayerSpec


def evaluate_paint(expr: Any, properties: dict[str, Any]) -> Any:
    """
    Evaluate the small subset of map style expressions this package emits:
    literals, ["get", key] and ["match", input, k0, v0, ..., default].
    """
    if not isinstance(expr, list) or not expr:
        return expr
    op = expr[0]
    if op == "get":
        return properties.get(expr[1])
    if op == "match":
        value = evaluate_paint(expr[1], properties)
        branches = expr[2:-1]
        for i in range(0, len(branches) - 1, 2):
            if branches[i] == value:
                return branches[i + 1]
        return expr[-1]
    raise ValueError(f"Unsupported paint expression: {op!r}")


def _with_alpha(color: str, opacity: float) -> str:
    c = (color or "").strip()
    if c.startswith("hsl(") and c.endswith(")"):
        return f"hsla({c[4:-1]}, {opacity})"
    if c.startswith("rgb(") and c.endswith(")"):
        return f"rgba({c[4:-1]}, {opacity})"
    return c


def _layer_of_kind(engine: InMemoryMapEngine, source_id: str, kind: str) -> LayerSpec | None:
    for layer in engine.layers:
        if layer.source_id == source_id and layer.kind == kind:
            return layer
    return None


def trace_polygon_feature(
    feature: dict[str, Any],
    *,
    fill: LayerSpec | None,
    outline: LayerSpec | None,
) -> dict[str, Any]:
    props = feature.get("properties") or {}
    ring = ((feature.get("geometry") or {}).get("coordinates") or [[]])[0]
    if ring and ring[0] != ring[-1]:
        ring = [*ring, ring[0]]

    trace: dict[str, Any] = {
        "type": "scattermapbox",
        "name": props.get("name") or str(props.get("id") or ""),
        "lon": [p[0] for p in ring],
        "lat": [p[1] for p in ring],
        "mode": "lines",
        "hoverinfo": "name",
        "meta": {"id": props.get("id"), "colorIndex": props.get("colorIndex")},
    }
    if fill is not None:
        color = evaluate_paint(fill.paint.get("fill-color"), props)
        opacity = float(fill.paint.get("fill-opacity", 1.0))
        trace["fill"] = "toself"
        trace["fillcolor"] = _with_alpha(str(color), opacity)
    if outline is not None:
        trace["line"] = {
            "color": evaluate_paint(outline.paint.get("line-color"), props),
            "width": outline.paint.get("line-width", 1),
        }
    return trace


def build_figure(engine: InMemoryMapEngine) -> dict[str, Any]:
    """
    Render engine state as a Plotly scattermapbox figure.
    """
    traces: list[dict[str, Any]] = []
    polygon_count = 0
    for source_id, data in engine.sources.items():
        fill = _layer_of_kind(engine, source_id, "fill")
        outline = _layer_of_kind(engine, source_id, "line")
        if fill is None and outline is None:
            continue
        for feature in data.get("features") or []:
            traces.append(trace_polygon_feature(feature, fill=fill, outline=outline))
            polygon_count += 1

    for marker in engine.markers:
        lon, lat = marker.position
        traces.append(
            {
                "type": "scattermapbox",
                "name": "Marker",
                "lon": [lon],
                "lat": [lat],
                "mode": "markers",
                "marker": {"size": 14, "color": "red"},
                "showlegend": False,
            }
        )

    lon, lat = engine.center
    return {
        "data": traces,
        "layout": {
            "mapbox": {
                "center": {"lat": lat, "lon": lon},
                "zoom": engine.zoom,
                "style": "white-bg",
                "layers": [
                    {
                        "sourcetype": "raster",
                        "source": [engine.style.tileUrl],
                        "sourceattribution": engine.style.attribution,
                        "below": "traces",
                    }
                ],
            },
            "showlegend": False,
            "margin": {"l": 0, "r": 0, "t": 0, "b": 0},
            "meta": {
                "stats": {
                    "renderedPolygons": polygon_count,
                    "markers": len(engine.markers),
                    "styleLoaded": engine.is_style_loaded(),
                }
            },
        },
    }
