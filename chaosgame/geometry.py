import math
import numbers

import numpy as np

from chaosgame.errors import InvalidConfiguration


POLYGON_NAMES = {
    3: "Triangle",
    4: "Square",
    5: "Pentagon",
    6: "Hexagon",
    7: "Heptagon",
    8: "Octagon",
    9: "Nonagon",
    10: "Decagon",
    11: "Hendecagon",
    12: "Dodecagon",
    13: "Tridecagon",
    14: "Tetradecagon",
    15: "Pentadecagon",
    16: "Hexadecagon",
    17: "Heptadecagon",
    18: "Octadecagon",
    19: "Enneadecagon",
    20: "Icosagon",
}


def check_vertex_count(n):
    if isinstance(n, bool) or not isinstance(n, numbers.Integral):
        raise InvalidConfiguration(f"Vertex count must be an integer, got {n!r}")
    if n < 3:
        raise InvalidConfiguration(f"A polygon needs at least 3 vertices, got {n}")
    return int(n)


def polygon_name(n):
    """Display name of a regular polygon with n vertices."""
    n = check_vertex_count(n)
    try:
        return POLYGON_NAMES[n]
    except KeyError:
        supported = f"{min(POLYGON_NAMES)}-{max(POLYGON_NAMES)}"
        raise InvalidConfiguration(f"No polygon name for {n} vertices (supported: {supported})") from None


def polygon_vertices(n, radius, rotation_offset=-np.pi / 2, center=(0.0, 0.0)):
    """
    Vertices of a regular polygon as an (n, 2) array.
    Vertex k sits at angle k * 2pi/n + rotation_offset on the circle of the given radius.
    """
    n = check_vertex_count(n)
    if not radius > 0:
        raise InvalidConfiguration(f"Polygon radius must be positive, got {radius}")
    if isinstance(rotation_offset, bool) or not isinstance(rotation_offset, numbers.Real) or not math.isfinite(rotation_offset):
        raise InvalidConfiguration(f"Rotation offset must be a finite angle, got {rotation_offset!r}")

    angles = np.arange(n) * (2 * np.pi / n) + rotation_offset
    vertices = np.empty((n, 2), dtype=np.float64)
    vertices[:, 0] = center[0] + radius * np.cos(angles)
    vertices[:, 1] = center[1] + radius * np.sin(angles)
    return vertices


def vertices_of(polygon):
    """Vertex set of a PolygonSpec."""
    return polygon_vertices(polygon.vertex_count, polygon.radius, polygon.rotation_offset)


def optimal_rate(n):
    """
    Fraction of the way towards the chosen vertex that gives a clean, non-overlapping attractor.
    """
    n = check_vertex_count(n)
    if n % 4 == 0:
        return 1 / (1 + math.tan(math.pi / n))
    if n % 4 == 2:
        return 1 / (1 + math.sin(math.pi / n))
    return 1 / (1 + 2 * math.sin(math.pi / (2 * n)))
