import math

import numpy as np
from matplotlib.colors import hsv_to_rgb, to_rgb
from numba import njit, prange

from chaosgame.datatypes import ColorSample
from chaosgame.errors import InvalidConfiguration


BASE_SATURATION = 0.4
BASE_VALUE = 0.9
RADIAL_FALLOFF = 0.1


@njit(parallel=True)
def compute_hsv(points, radius):
    """
    Color every point by its polar angle (hue) and its distance from the center (saturation and value).
    Points are relative to the polygon center. Returns an (N, 3) array of hue in degrees, saturation, value.
    """
    count = points.shape[0]
    hsv = np.empty((count, 3), dtype=np.float64)

    for i in prange(count):  # parallelized
        x = points[i, 0]
        y = points[i, 1]
        distance = math.sqrt(x * x + y * y)

        hue = math.degrees(math.atan2(y, x))
        if hue < 0.0:
            hue += 360.0
        if hue >= 360.0:  # tiny negative angles round up to 360
            hue -= 360.0

        falloff = 1.0 - distance / radius
        hsv[i, 0] = hue
        hsv[i, 1] = min(max(BASE_SATURATION + RADIAL_FALLOFF * falloff, 0.0), 1.0)
        hsv[i, 2] = min(max(BASE_VALUE + RADIAL_FALLOFF * falloff, 0.0), 1.0)

    return hsv


def point_hsv(points, radius):
    """Validate the input and run the HSV kernel on an (N, 2) array of points."""
    if not radius > 0:
        raise InvalidConfiguration(f"Reference radius must be positive, got {radius}")
    points = np.ascontiguousarray(points, dtype=np.float64).reshape(-1, 2)
    if not np.isfinite(points).all():
        raise ValueError("Cannot color non-finite points")
    return compute_hsv(points, float(radius))


def point_color(point, radius):
    hue, saturation, value = point_hsv(np.array([point], dtype=np.float64), radius)[0]
    return ColorSample(float(hue), float(saturation), float(value))


def hsv_to_rgb255(hsv):
    """Convert HSV rows (hue in degrees) to 8 bit RGB rows."""
    hsv = np.array(hsv, dtype=np.float64).reshape(-1, 3)
    hsv[:, 0] /= 360.0
    return np.rint(hsv_to_rgb(hsv) * 255).astype(np.uint8)


def color_to_rgb255(color):
    """Resolve any matplotlib color spec ("black", "#ff8800", (1, 0, 0)) to an 8 bit RGB tuple."""
    try:
        rgb = to_rgb(color)
    except ValueError as error:
        raise InvalidConfiguration(f"Unknown color {color!r}") from error
    return tuple(int(round(c * 255)) for c in rgb)
