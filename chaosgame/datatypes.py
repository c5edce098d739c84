from dataclasses import dataclass
from typing import NamedTuple

import numpy as np
from PIL import Image


class Point(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True)
class PolygonSpec:
    vertex_count: int
    radius: float
    rotation_offset: float = -np.pi / 2  # first vertex points up in image coordinates


class ColorSample(NamedTuple):
    hue: float  # degrees in [0, 360)
    saturation: float
    value: float


@dataclass
class Frame:
    index: int
    image: Image.Image
    highlight: Point  # most recently appended point
