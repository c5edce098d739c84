import logging

import numpy as np

from chaosgame.datatypes import Point
from chaosgame.errors import InvalidConfiguration


SEED_POINT = Point(0.0, 0.0)


class PointSequence:
    """Append-only sequence of every point the chaos game produced, starting with the seed point."""

    def __init__(self, seed_point=SEED_POINT):
        self._points = [Point(float(seed_point[0]), float(seed_point[1]))]

    def append(self, point):
        self._points.append(point)

    def __len__(self):
        return len(self._points)

    def __getitem__(self, index):
        return self._points[index]

    def __iter__(self):
        return iter(self._points)

    @property
    def last(self):
        return self._points[-1]

    def snapshot(self, count=None):
        """Copy of the first `count` points (all by default) as an (N, 2) array."""
        if count is None:
            count = len(self._points)
        if not 0 < count <= len(self._points):
            raise IndexError(f"Cannot take {count} points from a sequence of {len(self._points)}")
        return np.array(self._points[:count], dtype=np.float64)


class ChaosGame:
    """
    Moves the current point a fixed fraction of the way towards a randomly chosen vertex, once per step.
    Every generated point is appended to `points`.
    """

    def __init__(self, vertices, rate, rng=None, seed=None):
        self.vertices = np.asarray(vertices, dtype=np.float64)
        if self.vertices.ndim != 2 or self.vertices.shape[1] != 2 or len(self.vertices) < 3:
            raise InvalidConfiguration(f"Expected an (n >= 3, 2) vertex array, got shape {self.vertices.shape}")
        if not 0 < rate < 1:
            raise InvalidConfiguration(f"Rate must lie strictly between 0 and 1, got {rate}")

        self.rate = float(rate)
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.points = PointSequence()

    @property
    def current(self):
        return self.points.last

    @property
    def steps(self):
        return len(self.points) - 1

    def step(self):
        """Advance the game by one point and return it."""
        vertex = self.vertices[self.rng.integers(len(self.vertices))]
        x, y = self.current
        point = Point(
            float(x + self.rate * (vertex[0] - x)),
            float(y + self.rate * (vertex[1] - y)),
        )
        self.points.append(point)
        return point

    def run(self, steps):
        for _ in range(steps):
            self.step()
        logging.debug(f"Chaos game advanced to {self.steps} steps.")
        return self.points
