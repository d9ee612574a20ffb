from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

import numpy as np
from numba import njit

# Sentinel for an untouched region's min corner.
COORD_MAX = 0xFFFFFFFF


class Point(NamedTuple):
    x: int
    y: int


@dataclass
class ClipRegion:
    """Pixel count and inclusive bounding box of one canonical label."""

    mass: int = 0
    min: Point = Point(COORD_MAX, COORD_MAX)
    max: Point = Point(0, 0)

    @property
    def is_empty(self) -> bool:
        return self.mass == 0

    @property
    def width(self) -> int:
        if self.is_empty:
            return 0
        return self.max.x - self.min.x + 1

    @property
    def height(self) -> int:
        if self.is_empty:
            return 0
        return self.max.y - self.min.y + 1


@njit
def _gather(data, aliases, mass, bbox):
    """Accumulate mass and bbox per canonical label over the grid interior.

    bbox rows are (min_x, min_y, max_x, max_y).
    """
    h = data.shape[0] - 2
    w = data.shape[1] - 2
    for y in range(h):
        for x in range(w):
            label = data[y + 1, x + 1]
            # thresholded white pixel
            if label == 0:
                continue
            c = aliases[label - 1] - 1
            mass[c] += 1
            if x < bbox[c, 0]:
                bbox[c, 0] = x
            if y < bbox[c, 1]:
                bbox[c, 1] = y
            if x > bbox[c, 2]:
                bbox[c, 2] = x
            if y > bbox[c, 3]:
                bbox[c, 3] = y


def clip_arrays(grid, aliases) -> tuple[np.ndarray, np.ndarray]:
    """Return (mass[K], bbox[K,4]) with K the largest canonical label.

    Row c-1 belongs to canonical label c; rows of labels absorbed by a merge
    keep mass 0 and the sentinel box (COORD_MAX, COORD_MAX, 0, 0).
    """
    K = aliases.max_canonical()
    mass = np.zeros(K, dtype=np.int64)
    bbox = np.zeros((K, 4), dtype=np.int64)
    bbox[:, 0] = COORD_MAX
    bbox[:, 1] = COORD_MAX
    if K == 0:
        return mass, bbox
    _gather(grid.data, aliases.data, mass, bbox)
    return mass, bbox


def gather_clip_regions(grid, aliases) -> list[ClipRegion]:
    mass, bbox = clip_arrays(grid, aliases)
    return [
        ClipRegion(mass=int(m),
                   min=Point(int(b[0]), int(b[1])),
                   max=Point(int(b[2]), int(b[3])))
        for m, b in zip(mass, bbox)
    ]
