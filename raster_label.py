from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator

import numpy as np
from numba import njit

from alias_table import AliasTable, alias_merge
from clips import ClipRegion, gather_clip_regions
from image_io import to_rgb_uint8


class Direction(IntEnum):
    N = 0
    NE = 1
    E = 2
    SE = 3
    S = 4
    SW = 5
    W = 6
    NW = 7


# (dx, dy) per Direction; y grows downwards.
NEIGHBOR_OFFSETS = np.array([
    (0, -1),   # N
    (1, -1),   # NE
    (1, 0),    # E
    (1, 1),    # SE
    (0, 1),    # S
    (-1, 1),   # SW
    (-1, 0),   # W
    (-1, -1),  # NW
], dtype=np.int64)

DIR_N = int(Direction.N)
DIR_NE = int(Direction.NE)
DIR_W = int(Direction.W)
DIR_NW = int(Direction.NW)


# Scaled thresholds below 0 or above 765 already make every pixel background
# or foreground respectively.
THRESHOLD_X_3_MIN = -1
THRESHOLD_X_3_MAX = 3 * 255 + 1


def scale_threshold(threshold: float) -> int:
    """Scale a [0,1] brightness threshold to the range of R+G+B (0..765).

    Out-of-range thresholds give a degenerate labelling: the result is held
    to [-1, 766], just past what any pixel sum can reach, so huge or infinite
    values still fit the kernel's integer argument. NaN compares false
    against every sum and so behaves like +inf (all foreground).
    """
    scaled = (255 * float(threshold)) * 3
    if np.isnan(scaled):
        return THRESHOLD_X_3_MAX
    return int(min(max(scaled, THRESHOLD_X_3_MIN), THRESHOLD_X_3_MAX))


@njit(inline='always')
def above_threshold(r, g, b, threshold_x_3):
    return (int(r) + int(g) + int(b)) > threshold_x_3


class LabelGrid:
    """Label ids for a w x h image, stored with a one-cell zero border.

    data has shape (h+2, w+2); pixel (x, y) lives at data[y+1, x+1]. The
    border is never written after construction.
    """

    __slots__ = ("w", "h", "data")

    def __init__(self, w: int, h: int):
        self.w = int(w)
        self.h = int(h)
        self.data = np.empty((self.h + 2, self.w + 2), dtype=np.uint32)
        # zero the perimeter so neighbour lookups never need bounds checks
        self.data[0, :] = 0
        self.data[-1, :] = 0
        self.data[:, 0] = 0
        self.data[:, -1] = 0

    @property
    def interior(self) -> np.ndarray:
        return self.data[1:-1, 1:-1]

    def label_at(self, x: int, y: int) -> int:
        return int(self.data[y + 1, x + 1])

    def neighbor(self, x: int, y: int, direction: Direction) -> int:
        dx, dy = NEIGHBOR_OFFSETS[int(direction)]
        return int(self.data[y + 1 + dy, x + 1 + dx])


@njit(inline='always')
def get_connected_label(data, offs, x, y, direction):
    return data[y + 1 + offs[direction, 1], x + 1 + offs[direction, 0]]


@njit(inline='always')
def set_label(data, aliases, x, y, label):
    if label == 0:
        data[y + 1, x + 1] = 0
    else:
        data[y + 1, x + 1] = aliases[label - 1]


@njit
def label_pixel(image, data, aliases, count, offs, x, y, threshold_x_3):
    """Label pixel (x, y) from its N, NE, NW and W neighbours.

    Returns the new number of alias entries in use.
    """
    if above_threshold(image[y, x, 0], image[y, x, 1], image[y, x, 2], threshold_x_3):
        set_label(data, aliases, x, y, 0)
        return count

    lbl = get_connected_label(data, offs, x, y, DIR_N)
    if lbl > 0:
        set_label(data, aliases, x, y, lbl)
        return count

    # NE labelled: W or NW may belong to a different region that meets here
    lbl = get_connected_label(data, offs, x, y, DIR_NE)
    if lbl > 0:
        label_w = get_connected_label(data, offs, x, y, DIR_W)
        label_nw = get_connected_label(data, offs, x, y, DIR_NW)
        if label_w > 0 or label_nw > 0:
            other = label_nw if label_nw > 0 else label_w
            lo = alias_merge(aliases, count, lbl, other)
            set_label(data, aliases, x, y, lo)
        else:
            set_label(data, aliases, x, y, lbl)
        return count

    # NW is taken on its own; it is not merged with W here
    lbl = get_connected_label(data, offs, x, y, DIR_NW)
    if lbl > 0:
        set_label(data, aliases, x, y, lbl)
        return count

    lbl = get_connected_label(data, offs, x, y, DIR_W)
    if lbl > 0:
        set_label(data, aliases, x, y, lbl)
        return count

    # new region
    aliases[count] = count + 1
    count += 1
    set_label(data, aliases, x, y, count)
    return count


@njit
def _label_pass(image, data, aliases, offs, threshold_x_3):
    h = image.shape[0]
    w = image.shape[1]
    count = 0
    for y in range(h):
        for x in range(w):
            count = label_pixel(image, data, aliases, count, offs, x, y, threshold_x_3)
    return count


def _alias_capacity(w: int, h: int) -> int:
    # Allocating pixels are pairwise non-adjacent (8-neighbourhood), so at
    # most one per 2x2 block can open a new region.
    return max(1, ((w + 1) // 2) * ((h + 1) // 2))


@dataclass
class LabelledImage:
    """Result of one labelling run: grid, alias table and per-region clips.

    clips[c - 1] describes canonical label c; entries for labels that were
    merged away stay empty (mass 0).
    """

    w: int
    h: int
    grid: LabelGrid
    aliases: AliasTable
    clips: list[ClipRegion]

    def resolved(self) -> np.ndarray:
        """Interior labels mapped to canonical ids (0 stays background)."""
        interior = self.grid.interior
        lut = np.zeros(len(self.aliases) + 1, dtype=np.uint32)
        lut[1:] = self.aliases.as_array()
        return lut[interior]

    def regions(self) -> Iterator[tuple[int, ClipRegion]]:
        for idx, clip in enumerate(self.clips):
            if not clip.is_empty:
                yield idx + 1, clip

    @property
    def region_count(self) -> int:
        return sum(1 for _ in self.regions())


def label_image(image, threshold: float) -> LabelledImage:
    """Threshold an RGB image and label its dark regions.

    - image: array-like of shape (h, w, 3); channels are summed, so their
      order does not matter. Non-uint8 input goes through
      image_io.to_rgb_uint8 (floats in [0,1] are scaled, other values are
      clipped to 0..255).
    - threshold: fraction in [0,1] of full brightness. A pixel is foreground
      when R+G+B <= 3*255*threshold.

    Returns a LabelledImage holding the padded label grid, the alias table
    and the ClipRegion list indexed by canonical label - 1.
    """
    img = np.asarray(image)
    if img.ndim != 3 or img.shape[2] != 3:
        raise ValueError(f"image must have shape (h, w, 3), got {img.shape}")
    if img.dtype != np.uint8:
        img = to_rgb_uint8(img)
    img = np.ascontiguousarray(img)
    h, w = int(img.shape[0]), int(img.shape[1])

    grid = LabelGrid(w, h)
    store = np.zeros(_alias_capacity(w, h), dtype=np.uint32)
    count = _label_pass(img, grid.data, store, NEIGHBOR_OFFSETS, scale_threshold(threshold))
    aliases = AliasTable.from_array(store, count)

    clips = gather_clip_regions(grid, aliases)
    return LabelledImage(w=w, h=h, grid=grid, aliases=aliases, clips=clips)
