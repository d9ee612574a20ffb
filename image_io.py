"""
image_io.py

Thin loader turning an image file into the (h, w, 3) uint8 buffer that
raster_label.label_image consumes.

- .npy files are read with numpy; anything else goes through
  matplotlib.image.imread (PNG natively, other formats via Pillow).
- Float images whose maximum is <= 1 are treated as [0, 1] and scaled to
  0..255; brighter float images are taken as 0..255 already. Values are
  clipped to 0..255 (integers included), never wrapped.
- Grayscale images are replicated across three channels.
- An alpha channel, if present, is dropped.

Primary API
-----------

    from image_io import load_rgb

    rgb = load_rgb("frame.png")
    labelled = label_image(rgb, threshold=0.4)
"""

from __future__ import annotations

import os

import numpy as np
import matplotlib.image as mpimg


def to_rgb_uint8(arr: np.ndarray) -> np.ndarray:
    """Normalise an image array to shape (h, w, 3) and dtype uint8."""
    a = np.asarray(arr)
    if a.ndim == 2:
        a = np.stack([a, a, a], axis=2)
    elif a.ndim == 3 and a.shape[2] == 4:
        a = a[:, :, :3]
    elif a.ndim == 3 and a.shape[2] == 1:
        a = np.concatenate([a, a, a], axis=2)
    if a.ndim != 3 or a.shape[2] != 3:
        raise ValueError(f"unsupported image shape {np.shape(arr)}; expected (h,w), (h,w,3) or (h,w,4)")

    if np.issubdtype(a.dtype, np.floating):
        # [0,1] floats (matplotlib's convention) are scaled; anything brighter
        # is taken to be on the 0..255 scale already
        scale = 255.0 if (a.size == 0 or np.nanmax(a) <= 1.0) else 1.0
        a = np.clip(np.rint(a * scale), 0, 255)
    elif a.dtype == np.bool_:
        a = a.astype(np.uint8) * 255
    elif np.issubdtype(a.dtype, np.integer):
        a = np.clip(a, 0, 255)
    else:
        raise ValueError(f"unsupported image dtype {a.dtype}")
    return np.ascontiguousarray(a, dtype=np.uint8)


def load_rgb(path: str) -> np.ndarray:
    ext = os.path.splitext(path)[1].lower()
    if ext == ".npy":
        arr = np.load(path)
    else:
        arr = mpimg.imread(path)
    return to_rgb_uint8(arr)
