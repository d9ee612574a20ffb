from __future__ import annotations

import os
import sys

import numpy as np

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from plot_labels import label_color, labelled_to_rgb, save_label_png
from raster_label import label_image


def _labelled():
    mask = np.array([[1, 0, 1],
                     [0, 0, 1]], dtype=bool)
    img = np.full(mask.shape + (3,), 255, dtype=np.uint8)
    img[mask] = 0
    return label_image(img, 0.5)


def test_label_color_is_fixed():
    assert label_color(0) == (83, 21, 134)
    assert label_color(1) == (((1 + 37) * 791) % 256, ((1 + 19) * 567) % 256, ((1 + 51) * 354) % 256)
    assert label_color(1) != label_color(2)


def test_labelled_to_rgb_uses_stored_labels():
    out = _labelled()
    rgb = labelled_to_rgb(out)
    assert rgb.shape == (2, 3, 3)
    assert rgb.dtype == np.uint8
    assert tuple(rgb[0, 1]) == label_color(0)
    assert tuple(rgb[0, 0]) == label_color(1)
    assert tuple(rgb[0, 2]) == label_color(2)
    assert tuple(rgb[1, 2]) == label_color(2)


def test_save_label_png(tmp_path):
    out = _labelled()
    plain = tmp_path / "labels.png"
    save_label_png(out, str(plain))
    assert plain.exists() and plain.stat().st_size > 0

    boxed = tmp_path / "nested" / "boxes.png"
    save_label_png(out, str(boxed), boxes=True)
    assert boxed.exists() and boxed.stat().st_size > 0
