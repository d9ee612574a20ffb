from __future__ import annotations

import os
import sys

import numpy as np
import pytest
import yaml

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from blob_finder import format_report, parse_config, run
from raster_label import label_image


def _write_frame(tmp_path) -> str:
    img = np.full((10, 12, 3), 255, dtype=np.uint8)
    img[1:4, 1:5] = 0      # 12 px
    img[6, 2:9] = 30       # 7 px
    img[8, 11] = 0         # 1 px
    path = tmp_path / "frame.npy"
    np.save(path, img)
    return str(path)


def test_parse_config(tmp_path):
    p = tmp_path / "cfg.yaml"
    p.write_text(yaml.safe_dump({"image_path": "x.npy", "threshold": 0.3}))
    cfg = parse_config(str(p))
    assert cfg == {"image_path": "x.npy", "threshold": 0.3}

    empty = tmp_path / "empty.yaml"
    empty.write_text("")
    assert parse_config(str(empty)) == {}


def test_run_end_to_end(tmp_path, capsys):
    frame = _write_frame(tmp_path)
    png = tmp_path / "debug.png"
    cfg = {"image_path": frame, "threshold": 0.4, "min_mass": 2, "profile": True,
           "debug_png": str(png)}
    out = run(cfg)

    assert out.region_count == 3
    assert sorted(c.mass for _, c in out.regions()) == [1, 7, 12]
    assert png.exists()

    text = capsys.readouterr().out
    assert "regions=3" in text
    assert "times:" in text
    # the single-pixel region is below min_mass
    assert "(11,8)" not in text
    assert "(1,1)" in text and "(4,3)" in text


def test_run_warns_without_regions(tmp_path, capsys):
    img = np.full((3, 3, 3), 255, dtype=np.uint8)
    path = tmp_path / "white.npy"
    np.save(path, img)
    out = run({"image_path": str(path), "threshold": 0.5})
    assert out.region_count == 0
    assert "WARNING: no foreground regions" in capsys.readouterr().out


def test_run_validates_config():
    with pytest.raises(ValueError):
        run({})
    with pytest.raises(ValueError):
        run({"image_path": "frame.npy", "threshold": "dark"})


def test_format_report_orders_by_mass():
    img = np.full((5, 9, 3), 255, dtype=np.uint8)
    img[0, 0] = 0
    img[2, 2:7] = 0
    img[4, 8] = 0
    lines = format_report(label_image(img, 0.5), min_mass=1, max_report=2)
    assert len(lines) == 4
    assert lines[1].split()[1] == "5"
    assert lines[2].split()[1] == "1"
    assert lines[-1] == "... 1 more"
