from __future__ import annotations

import argparse
import time

import yaml

from image_io import load_rgb
from raster_label import LabelledImage, label_image


def parse_config(path: str) -> dict:
    with open(path, "r") as f:
        cfg = yaml.safe_load(f)
    return cfg or {}


def format_report(labelled: LabelledImage, min_mass: int = 1, max_report: int = 20) -> list[str]:
    """One line per region with mass >= min_mass, largest first."""
    rows = [(label, clip) for label, clip in labelled.regions() if clip.mass >= min_mass]
    rows.sort(key=lambda r: (-r[1].mass, r[0]))
    lines = [f"{'label':>6} {'mass':>8} {'min':>12} {'max':>12}"]
    for label, clip in rows[:max_report]:
        lines.append(f"{label:>6d} {clip.mass:>8d} "
                     f"{'(%d,%d)' % clip.min:>12} {'(%d,%d)' % clip.max:>12}")
    if len(rows) > max_report:
        lines.append(f"... {len(rows) - max_report} more")
    return lines


def run(cfg: dict, debug_png: str | None = None) -> LabelledImage:
    image_path = cfg.get("image_path")
    if not image_path:
        raise ValueError("image_path must be provided in the config")
    try:
        threshold = float(cfg.get("threshold", 0.5))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"threshold must be a number, got {cfg.get('threshold')!r}") from exc
    if not (0.0 <= threshold <= 1.0):
        print(f"WARNING: threshold={threshold} outside [0,1]; labelling will be degenerate.")
    min_mass = int(cfg.get("min_mass", 1))
    max_report = int(cfg.get("max_report", 20))

    t0 = time.time()
    image = load_rgb(str(image_path))
    t_load = time.time()
    labelled = label_image(image, threshold)
    t_label = time.time()

    n_regions = labelled.region_count
    if n_regions == 0:
        print("WARNING: no foreground regions found.")
    print(f"image={image_path} size={labelled.w}x{labelled.h} threshold={threshold} "
          f"regions={n_regions} aliases={len(labelled.aliases)}")
    for line in format_report(labelled, min_mass=min_mass, max_report=max_report):
        print(line)

    debug_png = debug_png or cfg.get("debug_png")
    if debug_png:
        # matplotlib is only needed for the debug rendering
        from plot_labels import save_label_png
        save_label_png(labelled, str(debug_png), boxes=bool(cfg.get("debug_boxes", False)))
        print(f"NOTE: wrote debug labels to {debug_png}")

    if cfg.get("profile", False):
        print(f"times: load={t_load - t0:.2f}s label={t_label - t_load:.2f}s")
    return labelled


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", required=True)
    ap.add_argument("--debug-png", default=None,
                    help="Write a colour-per-label debug image to this path.")
    args = ap.parse_args()

    cfg = parse_config(args.config)
    run(cfg, debug_png=args.debug_png)


if __name__ == "__main__":
    main()
