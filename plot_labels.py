from __future__ import annotations

import argparse
import os

import numpy as np
import matplotlib
matplotlib.use("agg")
import matplotlib.pyplot as plt

from image_io import load_rgb
from raster_label import LabelledImage, label_image


def label_color(label: int) -> tuple[int, int, int]:
    # arbitrary multipliers so that neighbouring ids get visibly different colours
    r = ((label + 37) * 791) % 256
    g = ((label + 19) * 567) % 256
    b = ((label + 51) * 354) % 256
    return r, g, b


def labelled_to_rgb(labelled: LabelledImage) -> np.ndarray:
    """Debug rendering of the stored (raw) labels as an (h, w, 3) uint8 image.

    Colours carry no meaning beyond telling labels apart.
    """
    lab = labelled.grid.interior.astype(np.int64)
    r, g, b = label_color(lab)
    return np.stack([r, g, b], axis=2).astype(np.uint8)


def save_label_png(labelled: LabelledImage, path: str, boxes: bool = False) -> None:
    rgb = labelled_to_rgb(labelled)
    outdir = os.path.dirname(path)
    if outdir:
        os.makedirs(outdir, exist_ok=True)
    if not boxes:
        plt.imsave(path, rgb)
        return

    h, w = rgb.shape[:2]
    fig, ax = plt.subplots(figsize=(max(w, 200) / 100.0, max(h, 200) / 100.0), dpi=100)
    ax.imshow(rgb, interpolation='nearest')
    for _, clip in labelled.regions():
        # pixel centres sit on integer coordinates in imshow
        ax.add_patch(plt.Rectangle((clip.min.x - 0.5, clip.min.y - 0.5), clip.width, clip.height,
                                   fill=False, edgecolor='white', linewidth=0.8))
    ax.set_axis_off()
    fig.savefig(path, bbox_inches='tight', pad_inches=0)
    plt.close(fig)


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument('--input', required=True, help='image to label (.png, .npy, ...)')
    ap.add_argument('--threshold', type=float, default=0.5, help='brightness threshold in [0,1]')
    ap.add_argument('--output', default=None, help='output PNG (default <input>_labels.png)')
    ap.add_argument('--boxes', action='store_true', help='draw region bounding boxes')
    args = ap.parse_args()

    output = args.output or (os.path.splitext(args.input)[0] + "_labels.png")
    labelled = label_image(load_rgb(args.input), args.threshold)
    save_label_png(labelled, output, boxes=args.boxes)
    print(f"Wrote {output} ({labelled.region_count} regions)")


if __name__ == '__main__':
    main()
