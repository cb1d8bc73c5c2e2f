"""
Distance Field Plotter for Tiled Lattices.
"""
import argparse
import sys
from pathlib import Path

import matplotlib.colors as mcolors
import matplotlib.pyplot as plt
import numpy as np

SRC = Path(__file__).resolve().parents[1]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from periodic_reach import UNREACHED, bfs, utils
from periodic_reach.counting import parity_mask
from periodic_reach.distance import windowed_field


def render_field(field, output_path, steps=None, mode="distance", cmap="viridis", tile=None):
    distances = field.distances
    reached = distances != UNREACHED
    print(f"Window: {field.window.height}x{field.window.width}, "
          f"{int(reached.sum()):,} cells reached, max distance {field.max_distance()}")

    fig, ax = plt.subplots(figsize=(10, 10))

    if mode == "distance":
        grid = np.ma.masked_where(~reached, distances.astype(np.float64))
        norm = mcolors.Normalize(vmin=0, vmax=max(field.max_distance(), 1))
        title_mode = "Shortest Distance"
    elif mode == "reachable":
        if steps is None:
            raise ValueError("mode 'reachable' needs --steps")
        hits = reached & (distances <= steps) & parity_mask(field.window, field.source, steps % 2)
        print(f"Reachable in exactly {steps} steps: {int(hits.sum()):,}")
        grid = np.ma.masked_where(~hits, np.ones(distances.shape))
        norm = mcolors.Normalize(vmin=0, vmax=1)
        title_mode = f"Reachable in {steps} Steps"
    else:
        raise ValueError(f"Unknown mode: {mode}")

    im = ax.imshow(grid, cmap=cmap, norm=norm, interpolation="nearest")
    if mode == "distance":
        plt.colorbar(im, label="Steps from source")

    # Tile boundaries help read off the periodic structure
    if tile is not None and field.toroidal:
        first_row = (-field.window.top) % tile
        first_col = (-field.window.left) % tile
        for r in range(first_row, field.window.height, tile):
            ax.axhline(r - 0.5, color="white", linewidth=0.5, alpha=0.6)
        for c in range(first_col, field.window.width, tile):
            ax.axvline(c - 0.5, color="white", linewidth=0.5, alpha=0.6)

    ax.axis("off")
    ax.set_title(f"{title_mode}\nsource {field.source}, toroidal={field.toroidal}")

    if output_path:
        plt.savefig(output_path, dpi=200, bbox_inches="tight")
        print(f"Saved to {output_path}")

    plt.close(fig)


def main():
    parser = argparse.ArgumentParser(description="Distance Field Plotter")
    parser.add_argument("file", help="Grid file, or .npz written by --save-field")
    parser.add_argument("--radius", type=int, default=None,
                        help="Explore the tiling within this many steps of the start (default: grid only)")
    parser.add_argument("--steps", type=int, default=None, help="Budget for 'reachable' mode")
    parser.add_argument("--mode", choices=["distance", "reachable"], default="distance")
    parser.add_argument("--cmap", default="viridis", help="Matplotlib colormap (default: viridis)")
    parser.add_argument("--save-field", default=None, help="Also store the field as .npz")
    parser.add_argument("--out", default=None, help="Output filename")

    args = parser.parse_args()

    input_path = Path(args.file)
    tile = None
    if input_path.suffix == ".npz":
        field = utils.load_field(input_path)
    else:
        lattice = utils.read_grid(input_path)
        tile = lattice.width
        if args.radius is None:
            field = bfs(lattice, lattice.start)
        else:
            field = windowed_field(lattice, args.radius)

    if args.save_field:
        utils.save_field(args.save_field, field)
        print(f"Field saved to {args.save_field}")

    if args.out is None:
        out_path = input_path.parent / (input_path.stem + f"_{args.mode}.png")
    else:
        out_path = args.out

    render_field(field, out_path, args.steps, args.mode, args.cmap, tile)


if __name__ == "__main__":
    main()
