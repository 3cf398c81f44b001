"""
plot_debug.py
=============
Matplotlib renderer for the constellation galaxy generator.

Shows:
  • Galaxy disk boundary (dashed)
  • Stars as white points
  • Nearest-neighbour edges (white), group-merge edges (cyan) and
    inter-constellation links (translucent red)

Usage
-----
    # Default: use ./output/ written by run_generate.py
    python plot_debug.py

    # Save to PNG instead of opening an interactive window
    python plot_debug.py --save galaxy.png

    # Save as SVG (vector, scales to any size)
    python plot_debug.py --svg

    # Generate in-process and press SPACE to regenerate
    python plot_debug.py --interactive --seed 3
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import os
from typing import Optional

import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
import numpy as np
import pandas as pd
from matplotlib.collections import LineCollection

from galaxygen import GalaxyConfig, GalaxyGenerator


BG = "#09090f"

EDGE_COLORS = {
    "nearest":     (1.0, 1.0, 1.0, 0.5),
    "group_merge": (0.0, 1.0, 1.0, 0.5),
    "inter":       (1.0, 0.0, 0.0, 0.5),
}


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="plot_debug.py",
        description="Debug visualisation for the constellation galaxy generator.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # Output location
    p.add_argument("--out_dir",  default="output",
                   help="Directory containing stars.csv and edges.csv.")
    p.add_argument("--save",     default=None, metavar="FILE",
                   help="Save figure to FILE (png/pdf/svg) instead of displaying.")
    p.add_argument("--svg",      nargs="?", const="galaxy.svg", default=None,
                   metavar="FILE",
                   help="Save figure as SVG (vector format).  "
                        "FILE defaults to 'galaxy.svg' when omitted.  "
                        "Overrides --save when both are given.")

    # Cosmetic toggles
    p.add_argument("--no_edges", action="store_true",
                   help="Skip drawing edges.")
    p.add_argument("--star_size", type=float, default=18.0,
                   help="Scatter marker size.")
    p.add_argument("--edge_width", type=float, default=1.0,
                   help="Edge line width in points.")

    # Auto-loaded from params.json when present; explicit CLI values win.
    p.add_argument("--galaxy_radius", type=float, default=None)

    # Interactive mode
    p.add_argument("--interactive", action="store_true",
                   help="Generate in-process; press SPACE to regenerate.")
    p.add_argument("--seed", type=int, default=7,
                   help="Seed for --interactive mode.")

    return p


# ---------------------------------------------------------------------------
# Plot
# ---------------------------------------------------------------------------

def draw_frames(
    ax: plt.Axes,
    stars: pd.DataFrame,
    edges: pd.DataFrame,
    galaxy_radius: float,
    *,
    no_edges: bool = False,
    star_size: float = 18.0,
    edge_width: float = 1.0,
) -> None:
    """Draw star and edge tables (as produced by ``Galaxy.to_frames``) on *ax*."""
    ax.clear()
    ax.set_aspect("equal", adjustable="datalim")
    ax.set_facecolor(BG)

    # Constellations extend past the disk by up to their radius
    reach = galaxy_radius
    if len(stars) > 0:
        reach = max(reach, float(np.abs(stars[["x", "y"]].values).max()))
    margin = reach * 1.08
    ax.set_xlim(-margin, margin)
    ax.set_ylim(-margin, margin)
    ax.autoscale(False)

    # ── Disk boundary ─────────────────────────────────────────────────────
    ax.add_patch(plt.Circle(
        (0, 0), galaxy_radius,
        fill=False, edgecolor="#3a3a5c", linewidth=1.0, linestyle="--", zorder=2,
    ))

    # ── Edges ─────────────────────────────────────────────────────────────
    if not no_edges and len(edges) > 0:
        xy  = stars.set_index("id")[["x", "y"]]
        src = xy.loc[edges["source"].values].values
        tgt = xy.loc[edges["target"].values].values
        segs = np.stack([src, tgt], axis=1)
        colors = [EDGE_COLORS.get(k, EDGE_COLORS["nearest"]) for k in edges["kind"]]
        ax.add_collection(
            LineCollection(segs, colors=colors, linewidths=edge_width, zorder=5)
        )

    # ── Stars ─────────────────────────────────────────────────────────────
    if len(stars) > 0:
        ax.scatter(
            stars["x"].values, stars["y"].values,
            c="white", s=star_size, linewidths=0, zorder=6,
        )

    # ── Decorations ───────────────────────────────────────────────────────
    n_const = int(stars["constellation"].nunique()) if len(stars) > 0 else 0
    n_links = int((edges["kind"] == "inter").sum()) if len(edges) > 0 else 0
    ax.set_title(
        f"Galaxy  —  {n_const} constellations  |  {len(stars)} stars  |  "
        f"{n_links} links",
        color="white", fontsize=11, pad=10,
    )
    for spine in ax.spines.values():
        spine.set_edgecolor("#2a2a3a")
    ax.tick_params(colors="#555566", labelsize=7)

    legend_patches = [
        mpatches.Patch(facecolor="#3a3a5c", label=f"Galaxy disk (r={galaxy_radius})"),
    ]
    if not no_edges:
        legend_patches += [
            mpatches.Patch(facecolor=EDGE_COLORS["nearest"], label="Nearest"),
            mpatches.Patch(facecolor=EDGE_COLORS["group_merge"], label="Group merge"),
            mpatches.Patch(facecolor=EDGE_COLORS["inter"], label="Link"),
        ]
    ax.legend(
        handles=legend_patches,
        loc="upper right",
        fontsize=8,
        facecolor="#111122",
        edgecolor="#333355",
        labelcolor="white",
    )


def _resolve_galaxy_radius(args: argparse.Namespace) -> float:
    if getattr(args, "galaxy_radius", None) is not None:
        return args.galaxy_radius
    params_path = os.path.join(args.out_dir, "params.json")
    if os.path.exists(params_path):
        with open(params_path) as f:
            saved = json.load(f)
        return float(saved.get("galaxy_radius", GalaxyConfig.galaxy_radius))
    return GalaxyConfig.galaxy_radius


def draw_galaxy(args: argparse.Namespace) -> plt.Figure:
    """Load CSV files from ``args.out_dir`` and draw the galaxy plot."""
    stars_path = os.path.join(args.out_dir, "stars.csv")
    edges_path = os.path.join(args.out_dir, "edges.csv")

    if not os.path.exists(stars_path):
        raise FileNotFoundError(
            f"stars.csv not found in '{args.out_dir}'.  "
            "Run run_generate.py first."
        )

    stars = pd.read_csv(stars_path)
    edges = (pd.read_csv(edges_path) if os.path.exists(edges_path)
             else pd.DataFrame(columns=["source", "target", "length", "kind"]))

    fig, ax = plt.subplots(figsize=(10, 10))
    fig.patch.set_facecolor(BG)
    draw_frames(
        ax, stars, edges, _resolve_galaxy_radius(args),
        no_edges=args.no_edges,
        star_size=args.star_size, edge_width=args.edge_width,
    )
    return fig


def interactive(args: argparse.Namespace) -> None:
    """Show a live window; SPACE draws a fresh galaxy."""
    cfg = GalaxyConfig(seed=args.seed, write_gexf=False)
    if args.galaxy_radius is not None:
        cfg = dataclasses.replace(cfg, galaxy_radius=args.galaxy_radius)
    gen = GalaxyGenerator(cfg)

    fig, ax = plt.subplots(figsize=(10, 10))
    fig.patch.set_facecolor(BG)

    def redraw() -> None:
        stars, edges = gen.regenerate().to_frames()
        draw_frames(
            ax, stars, edges, cfg.galaxy_radius,
            no_edges=args.no_edges,
            star_size=args.star_size, edge_width=args.edge_width,
        )
        fig.canvas.draw_idle()

    def on_key(event) -> None:
        if event.key == " ":
            redraw()

    fig.canvas.mpl_connect("key_press_event", on_key)
    redraw()
    plt.show()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: Optional[list] = None) -> None:
    parser = build_parser()
    args   = parser.parse_args(argv)

    if args.interactive:
        interactive(args)
        return

    fig = draw_galaxy(args)

    if args.svg:
        fig.savefig(args.svg, format="svg", bbox_inches="tight",
                    facecolor=fig.get_facecolor())
        print(f"Saved figure to {args.svg}")
    elif args.save:
        fig.savefig(args.save, dpi=150, bbox_inches="tight",
                    facecolor=fig.get_facecolor())
        print(f"Saved figure to {args.save}")
    else:
        plt.show()


if __name__ == "__main__":
    main()
