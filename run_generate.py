"""
run_generate.py
===============
CLI entrypoint for the constellation galaxy generator.

All parameters are optional; unspecified parameters fall back to the defaults
defined in ``GalaxyConfig``.

Quick start
-----------
    python run_generate.py

With custom parameters (matching the default preset)::

    python run_generate.py \\
        --min_star_distance 20 \\
        --min_stars 5 --max_stars 10 \\
        --min_constellation_radius 80 --max_constellation_radius 160 \\
        --min_constellations 5 --max_constellations 10 \\
        --galaxy_radius 300 \\
        --connection_threshold 300 \\
        --seed 7 \\
        --out_dir output

Then visualise the result::

    python plot_debug.py
"""

import argparse
import json
import os
import sys

from galaxygen import GalaxyConfig, GalaxyConfigError, GalaxyGenerator, EmptyGalaxyError


def build_parser() -> argparse.ArgumentParser:
    defaults = GalaxyConfig()
    p = argparse.ArgumentParser(
        prog="run_generate.py",
        description=(
            "Procedural constellation galaxy generator.\n"
            "Produces stars.csv, edges.csv, params.json and (optionally) "
            "graph.gexf in OUT_DIR."
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # ── Star parameters ───────────────────────────────────────────────────
    p.add_argument(
        "--min_star_distance", type=float, default=defaults.min_star_distance,
        metavar="D",
        help="Minimum spacing between two stars of one constellation.",
    )
    p.add_argument(
        "--min_stars", type=int, default=defaults.min_stars,
        metavar="N",
        help="Minimum stars per constellation (inclusive).",
    )
    p.add_argument(
        "--max_stars", type=int, default=defaults.max_stars,
        metavar="N",
        help="Maximum stars per constellation (inclusive).",
    )

    # ── Constellation parameters ──────────────────────────────────────────
    p.add_argument(
        "--min_constellation_radius", type=float,
        default=defaults.min_constellation_radius,
        metavar="R",
        help="Lower bound of the sampled constellation radius.",
    )
    p.add_argument(
        "--max_constellation_radius", type=float,
        default=defaults.max_constellation_radius,
        metavar="R",
        help="Upper bound (exclusive) of the sampled constellation radius.",
    )
    p.add_argument(
        "--min_constellations", type=int, default=defaults.min_constellations,
        metavar="N",
        help="Minimum constellations in the galaxy (inclusive, best-effort).",
    )
    p.add_argument(
        "--max_constellations", type=int, default=defaults.max_constellations,
        metavar="N",
        help="Maximum constellations in the galaxy (inclusive).",
    )

    # ── Galaxy parameters ─────────────────────────────────────────────────
    p.add_argument(
        "--galaxy_radius", type=float, default=defaults.galaxy_radius,
        metavar="R",
        help="Radius of the disk in which constellation centres are placed.",
    )
    p.add_argument(
        "--connection_threshold", type=float,
        default=defaults.connection_threshold,
        metavar="D",
        help=(
            "Centre distance at which the chance of an extra link between two "
            "constellations drops to zero (falls off linearly until then)."
        ),
    )

    # ── Reproducibility ───────────────────────────────────────────────────
    p.add_argument(
        "--seed", type=int, default=defaults.seed,
        metavar="S",
        help="Random seed for reproducible output.",
    )

    # ── Output ───────────────────────────────────────────────────────────
    p.add_argument(
        "--out_dir", type=str, default=defaults.out_dir,
        metavar="DIR",
        help="Directory to write output files (created if absent).",
    )
    p.add_argument(
        "--no_gexf", action="store_true",
        help="Skip GEXF export (useful when networkx is not installed).",
    )

    return p


def config_from_args(args: argparse.Namespace) -> GalaxyConfig:
    return GalaxyConfig(
        min_star_distance        = args.min_star_distance,
        min_stars                = args.min_stars,
        max_stars                = args.max_stars,
        min_constellation_radius = args.min_constellation_radius,
        max_constellation_radius = args.max_constellation_radius,
        min_constellations       = args.min_constellations,
        max_constellations       = args.max_constellations,
        galaxy_radius            = args.galaxy_radius,
        connection_threshold     = args.connection_threshold,
        seed                     = args.seed,
        out_dir                  = args.out_dir,
        write_gexf               = not args.no_gexf,
    )


def main(argv=None) -> int:
    parser = build_parser()
    args   = parser.parse_args(argv)
    cfg    = config_from_args(args)

    # Print config so the user can confirm parameters before waiting
    print("Configuration")
    print("─" * 40)
    for field in cfg.__dataclass_fields__:
        print(f"  {field:<26} = {getattr(cfg, field)}")
    print()

    try:
        GalaxyGenerator(cfg).run()
    except GalaxyConfigError as exc:
        parser.error(str(exc))
    except EmptyGalaxyError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    # Persist generation parameters so plot_debug.py can read them automatically
    params_path = os.path.join(cfg.out_dir, "params.json")
    params = {field: getattr(cfg, field) for field in cfg.__dataclass_fields__}
    with open(params_path, "w") as f:
        json.dump(params, f, indent=2)
    print(f"Wrote {params_path}")

    print(
        f"\nNext steps:\n"
        f"  • Debug plot : python plot_debug.py --out_dir {cfg.out_dir}\n"
        f"  • Gephi      : import {cfg.out_dir}/graph.gexf"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
