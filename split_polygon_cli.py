#!/usr/bin/env python3
"""
Command-line polygon splitting.

Usage:
    python split_polygon_cli.py [options]

Options:
    --sides         Number of sides, may be fractional (default: 6)
    --point PX PY   Split point (default: random interior point)
    --grid R C      Split a grid of polygons instead of a single one
    --plot FILE     Save a picture of the result

Example:
    python split_polygon_cli.py --sides 5 --seed 7 --plot pentagon.png
    python split_polygon_cli.py --grid 4 6 --sides 3 --sides-end 8 --plot sweep.png
"""

import sys
import os
import argparse
import logging

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import SplitConfig
from cuts import build_cut_segments
from layout import split_grid
from polygon_splitter import verify_partition
from regular_polygon import regular_polygon


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Generate regular polygons and split them from a point',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --sides 4 --offset 45 --point 0 0
  %(prog)s --sides 7 --seed 3 --plot heptagon.png
  %(prog)s --grid 3 5 --sides 3 --sides-end 7 --seed 1 --plot grid.png
        """
    )
    parser.add_argument('--config', help='Load settings from a JSON config file')
    parser.add_argument('--save-config', metavar='FILE',
                        help='Write the effective settings to a JSON config file')
    parser.add_argument('--sides', type=float,
                        help='Number of sides, may be fractional (default: 6)')
    parser.add_argument('--offset', type=float,
                        help='Rotation of the first vertex in degrees (default: 0)')
    parser.add_argument('--center', type=float, nargs=2, metavar=('X', 'Y'),
                        help='Polygon center / grid origin (default: 0 0)')
    parser.add_argument('--radius', type=float,
                        help='Circumradius (default: 1)')
    parser.add_argument('--point', type=float, nargs=2, metavar=('PX', 'PY'),
                        help='Split point, relative to each cell center in grids')
    parser.add_argument('--seed', type=int,
                        help='Random seed for split points and colours')
    parser.add_argument('--grid', type=int, nargs=2, metavar=('ROWS', 'COLS'),
                        help='Grid size (default: 1 1)')
    parser.add_argument('--spacing', type=float,
                        help='Distance between grid cell centers (default: 2.5)')
    parser.add_argument('--sides-end', type=float,
                        help='Sweep side counts from --sides to this value across the grid')
    parser.add_argument('--colormap', help='Colormap or preset name for --plot (default: tab20)')
    parser.add_argument('--workers', type=int, default=1,
                        help='Worker threads for grids (default: 1)')
    parser.add_argument('--plot', metavar='FILE', help='Save a picture of the pieces')
    parser.add_argument('--verify', action='store_true',
                        help='Check that every split partitions its polygon')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    return parser


def config_from_args(args) -> SplitConfig:
    """Start from the config file (or defaults) and apply command-line overrides."""
    config = SplitConfig.load(args.config) if args.config else SplitConfig()

    if args.sides is not None:
        config.n_sides = args.sides
    if args.offset is not None:
        config.offset_degrees = args.offset
    if args.center is not None:
        config.center_x, config.center_y = args.center
    if args.radius is not None:
        config.radius = args.radius
    if args.point is not None:
        config.split_x, config.split_y = args.point
    if args.seed is not None:
        config.seed = args.seed
    if args.grid is not None:
        config.rows, config.cols = args.grid
    if args.spacing is not None:
        config.spacing = args.spacing
    if args.sides_end is not None:
        config.sides_end = args.sides_end
    if args.colormap is not None:
        config.colormap = args.colormap
    return config


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )

    if args.config and not os.path.exists(args.config):
        print(f"ERROR: Config file not found: {args.config}")
        return 1

    try:
        config = config_from_args(args)
        errors = config.validate()
        if errors:
            for error in errors:
                print(f"ERROR: {error}")
            return 1

        if args.save_config:
            config.save(args.save_config)
            print(f"Saved config to {args.save_config}")

        print(f"Splitting {config.rows} x {config.cols} grid, sides={config.n_sides}"
              + (f"..{config.sides_end}" if config.sides_end is not None else ""))
        cells = split_grid(config, workers=args.workers)

        failures = 0
        for cell in cells:
            result = cell.result
            print(f"Cell {cell.row},{cell.col}: {cell.n_sides:g} sides, "
                  f"{len(result)} pieces ({result.method}, split point {result.location})")
            for i, piece in enumerate(result):
                print(f"  {i}: {len(piece.outer)} vertices, area {piece.area:.6f}")

            if args.verify:
                polygon = regular_polygon(cell.n_sides, config.offset_degrees,
                                          cell.center, config.radius)
                cuts = build_cut_segments(polygon.outer, result.split_point)
                problems = verify_partition(polygon, result, cuts=cuts)
                for problem in problems:
                    print(f"  INVALID: {problem}")
                failures += bool(problems)

        if args.plot:
            from render import plot_cells
            path = plot_cells(cells, args.plot, config.colormap, config.seed)
            print(f"Saved plot to {path}")

        if failures:
            print(f"ERROR: {failures} cell(s) failed verification")
            return 1

    except (ValueError, OSError) as e:
        # PolySplitError and malformed JSON both derive from ValueError
        print(f"ERROR: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
