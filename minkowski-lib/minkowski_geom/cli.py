"""
Command line entry point.

Reads a JSON file holding two inputs ``[A, B]`` and prints the requested Minkowski computation
as JSON. The inputs are vertex lists, or rows of 0/1 pixels for the ``mask`` command.
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import matplotlib.pyplot as plt
import numpy as np

from minkowski_geom.config import EngineConfig, configure_logging
from minkowski_geom.convex import convex_sum
from minkowski_geom.difference import polygon_difference
from minkowski_geom.errors import GeometryError
from minkowski_geom.geometry import ConvexBoundary, PieceBoundary, SumBoundary, minkowski_sum, plot_boundary
from minkowski_geom.raster import raster_difference
from minkowski_geom.vector import as_polygon

log = logging.getLogger(__name__)


def _load_pair(path: str):
    """
    Load a JSON file holding a list of two inputs.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the JSON is invalid or is not a list of two
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    try:
        data = json.loads(p.read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, list) or len(data) != 2:
        raise ValueError(f"Expected a list of two inputs in {path}")
    return data


def load_polygons(path: str):
    """
    Load the two input polygons.

    Args:
        path: Path to a JSON file ``[A, B]`` of vertex lists

    Returns:
        The two polygons as (N, 2) arrays
    """
    a, b = _load_pair(path)
    return as_polygon(a, 'A'), as_polygon(b, 'B')


def load_masks(path: str):
    """
    Load the two input masks.

    Args:
        path: Path to a JSON file ``[A, B]`` of 0/1 rows

    Returns:
        The two masks as boolean arrays
    """
    a, b = _load_pair(path)
    try:
        return np.array(a, dtype=float) != 0, np.array(b, dtype=float) != 0
    except (TypeError, ValueError) as e:
        raise ValueError(f"Masks in {path} must be rectangular lists of numbers") from e


def _run_sum(a, b, config: EngineConfig) -> Dict[str, Any]:
    boundary = minkowski_sum(a, b)
    if isinstance(boundary, ConvexBoundary):
        return {'kind': boundary.kind, 'loops': [{'solid': True, 'vertices': boundary.polygon.tolist()}]}
    return {
        'kind': boundary.kind,
        'loops': [{'solid': l.solid, 'vertices': l.vertices.tolist()} for l in boundary.loops],
    }


def _run_convex(a, b, config: EngineConfig) -> Dict[str, Any]:
    return {'kind': 'convex', 'vertices': convex_sum(a, b).tolist()}


def _run_diff(a, b, config: EngineConfig) -> Dict[str, Any]:
    result = polygon_difference(a, b)
    return {
        'kind': 'pieces',
        'pieces': [p.tolist() for p in result.pieces],
        'closest': result.closest.tolist(),
        'overlapping': result.overlapping,
        'distance': result.distance,
    }


def _run_mask(a, b, config: EngineConfig) -> Dict[str, Any]:
    result = raster_difference(a, b, config=config)
    return {
        'kind': 'mask',
        'mask': result.mask.astype(int).tolist(),
        'origin': list(result.origin),
        'overlapping': bool(result.mask[result.origin]),
    }


_COMMANDS = {'sum': _run_sum, 'convex': _run_convex, 'diff': _run_diff, 'mask': _run_mask}


def _plot(command: str, a, b, path: str, config: EngineConfig):
    fig, ax = plt.subplots()
    if command == 'mask':
        result = raster_difference(a, b, config=config)
        ax.imshow(result.mask, cmap='Greys', origin='upper')
        ax.plot(result.origin[1], result.origin[0], 'r+')
    else:
        if command == 'diff':
            boundary: SumBoundary = PieceBoundary(polygon_difference(a, b).pieces)
        elif command == 'convex':
            boundary = ConvexBoundary(convex_sum(a, b))
        else:
            boundary = minkowski_sum(a, b)
        plot_boundary(boundary, ax=ax)
        ax.set_aspect('equal')
    fig.savefig(path)
    plt.close(fig)
    log.info('figure written to %s', path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='minkowski',
        description='Minkowski sum and difference of two polygons or two pixel masks',
    )
    parser.add_argument('command', nargs='?', choices=sorted(_COMMANDS), default='sum',
                        help='computation to run (default: sum)')
    parser.add_argument('input', help='JSON file holding [A, B], vertex lists or 0/1 mask rows for mask')
    parser.add_argument('--plot', metavar='PATH', help='save a figure of the result')
    parser.add_argument('--debug', action='store_true', help='enable debug logging')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = EngineConfig.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if args.debug:
        config = replace(config, debug=True)
    configure_logging(config)

    try:
        a, b = load_masks(args.input) if args.command == 'mask' else load_polygons(args.input)
        result = _COMMANDS[args.command](a, b, config)
        if args.plot:
            _plot(args.command, a, b, args.plot, config)
    except (FileNotFoundError, ValueError, GeometryError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result))
    return 0


if __name__ == '__main__':
    sys.exit(main())
