"""Offline precomputation of border midpoint tables.

Reads a map declaration (JSON with regions and adjacency, or the HTML/JS
source declaring them), estimates the border midpoint of every adjacent
pair once and writes the table {"i-j": {"x": X, "y": Y}} with coordinates
rounded to one decimal. The table can also be patched into a JavaScript source as
``var borderMidpointCache = {...};``.

Usage:
    fourcolor-precompute map.json -o midpoints.json
    fourcolor-precompute map.json --patch activity.html --preview preview.svg
    fourcolor-precompute activity.html --patch
"""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from typing import Dict, List, Mapping, Optional, Sequence

from fourcolor.border import ContiguousRunEstimator, EstimatorSettings
from fourcolor.cache import MidpointCache
from fourcolor.common import (
    OFFLINE_MATCH_THRESHOLD,
    OFFLINE_RUN_GAP,
    OFFLINE_SAMPLES,
    TABLE_DECIMALS,
    Point,
)
from fourcolor.conflicts import build_preview
from fourcolor.mapdata import MapDeclaration, load_map, region_entries_from_js
from fourcolor.shape import FcShape

logger = logging.getLogger(__name__)

CACHE_DECLARATION = re.compile(r"var borderMidpointCache = \{.*?\};", re.DOTALL)
CACHE_RESET = re.compile(r"\r?\n[ \t]*borderMidpointCache = \{\};[ \t]*(?=\r?\n)")


def precompute_midpoints(declaration: MapDeclaration, settings: Optional[EstimatorSettings] = None) -> MidpointCache:
    """
    Border midpoints of all adjacent region pairs of _declaration_.

    Args:
        declaration (MapDeclaration): regions and adjacency
        settings (EstimatorSettings, optional): defaults to the offline settings

    Returns:
        MidpointCache: cache holding one entry per adjacency pair, in adjacency order.
            Pairs involving a region without outline points are skipped.
    """
    estimator = ContiguousRunEstimator(settings)

    def estimate(idx_a: int, idx_b: int) -> Point:
        return estimator.estimate(declaration.shape(idx_a), declaration.shape(idx_b))

    cache = MidpointCache(estimate)
    for idx_a, idx_b in declaration.adjacency_indices():
        if declaration.shape(idx_a).is_empty or declaration.shape(idx_b).is_empty:
            logger.warning(
                "Skipping %s-%s: region without outline",
                declaration.regions[idx_a].id,
                declaration.regions[idx_b].id,
            )
            continue
        cache.get(idx_a, idx_b)
    logger.info("Computed %d border midpoints", len(cache))
    return cache


def format_js_table(table: Mapping[str, Mapping[str, float]]) -> str:
    """Render a table as JavaScript object literal entries 'i-j':{x:X,y:Y} joined by commas."""
    entries = [f"'{key}':{{x:{_js_number(value['x'])},y:{_js_number(value['y'])}}}" for key, value in table.items()]
    return ",".join(entries)


def _js_number(value: float) -> str:
    """Shortest representation, integers without fraction (like JavaScript number output)."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def patch_js_cache(text: str, table: Mapping[str, Mapping[str, float]]) -> str:
    """
    Replace the cache declaration in _text_ by the precomputed _table_.

    Also removes statements resetting the cache to an empty object, since
    border midpoints are geometric constants and stay valid after a reset.

    Raises:
        ValueError: If _text_ contains no cache declaration
    """
    declaration = f"var borderMidpointCache = {{{format_js_table(table)}}};"
    patched, count = CACHE_DECLARATION.subn(lambda _: declaration, text, count=1)
    if not count:
        raise ValueError("No 'var borderMidpointCache = {...};' declaration found")
    return CACHE_RESET.sub("", patched)


def check_region_order(text: str, declaration: MapDeclaration) -> None:
    """
    Verify that the region array in _text_ lists the regions of _declaration_ in the same order.

    Table keys are region indices, so a table only fits sources with identical order.

    Raises:
        ValueError: If the region ids of _text_ differ from those of _declaration_
    """
    regions = region_entries_from_js(text)
    if regions is None:
        logger.warning("No region array in patched source, region order not verified")
        return
    source_ids = [region.id for region in regions]
    declared_ids = [region.id for region in declaration.regions]
    if source_ids != declared_ids:
        raise ValueError(
            f"Region order of patched source ({len(source_ids)} regions) differs from the map "
            f"({len(declared_ids)} regions)"
        )


def build_arg_parser() -> argparse.ArgumentParser:
    """Command line interface of the precomputation tool."""
    parser = argparse.ArgumentParser(description="Precompute border midpoints of adjacent map regions.")
    parser.add_argument(
        "map_file",
        help="map declaration: JSON with 'regions' and 'adjacency', or an HTML/JS source declaring "
        "'var COUNTRIES = [...];' and 'var ADJACENCY = [...];'",
    )
    parser.add_argument("-o", "--output", help="write the midpoint table as JSON to this file (default: stdout)")
    parser.add_argument(
        "--patch",
        metavar="FILE",
        nargs="?",
        const=True,
        help="patch 'var borderMidpointCache = {...};' in FILE (without FILE: in the map source itself)",
    )
    parser.add_argument("--preview", metavar="SVG", help="write an SVG preview with all midpoints marked")
    parser.add_argument("--samples", type=int, default=OFFLINE_SAMPLES, help="sampling intervals per region")
    parser.add_argument(
        "--threshold", type=float, default=OFFLINE_MATCH_THRESHOLD, help="maximum distance of border samples"
    )
    parser.add_argument(
        "--run-gap", type=float, default=OFFLINE_RUN_GAP, help="maximum gap between neighbors of a border run"
    )
    parser.add_argument("--decimals", type=int, default=TABLE_DECIMALS, help="decimal places of coordinates")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the offline precomputation."""
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = EstimatorSettings(samples=args.samples, match_threshold=args.threshold, run_gap=args.run_gap)
        declaration = load_map(args.map_file)
    except (OSError, ValueError) as e:
        logger.error("%s", e)
        return 1

    cache = precompute_midpoints(declaration, settings)
    table: Dict[str, Dict[str, float]] = cache.to_dict(args.decimals)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as file:
            json.dump(table, file, indent=1)
        logger.info("Wrote %s", args.output)
    elif not args.patch and not args.preview:
        json.dump(table, sys.stdout, indent=1)
        sys.stdout.write("\n")

    if args.patch:
        patch_file = args.map_file if args.patch is True else args.patch
        try:
            with open(patch_file, "r", encoding="utf-8") as file:
                text = file.read()
            check_region_order(text, declaration)
            text = patch_js_cache(text, table)
        except (OSError, ValueError) as e:
            logger.error("%s", e)
            return 1
        with open(patch_file, "w", encoding="utf-8") as file:
            file.write(text)
        logger.info("Patched %s", patch_file)

    if args.preview:
        shapes: List[FcShape] = [declaration.shape(idx) for idx in range(len(declaration.regions))]
        computed = [pair for pair in declaration.adjacency_indices() if MidpointCache.pair_key(*pair) in cache]
        page = build_preview(shapes, cache, computed)
        page.save_as(args.preview, pretty=True)
        logger.info("Wrote %s", args.preview)

    return 0


if __name__ == "__main__":
    sys.exit(main())
