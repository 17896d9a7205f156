"""Compare single-shaft and branch mining on a saved world.

The first run decodes ``<world>/region`` into a block cache; later runs reuse it.
Results are written as one table per block type (depth x strategy).
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from .blockmap import BlockMap
from .blocks import Block, Blocks
from .bounds import chunk_box_to_block_box, find_bounding_box
from .chunks import load_sections
from .config import Settings
from .miner import Strategy, random_starts, run_strategy
from .nbt import FormatError
from .report import Table, write_report


LOG = logging.getLogger(__name__)


def build_cache(world_dir: Path, settings: Settings) -> BlockMap:
    sections = load_sections(world_dir)
    chunk_box = find_bounding_box((s.column for s in sections), margin=settings.bounds_margin)
    box = chunk_box_to_block_box(chunk_box)
    LOG.info("Active bounding box: %dx%d %dx%d", box.x1, box.y1, box.x2, box.y2)
    block_map = BlockMap.build(sections, box, settings.min_y, settings.max_y)
    block_map.save(settings.cache_file)
    return block_map


def strategies(settings: Settings) -> List[Strategy]:
    out = [Strategy.single()]
    out.extend(Strategy.branch(d, settings.branches) for d in settings.branch_distances)
    return out


def simulate(block_map: BlockMap, settings: Settings, rng: random.Random) -> Dict[Block, Table]:
    tables: Dict[Block, Table] = {}
    for y in settings.depths:
        LOG.info("Depth: %d", y)
        starts = random_starts(
            block_map, y, settings.iterations, settings.mine_length, rng, margin=settings.start_margin
        )
        for strategy in strategies(settings):
            mined = run_strategy(block_map, settings.mine_length, starts, strategy, per_shaft=True)
            LOG.info(
                "%s: %s: %.1f, %s: %.1f",
                strategy.name,
                Blocks.DIAMOND_ORE.name,
                mined.get(Blocks.DIAMOND_ORE),
                Blocks.LAVA.name,
                mined.get(Blocks.LAVA),
            )
            for block, count in mined:
                tables.setdefault(block, Table()).set(str(y), strategy.name, count)
    return tables


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Estimate diamonds found per lava encounter for branch mining strategies.")
    ap.add_argument("world", help="World save directory (contains region/)")
    ap.add_argument("--cache", default=None, help="Block cache file (default: cache.dat)")
    ap.add_argument("--output", default=None, help="Report file (default: out.txt)")
    ap.add_argument("--rebuild-cache", action="store_true", help="Rebuild the block cache even if it exists")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--iterations", type=int, default=None, help="Random starts per depth")
    ap.add_argument("--mine-length", type=int, default=None)
    ap.add_argument("--branches", type=int, default=None)
    ap.add_argument("--log-level", default=None)
    args = ap.parse_args(sys.argv[1:] if argv is None else argv)

    try:
        settings = Settings.from_env(
            cache_file=args.cache,
            output=args.output,
            seed=args.seed,
            iterations=args.iterations,
            mine_length=args.mine_length,
            branches=args.branches,
            log_level=args.log_level,
        )
    except ValidationError as e:
        print(f"ERROR: invalid settings: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    world_dir = Path(args.world)
    try:
        if args.rebuild_cache or not settings.cache_file.exists():
            LOG.info("Building cache file %s", settings.cache_file)
            build_cache(world_dir, settings)
        LOG.info("Loading cache file %s", settings.cache_file)
        block_map = BlockMap.load(settings.cache_file)
        tables = simulate(block_map, settings, random.Random(settings.seed))
        write_report(settings.output, tables)
    except (OSError, FormatError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    LOG.info("Wrote %s", settings.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
