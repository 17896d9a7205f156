"""Simulated shaft mining and strategy evaluation."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, Iterator, List, Sequence, Tuple, Union

from .blockmap import BlockMap
from .blocks import AIR, Block, block_by_id, block_id_of
from .geometry import Point, Vector


LOG = logging.getLogger(__name__)

# Voxels dug at every step, relative to the shaft position. A two-high tunnel
# would add (0, 1, 0); vertical drift while chasing ore is not modelled.
SHAFT_PROBES: Tuple[Tuple[int, int, int], ...] = ((0, 0, 0),)

NORTH_SOUTH = Point(0, 1)
START_MARGIN = 50


class MinedCounter:
    """Running count of mined blocks per block ID."""

    def __init__(self) -> None:
        self._counts: Dict[int, float] = {}

    def add(self, block: Union[Block, int], amount: float = 1) -> None:
        block_id = block_id_of(block)
        self._counts[block_id] = self._counts.get(block_id, 0) + amount

    def add_all(self, other: "MinedCounter") -> None:
        for block_id, count in other._counts.items():
            self.add(block_id, count)

    def average(self, n: int) -> None:
        if n <= 0:
            raise ValueError(f"cannot average over {n} samples")
        for block_id in self._counts:
            self._counts[block_id] /= n

    def get(self, block: Union[Block, int]) -> float:
        return self._counts.get(block_id_of(block), 0)

    def total(self) -> float:
        return sum(self._counts.values())

    def entries(self) -> List[Tuple[Block, float]]:
        return [(block_by_id(block_id), self._counts[block_id]) for block_id in sorted(self._counts)]

    def __iter__(self) -> Iterator[Tuple[Block, float]]:
        return iter(self.entries())

    def __len__(self) -> int:
        return len(self._counts)

    def to_dict(self) -> Dict[int, float]:
        return {block_id: self._counts[block_id] for block_id in sorted(self._counts)}

    def __repr__(self) -> str:
        body = ", ".join(f"{block.name}: {count:.1f}" for block, count in self.entries())
        return f"MinedCounter({body})"


class Miner:
    """Digs shafts through ``block_map``, which it mutates.

    Hand it a clone; dug voxels are set to air so that crossing shafts never
    count the same block twice.
    """

    def __init__(self, block_map: BlockMap, probes: Sequence[Tuple[int, int, int]] = SHAFT_PROBES):
        self.block_map = block_map
        self.probes = tuple(probes)
        self.mined = MinedCounter()

    def dig(self, x: int, y: int, z: int) -> None:
        block_id = self.block_map.get(x, y, z)
        if block_id == AIR:
            return
        self.mined.add(block_id)
        self.block_map.set(x, y, z, AIR)

    def run(self, start: Vector, direction: Point, length: int) -> MinedCounter:
        """Walk ``length`` steps; step 0 is ``start`` itself."""
        for i in range(length):
            pos = start.step(direction, i)
            for dx, dy, dz in self.probes:
                self.dig(pos.x + dx, pos.y + dy, pos.z + dz)
        return self.mined


@dataclass(frozen=True)
class Strategy:
    name: str
    branch_offset: int
    branches: int

    @classmethod
    def single(cls) -> "Strategy":
        return cls("Single branch", 0, 1)

    @classmethod
    def branch(cls, distance: int, branches: int) -> "Strategy":
        return cls(f"Strategy x+{distance}", distance, branches)

    def shaft_starts(self, start: Vector) -> List[Vector]:
        return [start.offset(dx=i * self.branch_offset) for i in range(self.branches)]


def random_starts(
    block_map: BlockMap,
    y: int,
    count: int,
    mine_length: int,
    rng: random.Random,
    margin: int = START_MARGIN,
) -> List[Vector]:
    """Draw shaft starts that keep ``margin`` blocks from the map edges along the whole run."""
    span_x = block_map.cx - 2 * margin
    span_z = block_map.cz - 2 * margin - mine_length
    if span_x <= 0 or span_z <= 0:
        raise ValueError(
            f"block map {block_map.cx}x{block_map.cz} too small for margin {margin} and mine length {mine_length}"
        )
    return [
        Vector(
            block_map.offset.x + margin + rng.randrange(span_x),
            y,
            block_map.offset.z + margin + rng.randrange(span_z),
        )
        for _ in range(count)
    ]


def run_strategy(
    block_map: BlockMap,
    mine_length: int,
    starts: Sequence[Vector],
    strategy: Strategy,
    direction: Point = NORTH_SOUTH,
    *,
    per_shaft: bool = False,
) -> MinedCounter:
    """Average blocks mined per sample (or per shaft) over ``starts``.

    Every sample runs on its own clone, so ``block_map`` is left untouched.
    """
    if not starts:
        raise ValueError("no start positions")
    total = MinedCounter()
    for start in starts:
        miner = Miner(block_map.clone())
        for shaft_start in strategy.shaft_starts(start):
            miner.run(shaft_start, direction, mine_length)
        total.add_all(miner.mined)
    total.average(len(starts))
    if per_shaft:
        total.average(strategy.branches)
    LOG.debug("%s over %d samples: %r", strategy.name, len(starts), total)
    return total
