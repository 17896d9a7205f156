"""Legacy numeric block IDs (pre-flattening Anvil worlds)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Union


AIR = 0


@dataclass(frozen=True, order=True)
class Block:
    id: int
    name: str


_NAMES: Dict[int, str] = {
    0: "Air",
    1: "Stone",
    2: "Grass",
    3: "Dirt",
    4: "Cobblestone",
    5: "Wood Planks",
    7: "Bedrock",
    8: "Flowing Water",
    9: "Water",
    10: "Flowing Lava",
    11: "Lava",
    12: "Sand",
    13: "Gravel",
    14: "Gold Ore",
    15: "Iron Ore",
    16: "Coal Ore",
    17: "Wood",
    21: "Lapis Lazuli Ore",
    24: "Sandstone",
    30: "Cobweb",
    48: "Moss Stone",
    49: "Obsidian",
    50: "Torch",
    52: "Monster Spawner",
    54: "Chest",
    56: "Diamond Ore",
    66: "Rail",
    73: "Redstone Ore",
    74: "Glowing Redstone Ore",
    82: "Clay",
    85: "Fence",
    97: "Monster Egg",
    98: "Stone Bricks",
    129: "Emerald Ore",
}

BLOCKS: Dict[int, Block] = {block_id: Block(block_id, name) for block_id, name in _NAMES.items()}
_BY_NAME: Dict[str, Block] = {b.name.lower(): b for b in BLOCKS.values()}


class Blocks:
    AIR = BLOCKS[0]
    STONE = BLOCKS[1]
    BEDROCK = BLOCKS[7]
    WATER = BLOCKS[9]
    FLOWING_LAVA = BLOCKS[10]
    LAVA = BLOCKS[11]
    GRAVEL = BLOCKS[13]
    GOLD_ORE = BLOCKS[14]
    IRON_ORE = BLOCKS[15]
    COAL_ORE = BLOCKS[16]
    LAPIS_ORE = BLOCKS[21]
    DIAMOND_ORE = BLOCKS[56]
    REDSTONE_ORE = BLOCKS[73]
    EMERALD_ORE = BLOCKS[129]


def block_by_id(block_id: int) -> Block:
    block = BLOCKS.get(block_id)
    if block is None:
        return Block(block_id, f"Unknown ({block_id})")
    return block


def block_by_name(name: str) -> Optional[Block]:
    return _BY_NAME.get(name.strip().lower())


def block_id_of(block: Union[Block, int]) -> int:
    if isinstance(block, Block):
        return block.id
    return int(block)
