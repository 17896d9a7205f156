"""Dense block ID cache over a rectangular slice of the world."""

from __future__ import annotations

import logging
import os
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from .blocks import AIR
from .chunks import SECTION_SIZE, ChunkSection
from .geometry import Rectangle, Vector
from .nbt import FormatError


LOG = logging.getLogger(__name__)

CACHE_MAGIC = b"AMBM"
CACHE_VERSION = 1
_HEADER = struct.Struct(">4sBiiiiii")


@dataclass
class BlockMap:
    """Block IDs for ``offset.x <= x < offset.x + cx``, ``min_y <= y <= max_y``
    and ``offset.z <= z < offset.z + cz``.

    Storage is x-major, then y, then z, so a walk along Z reads consecutive bytes.
    """

    offset: Vector
    cx: int
    cz: int
    min_y: int
    max_y: int
    blocks: bytearray = field(repr=False, default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.cx <= 0 or self.cz <= 0 or self.max_y < self.min_y:
            raise ValueError(f"empty block map: cx={self.cx} cz={self.cz} y={self.min_y}..{self.max_y}")
        if self.offset.y != self.min_y:
            raise ValueError("offset.y must equal min_y")
        size = self.cx * self.cy * self.cz
        if self.blocks is None:
            self.blocks = bytearray(size)
        elif len(self.blocks) != size:
            raise ValueError(f"storage holds {len(self.blocks)} bytes, expected {size}")

    @property
    def cy(self) -> int:
        return self.max_y - self.min_y + 1

    def _index(self, x: int, y: int, z: int) -> Optional[int]:
        dx = x - self.offset.x
        dy = y - self.min_y
        dz = z - self.offset.z
        if not (0 <= dx < self.cx and 0 <= dy < self.cy and 0 <= dz < self.cz):
            return None
        return (dx * self.cy + dy) * self.cz + dz

    def get(self, x: int, y: int, z: int) -> int:
        idx = self._index(x, y, z)
        if idx is None:
            return AIR
        return self.blocks[idx]

    def set(self, x: int, y: int, z: int, block_id: int) -> None:
        if not 0 <= block_id <= 255:
            raise ValueError(f"block id out of range: {block_id}")
        idx = self._index(x, y, z)
        if idx is not None:
            self.blocks[idx] = block_id

    def clone(self) -> "BlockMap":
        return BlockMap(self.offset, self.cx, self.cz, self.min_y, self.max_y, bytearray(self.blocks))

    @classmethod
    def build(cls, sections: Iterable[ChunkSection], bounding_box: Rectangle, min_y: int, max_y: int) -> "BlockMap":
        """Copy every section voxel inside ``bounding_box`` (blocks, inclusive) and ``min_y..max_y``."""
        bm = cls(Vector(bounding_box.x1, min_y, bounding_box.y1), bounding_box.width, bounding_box.height, min_y, max_y)
        ox, oz = bm.offset.x, bm.offset.z
        used = 0
        for section in sections:
            sx, sy, sz = section.position.x, section.position.y, section.position.z
            z0 = max(0, oz - sz)
            z1 = min(SECTION_SIZE, oz + bm.cz - sz)
            if z0 >= z1 or sy > max_y or sy + SECTION_SIZE <= min_y:
                continue
            copied = False
            for lx in range(SECTION_SIZE):
                dx = sx + lx - ox
                if not 0 <= dx < bm.cx:
                    continue
                for ly in range(SECTION_SIZE):
                    dy = sy + ly - min_y
                    if not 0 <= dy < bm.cy:
                        continue
                    start = (dx * bm.cy + dy) * bm.cz + (sz + z0 - oz)
                    row = ly * SECTION_SIZE * SECTION_SIZE + lx
                    bm.blocks[start : start + z1 - z0] = section.blocks[
                        row + z0 * SECTION_SIZE : row + z1 * SECTION_SIZE : SECTION_SIZE
                    ]
                    copied = True
            used += copied
        LOG.info("Built %dx%dx%d block map from %d sections", bm.cx, bm.cy, bm.cz, used)
        return bm

    def save(self, path: Path) -> None:
        tmp = path.with_name(path.name + ".tmp")
        header = _HEADER.pack(
            CACHE_MAGIC, CACHE_VERSION, self.offset.x, self.offset.z, self.cx, self.cz, self.min_y, self.max_y
        )
        try:
            with tmp.open("wb") as f:
                f.write(header)
                f.write(self.blocks)
            os.replace(tmp, path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
        LOG.info("Saved block cache to %s (%d bytes)", path, _HEADER.size + len(self.blocks))

    @classmethod
    def load(cls, path: Path) -> "BlockMap":
        with path.open("rb") as f:
            header = f.read(_HEADER.size)
            if len(header) != _HEADER.size:
                raise FormatError(f"short cache header: {path}")
            magic, version, ox, oz, cx, cz, min_y, max_y = _HEADER.unpack(header)
            if magic != CACHE_MAGIC:
                raise FormatError(f"not a block cache: {path}")
            if version != CACHE_VERSION:
                raise FormatError(f"unsupported block cache version {version}: {path}")
            if cx <= 0 or cz <= 0 or max_y < min_y:
                raise FormatError(f"invalid block cache extents: {path}")
            blocks = bytearray(f.read())
        expected = cx * (max_y - min_y + 1) * cz
        if len(blocks) != expected:
            raise FormatError(f"block cache holds {len(blocks)} bytes, expected {expected}: {path}")
        return cls(Vector(ox, min_y, oz), cx, cz, min_y, max_y, blocks)
