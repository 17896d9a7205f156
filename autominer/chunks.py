"""Extract raw block sections from the chunks of a world save."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .geometry import Point, Vector
from .nbt import TAG_BYTE, TAG_BYTE_ARRAY, FormatError, TagVisitor, Visit, walk
from .region import REGION_CHUNKS, RegionFile, iter_region_files, parse_region_name


LOG = logging.getLogger(__name__)

SECTION_SIZE = 16
SECTION_VOLUME = SECTION_SIZE ** 3


@dataclass(frozen=True)
class ChunkSection:
    """A 16x16x16 cube of block IDs; ``position`` is its minimum corner in blocks."""

    position: Vector
    blocks: bytes

    @property
    def column(self) -> Point:
        return Point(self.position.x // SECTION_SIZE, self.position.z // SECTION_SIZE)


class SectionCollector(TagVisitor):
    """Walks ``Level.Sections`` of one chunk and skips everything else."""

    def __init__(self, region: Point, chunk_x: int, chunk_z: int):
        self.base_x = (region.x * REGION_CHUNKS + chunk_x) * SECTION_SIZE
        self.base_z = (region.y * REGION_CHUNKS + chunk_z) * SECTION_SIZE
        self.sections: List[ChunkSection] = []
        self._depth = 0
        self._in_sections = False
        self._in_section = False
        self._y: Optional[int] = None
        self._blocks: Optional[bytes] = None

    def enter_compound(self, name):
        if self._in_section:
            return Visit.SKIP
        if self._in_sections and name is None:
            self._in_section = True
            self._y = None
            self._blocks = None
        elif not (self._depth == 0 or (self._depth == 1 and name == "Level")):
            return Visit.SKIP
        self._depth += 1
        return Visit.DESCEND

    def exit_compound(self, name):
        self._depth -= 1
        if not self._in_section:
            return
        self._in_section = False
        if self._blocks is None:
            return
        if self._y is None:
            raise FormatError("section without Y")
        self.sections.append(
            ChunkSection(Vector(self.base_x, self._y * SECTION_SIZE, self.base_z), self._blocks)
        )

    def enter_list(self, name, element_tag, length):
        if self._in_section or self._depth != 2 or name != "Sections":
            return Visit.SKIP
        self._in_sections = True
        return Visit.DESCEND

    def exit_list(self, name):
        self._in_sections = False

    def value(self, name, tag, value):
        if not self._in_section:
            return Visit.DESCEND
        if name == "Y" and tag == TAG_BYTE:
            self._y = value
        elif name == "Blocks" and tag == TAG_BYTE_ARRAY:
            if len(value) != SECTION_VOLUME:
                raise FormatError(f"Blocks array has {len(value)} entries, expected {SECTION_VOLUME}")
            self._blocks = value
        return Visit.DESCEND


def read_region_sections(path: Path) -> List[ChunkSection]:
    region = parse_region_name(path.name)
    rf = RegionFile(path)
    out: List[ChunkSection] = []
    for z in range(REGION_CHUNKS):
        for x in range(REGION_CHUNKS):
            if not rf.has_chunk(x, z):
                continue
            collector = SectionCollector(region, x, z)
            with rf.open_chunk(x, z) as stream:
                walk(stream, collector)
            out.extend(collector.sections)
    return out


def load_sections(world_dir: Path) -> List[ChunkSection]:
    """Collect every block section under ``<world_dir>/region``.

    A region file that fails to decode is logged and skipped as a whole.
    """
    region_dir = world_dir / "region"
    if not region_dir.is_dir():
        raise FileNotFoundError(f"missing region directory: {region_dir}")

    sections: List[ChunkSection] = []
    files = skipped = 0
    for path in iter_region_files(region_dir):
        files += 1
        try:
            found = read_region_sections(path)
        except FormatError as exc:
            skipped += 1
            LOG.warning("Skipping region file %s: %s", path.name, exc)
            continue
        LOG.debug("Read %d sections from %s", len(found), path.name)
        sections.extend(found)
    LOG.info("Loaded %d sections from %d region files (%d skipped)", len(sections), files, skipped)
    return sections
