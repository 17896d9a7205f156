"""Anvil region (.mca) container files."""

from __future__ import annotations

import gzip
import io
import re
import struct
import zlib
from pathlib import Path
from typing import BinaryIO, Iterator

from .geometry import Point
from .nbt import FormatError


SECTOR_BYTES = 4096
REGION_HEADER_BYTES = SECTOR_BYTES * 2
REGION_CHUNKS = 32

COMPRESSION_GZIP = 1
COMPRESSION_ZLIB = 2
COMPRESSION_NONE = 3

REGION_NAME_RE = re.compile(r"^r\.(-?\d+)\.(-?\d+)\.mca$")


def parse_region_name(name: str) -> Point:
    """``r.-1.2.mca`` -> ``Point(-1, 2)`` (region offset in 32-chunk units)."""
    m = REGION_NAME_RE.match(name)
    if not m:
        raise FormatError(f"not a region file name: {name!r}")
    return Point(int(m.group(1)), int(m.group(2)))


def iter_region_files(region_dir: Path) -> Iterator[Path]:
    for path in sorted(region_dir.iterdir()):
        if path.is_file() and path.name.endswith(".mca"):
            yield path


class RegionFile:
    def __init__(self, path: Path):
        self.path = path
        with path.open("rb") as f:
            hdr = f.read(REGION_HEADER_BYTES)
            f.seek(0, io.SEEK_END)
            self.size = f.tell()
        if len(hdr) < REGION_HEADER_BYTES:
            raise FormatError(f"short region header: {path}")
        self._locations = hdr[:SECTOR_BYTES]

    def _location(self, x: int, z: int) -> int:
        if not (0 <= x < REGION_CHUNKS and 0 <= z < REGION_CHUNKS):
            raise ValueError(f"chunk slot out of range: ({x}, {z})")
        idx = x + z * REGION_CHUNKS
        loc = self._locations[idx * 4 : idx * 4 + 4]
        return (loc[0] << 16) | (loc[1] << 8) | loc[2]

    def has_chunk(self, x: int, z: int) -> bool:
        return self._location(x, z) != 0

    def read_chunk(self, x: int, z: int) -> bytes:
        """Return the decompressed NBT payload of slot ``(x, z)``."""
        offset = self._location(x, z)
        if offset == 0:
            raise KeyError(f"no chunk at ({x}, {z}) in {self.path}")
        pos = offset * SECTOR_BYTES
        if pos + 5 > self.size:
            raise FormatError(f"chunk ({x}, {z}) points past end of {self.path}")
        with self.path.open("rb") as f:
            f.seek(pos)
            length = struct.unpack(">I", f.read(4))[0]
            if length < 1 or pos + 4 + length > self.size:
                raise FormatError(f"bad chunk length {length} at ({x}, {z}) in {self.path}")
            ctype = f.read(1)[0]
            data = f.read(length - 1)
        try:
            if ctype == COMPRESSION_GZIP:
                return gzip.decompress(data)
            if ctype == COMPRESSION_ZLIB:
                return zlib.decompress(data)
        except (OSError, EOFError, zlib.error) as exc:
            raise FormatError(f"corrupt chunk ({x}, {z}) in {self.path}: {exc}") from exc
        if ctype == COMPRESSION_NONE:
            return data
        raise FormatError(f"unknown chunk compression type {ctype} in {self.path}")

    def open_chunk(self, x: int, z: int) -> BinaryIO:
        return io.BytesIO(self.read_chunk(x, z))
