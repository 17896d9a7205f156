from __future__ import annotations

import struct
from pathlib import Path

import pytest

from autominer.geometry import Point
from autominer.nbt import FormatError
from autominer.region import SECTOR_BYTES, RegionFile, iter_region_files, parse_region_name
from nbt_builders import nbt_compound, nbt_int, write_region


def test_parse_region_name():
    assert parse_region_name("r.0.0.mca") == Point(0, 0)
    assert parse_region_name("r.-3.12.mca") == Point(-3, 12)


@pytest.mark.parametrize("name", ["r.0.mca", "r.a.b.mca", "x.1.2.mca", "r.1.2.mcr", "r.1.2.3.mca"])
def test_parse_region_name_rejects_bad_names(name):
    with pytest.raises(FormatError):
        parse_region_name(name)


def test_iter_region_files_sorted_and_filtered(tmp_path: Path):
    for name in ("r.1.0.mca", "r.0.0.mca", "notes.txt", "r.0.0.mcr"):
        (tmp_path / name).write_bytes(b"")
    assert [p.name for p in iter_region_files(tmp_path)] == ["r.0.0.mca", "r.1.0.mca"]


@pytest.mark.parametrize("compression", [1, 2, 3])
def test_read_chunk_each_compression(tmp_path: Path, compression: int):
    payload = nbt_compound("", [nbt_int("xPos", 5)])
    path = write_region(tmp_path / "r.0.0.mca", {(3, 4): payload, (31, 31): payload}, compression=compression)
    rf = RegionFile(path)
    assert rf.has_chunk(3, 4)
    assert rf.has_chunk(31, 31)
    assert not rf.has_chunk(4, 3)
    assert rf.read_chunk(3, 4) == payload
    with rf.open_chunk(31, 31) as stream:
        assert stream.read() == payload


def test_slot_out_of_range(tmp_path: Path):
    rf = RegionFile(write_region(tmp_path / "r.0.0.mca", {}))
    with pytest.raises(ValueError):
        rf.has_chunk(32, 0)


def test_missing_chunk_raises_key_error(tmp_path: Path):
    rf = RegionFile(write_region(tmp_path / "r.0.0.mca", {}))
    with pytest.raises(KeyError):
        rf.read_chunk(0, 0)


def test_unknown_compression_type(tmp_path: Path):
    path = write_region(tmp_path / "r.0.0.mca", {(0, 0): b"abc"}, compression=3)
    raw = bytearray(path.read_bytes())
    raw[2 * SECTOR_BYTES + 4] = 9
    path.write_bytes(bytes(raw))
    with pytest.raises(FormatError, match="compression type 9"):
        RegionFile(path).read_chunk(0, 0)


def test_corrupt_zlib_payload(tmp_path: Path):
    path = write_region(tmp_path / "r.0.0.mca", {(0, 0): b"abc" * 100}, compression=2)
    raw = bytearray(path.read_bytes())
    raw[2 * SECTOR_BYTES + 5 : 2 * SECTOR_BYTES + 9] = b"\x00\x00\x00\x00"
    path.write_bytes(bytes(raw))
    with pytest.raises(FormatError, match="corrupt chunk"):
        RegionFile(path).read_chunk(0, 0)


def test_bad_chunk_length(tmp_path: Path):
    path = write_region(tmp_path / "r.0.0.mca", {(0, 0): b"abc"}, compression=3)
    raw = bytearray(path.read_bytes())
    raw[2 * SECTOR_BYTES : 2 * SECTOR_BYTES + 4] = struct.pack(">I", 10 * SECTOR_BYTES)
    path.write_bytes(bytes(raw))
    with pytest.raises(FormatError, match="bad chunk length"):
        RegionFile(path).read_chunk(0, 0)


def test_short_header(tmp_path: Path):
    path = tmp_path / "r.0.0.mca"
    path.write_bytes(b"\x00" * 100)
    with pytest.raises(FormatError, match="short region header"):
        RegionFile(path)
