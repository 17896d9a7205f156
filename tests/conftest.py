from __future__ import annotations

import sys
from pathlib import Path

import pytest

from autominer.nbt import TagVisitor, Visit

TESTS = Path(__file__).resolve().parent
if str(TESTS) not in sys.path:
    sys.path.insert(0, str(TESTS))

from nbt_builders import chunk_nbt, section_blocks, write_region  # noqa: E402


class EventRecorder(TagVisitor):
    def __init__(self, skip=(), abort=()):
        self.events = []
        self.skip = set(skip)
        self.abort = set(abort)

    def _signal(self, name):
        if name in self.abort:
            return Visit.ABORT
        if name in self.skip:
            return Visit.SKIP
        return Visit.DESCEND

    def enter_compound(self, name):
        self.events.append(("enter_compound", name))
        return self._signal(name)

    def exit_compound(self, name):
        self.events.append(("exit_compound", name))

    def enter_list(self, name, element_tag, length):
        self.events.append(("enter_list", name, length))
        return self._signal(name)

    def exit_list(self, name):
        self.events.append(("exit_list", name))

    def value(self, name, tag, value):
        self.events.append(("value", name, value))
        return self._signal(name)

    def end(self):
        self.events.append(("end",))


@pytest.fixture()
def recorder():
    return EventRecorder


@pytest.fixture()
def stone_world(tmp_path: Path) -> Path:
    """3x3 chunk columns of solid stone in region r.0.0, section Y=0 only."""
    stone = section_blocks(lambda x, y, z: 1)
    chunks = {(x, z): chunk_nbt(x, z, [(0, stone)]) for x in range(3) for z in range(3)}
    world = tmp_path / "world"
    write_region(world / "region" / "r.0.0.mca", chunks)
    return world
