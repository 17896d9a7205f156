from __future__ import annotations

import io
from pathlib import Path

from autominer.blocks import Blocks
from autominer.report import Table, write_report


def test_table_renders_aligned_rows_and_blank_cells():
    t = Table()
    t.set("9", "Single branch", 1.5)
    t.set("9", "Strategy x+2", 12.25)
    t.set("10", "Single branch", 0.333)
    out = io.StringIO()
    t.write(out)
    assert out.getvalue().splitlines() == [
        "    Single branch  Strategy x+2",
        "9            1.50         12.25",
        "10           0.33",
    ]
    assert t.get("10", "Strategy x+2") is None


def test_write_report_one_block_per_block_type(tmp_path: Path):
    lava = Table()
    lava.set("11", "Single branch", 2)
    diamond = Table()
    diamond.set("11", "Single branch", 0.5)
    path = tmp_path / "out.txt"
    write_report(path, {Blocks.LAVA: lava, Blocks.DIAMOND_ORE: diamond})
    text = path.read_text(encoding="utf-8")
    assert text.index("Lava\n") < text.index("Diamond Ore\n")
    assert "2.00" in text and "0.50" in text
    assert text.endswith("\n\n")
