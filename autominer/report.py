"""Fixed-width text tables for the strategy report."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Mapping, TextIO, Tuple

from .blocks import Block


class Table:
    """Sparse rows x columns grid of floats; rows and columns keep insertion order."""

    def __init__(self) -> None:
        self.rows: List[str] = []
        self.columns: List[str] = []
        self._cells: Dict[Tuple[str, str], float] = {}

    def set(self, row: str, column: str, value: float) -> None:
        if row not in self.rows:
            self.rows.append(row)
        if column not in self.columns:
            self.columns.append(column)
        self._cells[(row, column)] = value

    def get(self, row: str, column: str):
        return self._cells.get((row, column))

    def write(self, fp: TextIO) -> None:
        grid = [[""] + list(self.columns)]
        for row in self.rows:
            line = [row]
            for column in self.columns:
                value = self._cells.get((row, column))
                line.append("" if value is None else f"{value:.2f}")
            grid.append(line)
        widths = [max(len(line[i]) for line in grid) for i in range(len(grid[0]))]
        for line in grid:
            cells = [line[0].ljust(widths[0])] + [cell.rjust(w) for cell, w in zip(line[1:], widths[1:])]
            fp.write("  ".join(cells).rstrip() + "\n")


def write_report(path: Path, tables: Mapping[Block, Table]) -> None:
    tmp = path.with_name(path.name + ".tmp")
    try:
        with tmp.open("w", encoding="utf-8") as fp:
            for block in sorted(tables):
                fp.write(block.name + "\n")
                tables[block].write(fp)
                fp.write("\n")
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise
