"""Run settings, validated with pydantic and read from ``AUTOMINER_*`` variables."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_ENV_PREFIX = "AUTOMINER_"
_ENV_FIELDS = (
    "cache_file",
    "output",
    "seed",
    "iterations",
    "mine_length",
    "branches",
    "start_margin",
    "bounds_margin",
    "log_level",
)


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    cache_file: Path = Path("cache.dat")
    output: Path = Path("out.txt")

    # Diamonds generate between these depths.
    mine_min_y: int = 0
    mine_max_y: int = 15
    # Extra cached layers above the ore band.
    headroom: int = Field(default=10, ge=0)

    depths: List[int] = Field(default_factory=lambda: list(range(9, 14)), min_length=1)
    iterations: int = Field(default=10, ge=1)
    mine_length: int = Field(default=1000, ge=1)
    branches: int = Field(default=4, ge=1)
    branch_distances: List[int] = Field(default_factory=lambda: list(range(2, 8)), min_length=1)
    start_margin: int = Field(default=50, ge=0)
    bounds_margin: int = Field(default=5, ge=0)
    seed: Optional[int] = None
    log_level: str = "INFO"

    @field_validator("branch_distances")
    @classmethod
    def validate_distances(cls, value: List[int]) -> List[int]:
        if any(d < 1 for d in value):
            raise ValueError("branch distances must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level: {value}")
        return value

    @model_validator(mode="after")
    def validate_depths(self) -> "Settings":
        if self.mine_max_y < self.mine_min_y:
            raise ValueError("mine_max_y must be >= mine_min_y")
        bad = [y for y in self.depths if not self.min_y <= y <= self.max_y]
        if bad:
            raise ValueError(f"depths {bad} fall outside the cached range {self.min_y}..{self.max_y}")
        return self

    @property
    def min_y(self) -> int:
        return self.mine_min_y

    @property
    def max_y(self) -> int:
        return self.mine_max_y + self.headroom

    @classmethod
    def from_env(cls, **overrides: object) -> "Settings":
        """Build settings from ``AUTOMINER_*`` variables; non-None ``overrides`` win."""
        values: Dict[str, object] = {}
        for name in _ENV_FIELDS:
            raw = os.environ.get(_ENV_PREFIX + name.upper(), "").strip()
            if raw:
                values[name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
