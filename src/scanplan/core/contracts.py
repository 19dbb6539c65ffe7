"""Common models shared across pipeline steps."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import numpy as np
from pydantic import BaseModel, Field


class StepMeta(BaseModel):
    """Metadata attached to every step output for reproducibility."""

    step_name: str
    elapsed_seconds: float = 0.0
    params: dict[str, Any] = Field(default_factory=dict)


class BoundsModel(BaseModel):
    """Axis-aligned bounds in JSON-friendly form (metadata files, step outputs)."""

    min: list[float] = Field(..., min_length=3, max_length=3)
    max: list[float] = Field(..., min_length=3, max_length=3)


@dataclass(frozen=True, eq=False)
class Bounds:
    """Axis-aligned bounding box. Both corners are float32 (3,) arrays."""

    min: np.ndarray
    max: np.ndarray

    @classmethod
    def from_positions(cls, positions: np.ndarray) -> "Bounds":
        """Compute bounds in a single pass over (N, 3) positions."""
        if len(positions) == 0:
            zero = np.zeros(3, dtype=np.float32)
            return cls(min=zero, max=zero.copy())
        return cls(
            min=positions.min(axis=0).astype(np.float32),
            max=positions.max(axis=0).astype(np.float32),
        )

    @property
    def extent(self) -> np.ndarray:
        return self.max.astype(np.float64) - self.min.astype(np.float64)

    def to_model(self) -> BoundsModel:
        return BoundsModel(min=[float(v) for v in self.min], max=[float(v) for v in self.max])


@dataclass(frozen=True, eq=False)
class PointCloud:
    """Decoded scan: float32 positions, optional [0, 1] colours and bounds.

    Arrays are made read-only on construction; every consumer shares the
    same instance without copying.
    """

    positions: np.ndarray  # (N, 3) float32
    colors: Optional[np.ndarray]  # (N, 3) float32 or None
    bounds: Bounds

    def __post_init__(self) -> None:
        positions = np.ascontiguousarray(self.positions, dtype=np.float32).reshape(-1, 3)
        positions.flags.writeable = False
        object.__setattr__(self, "positions", positions)

        if self.colors is not None:
            colors = np.ascontiguousarray(self.colors, dtype=np.float32).reshape(-1, 3)
            if colors.shape != positions.shape:
                raise ValueError(
                    f"colors shape {colors.shape} does not match positions {positions.shape}"
                )
            colors.flags.writeable = False
            object.__setattr__(self, "colors", colors)

    @classmethod
    def from_arrays(cls, positions: np.ndarray, colors: Optional[np.ndarray] = None) -> "PointCloud":
        """Build a cloud and derive its bounds from the positions."""
        positions = np.ascontiguousarray(positions, dtype=np.float32).reshape(-1, 3)
        return cls(positions=positions, colors=colors, bounds=Bounds.from_positions(positions))

    @property
    def count(self) -> int:
        return int(self.positions.shape[0])

    @property
    def has_colors(self) -> bool:
        return self.colors is not None


class PipelineConfig(BaseModel):
    """Top-level pipeline configuration loaded from pipeline.yaml."""

    project_name: str = "scanplan_project"
    data_root: Path = Path("./data")
    steps: list[StepEntry] = Field(default_factory=list)


class StepEntry(BaseModel):
    """One entry in the pipeline step list."""

    name: str
    module: str
    config_file: str
    depends_on: list[str] = Field(default_factory=list)
    enabled: bool = True


# Fix forward reference
PipelineConfig.model_rebuild()
