"""I/O contracts for Step 03: Wall detection."""

from pathlib import Path

from pydantic import BaseModel, Field


class DetectedWall(BaseModel):
    start_x: float = Field(..., description="Start point X (metres)")
    start_y: float = Field(..., description="Start point Y (metres)")
    end_x: float = Field(..., description="End point X (metres)")
    end_y: float = Field(..., description="End point Y (metres)")
    thickness_mm: int = Field(100, description="Assumed wall thickness (not measured)")
    length_mm: int = Field(..., ge=0, description="Segment length (millimetres)")
    confidence: int = Field(..., ge=0, le=100, description="Inlier-density score, not a statistical confidence")


class LabelledWall(DetectedWall):
    wall_label: str = Field(..., description="Display name, e.g. 'Wall 1'")


class FloorWalls(BaseModel):
    floor_label: str
    z_height_m: float
    sort_order: int
    walls: list[LabelledWall] = Field(default_factory=list)


class WallDetectionInput(BaseModel):
    cloud_path: Path = Field(..., description="Path to the full-resolution cloud.hfpc from s00")
    floors_file: Path = Field(..., description="Path to floors.json from s02")


class WallDetectionOutput(BaseModel):
    walls_file: Path = Field(..., description="Path to walls.json (walls grouped per floor)")
    num_floors_processed: int = Field(0)
    num_walls: int = Field(0)
