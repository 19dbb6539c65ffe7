"""I/O contracts for Step 02: Floor detection."""

from pathlib import Path

from pydantic import BaseModel, Field, model_validator


class DetectedFloor(BaseModel):
    label: str = Field(..., description="Storey name, e.g. 'Ground Floor'")
    z_height_m: float = Field(..., description="Floor elevation (metres)")
    z_range_min: float = Field(..., description="Lower edge of the floor-thickness band")
    z_range_max: float = Field(..., description="Upper edge of the floor-thickness band")
    point_count: int = Field(..., ge=0, description="Raw points inside the band")
    confidence: float = Field(..., ge=0, le=100, description="Peak strength relative to the strongest")
    sort_order: int = Field(..., ge=0, description="Index in ascending elevation order")

    @model_validator(mode="after")
    def _check_band(self) -> "DetectedFloor":
        if not self.z_range_min < self.z_height_m < self.z_range_max:
            raise ValueError(
                f"z_height_m {self.z_height_m} outside band "
                f"[{self.z_range_min}, {self.z_range_max}]"
            )
        return self


class FloorDetectionInput(BaseModel):
    cloud_path: Path = Field(..., description="Path to the full-resolution cloud.hfpc from s00")


class FloorDetectionOutput(BaseModel):
    floors_file: Path = Field(..., description="Path to floors.json")
    num_floors: int = Field(0)
