"""I/O contracts for Step 01: Voxel decimation."""

from pathlib import Path

from pydantic import BaseModel, Field


class DecimateInput(BaseModel):
    cloud_path: Path = Field(..., description="Path to the full-resolution cloud.hfpc from s00")


class DecimateOutput(BaseModel):
    decimated_path: Path = Field(..., description="Path to the decimated HFPC cloud")
    decimated_count: int = Field(..., description="Number of points after decimation")
    decimated_size_bytes: int = Field(..., description="Size of the HFPC payload in bytes")
