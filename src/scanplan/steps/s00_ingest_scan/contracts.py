"""I/O contracts for Step 00: Ingest a raw laser scan."""

from pathlib import Path

from pydantic import BaseModel, Field

from scanplan.core.contracts import BoundsModel


class IngestScanInput(BaseModel):
    scan_path: Path = Field(..., description="Path to a LAS/LAZ, PLY or HFPC scan file")


class IngestScanOutput(BaseModel):
    cloud_path: Path = Field(..., description="Full-resolution cloud in HFPC format")
    metadata_path: Path = Field(..., description="Path to metadata.json (count, bounds, source)")
    num_points: int = Field(..., description="Number of decoded points")
    has_colors: bool = Field(False, description="Whether per-point colour was decoded")
    bounds: BoundsModel = Field(..., description="Axis-aligned bounds of the scan (metres)")
