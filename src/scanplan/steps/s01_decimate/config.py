"""Configuration for Step 01: Voxel decimation for interactive viewing."""

from pydantic import BaseModel, Field


class DecimateConfig(BaseModel):
    target_points: int = Field(
        2_000_000, gt=0, description="Point budget for the decimated (viewer) cloud"
    )
    output_name: str = Field("decimated.hfpc", description="File name of the decimated HFPC cloud")
