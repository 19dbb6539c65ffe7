"""Configuration for Step 02: Floor detection."""

from pydantic import BaseModel, Field


class FloorDetectionConfig(BaseModel):
    bin_size: float = Field(0.05, gt=0, description="Z histogram bin size (metres)")
    smoothing_sigma: float = Field(3.0, gt=0, description="Gaussian smoothing sigma (bins)")
    min_peak_ratio: float = Field(
        0.02, ge=0, lt=1, description="Peak must exceed this fraction of the strongest bin"
    )
    min_floor_separation: float = Field(2.0, gt=0, description="Min floor-to-floor distance (metres)")
    floor_thickness: float = Field(0.4, gt=0, description="Band around a floor used for point_count (metres)")
    min_z_range: float = Field(0.5, ge=0, description="Clouds flatter than this yield no floors (metres)")
