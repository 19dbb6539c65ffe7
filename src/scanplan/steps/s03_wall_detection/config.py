"""Configuration for Step 03: Wall detection."""

from typing import Optional

from pydantic import BaseModel, Field


class WallDetectionConfig(BaseModel):
    floor_index: Optional[int] = Field(
        None, ge=0, description="Only process this floor (sort_order); None = every detected floor"
    )
    random_seed: Optional[int] = Field(None, description="Seed for RANSAC sampling (None = nondeterministic)")

    # Slice
    wall_height: float = Field(1.2, description="Slice centre above the floor elevation (metres)")
    floor_thickness: float = Field(0.4, gt=0, description="Slice height around the wall height (metres)")

    # RANSAC
    max_lines: int = Field(20, gt=0, description="Maximum extraction rounds")
    ransac_iterations: int = Field(200, gt=0, description="RANSAC iterations per round")
    inlier_threshold: float = Field(0.05, gt=0, description="Orthogonal inlier distance (metres)")
    min_inliers: int = Field(50, ge=2, description="Minimum inliers per wall and minimum slice size")
    min_wall_length: float = Field(0.5, ge=0, description="Shorter segments are discarded (metres)")

    # Regularisation
    merge_angle_threshold: float = Field(5.0, ge=0, description="Max angle (degrees) for collinear merging")
    merge_gap_threshold: float = Field(0.3, ge=0, description="Max endpoint gap (metres) for merging")
    snap_angle_threshold: float = Field(5.0, ge=0, description="Snap to dominant/perpendicular within (degrees)")
