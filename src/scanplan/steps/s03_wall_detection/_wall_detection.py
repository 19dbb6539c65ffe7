"""Wall detection on one floor: slice, RANSAC lines, merge, snap."""

from __future__ import annotations

import logging

import numpy as np

from scanplan.core.contracts import PointCloud
from scanplan.utils.geometry import round_half_up
from ._ransac_lines import extract_wall_slice, ransac_extract_lines
from ._segment_regularization import merge_collinear, snap_to_dominant
from .contracts import DetectedWall

logger = logging.getLogger(__name__)

DEFAULT_THICKNESS_MM = 100


def detect_walls(
    cloud: PointCloud,
    floor_z: float,
    floor_thickness: float = 0.4,
    *,
    rng: np.random.Generator | int | None = None,
    wall_height: float = 1.2,
    max_lines: int = 20,
    ransac_iterations: int = 200,
    inlier_threshold: float = 0.05,
    min_inliers: int = 50,
    min_wall_length: float = 0.5,
    merge_angle_threshold: float = 5.0,
    merge_gap_threshold: float = 0.3,
    snap_angle_threshold: float = 5.0,
) -> list[DetectedWall]:
    """Detect straight wall segments on the floor at ``floor_z``.

    Args:
        cloud: Source cloud (read only).
        floor_z: Floor elevation in metres.
        floor_thickness: Height of the horizontal slice sampled around
            ``floor_z + wall_height``.
        rng: Random source for RANSAC sampling. Pass a seed or Generator
            for reproducible results.

    Returns:
        Wall segments in extraction order; empty when the slice has fewer
        than ``min_inliers`` points or no line has enough support.
    """
    points = extract_wall_slice(cloud, floor_z, floor_thickness, wall_height)
    total = len(points)
    if total < min_inliers:
        logger.info(f"Wall slice at z={floor_z + wall_height:.2f}m has only {total} points")
        return []

    generator = np.random.default_rng(rng)
    lines = ransac_extract_lines(
        points,
        generator,
        max_lines=max_lines,
        iterations=ransac_iterations,
        inlier_threshold=inlier_threshold,
        min_inliers=min_inliers,
        min_length=min_wall_length,
    )
    merged = merge_collinear(lines, merge_angle_threshold, merge_gap_threshold)
    snapped = snap_to_dominant(merged, snap_angle_threshold)

    walls = [
        DetectedWall(
            start_x=round_half_up(float(line.start[0]), 3),
            start_y=round_half_up(float(line.start[1]), 3),
            end_x=round_half_up(float(line.end[0]), 3),
            end_y=round_half_up(float(line.end[1]), 3),
            thickness_mm=DEFAULT_THICKNESS_MM,
            length_mm=int(round_half_up(line.length * 1000)),
            confidence=min(100, int(round_half_up(len(line.points) / total * 500))),
        )
        for line in snapped
    ]
    logger.info(
        f"Wall detection at z={floor_z:.2f}m: {total:,} slice points, "
        f"{len(lines)} lines -> {len(walls)} walls"
    )
    return walls
