"""Sequential RANSAC line extraction on a horizontal wall slice.

Each round fits the line with the most inliers among random two-point
hypotheses, turns its inliers into a segment and removes them from the
working set before the next round.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from scanplan.core.contracts import PointCloud
from scanplan.utils.geometry import project_extent

logger = logging.getLogger(__name__)


@dataclass
class LineSegment:
    """A fitted wall line: supporting points, direction angle and endpoints."""

    points: np.ndarray  # (N, 2) inliers
    angle: float  # degrees, direction of start -> end
    start: np.ndarray  # (2,)
    end: np.ndarray  # (2,)

    @property
    def length(self) -> float:
        return float(np.linalg.norm(self.end - self.start))


def extract_wall_slice(
    cloud: PointCloud,
    floor_z: float,
    floor_thickness: float = 0.4,
    wall_height: float = 1.2,
) -> np.ndarray:
    """XY of points within floor_thickness/2 of ``floor_z + wall_height``.

    Sampling above the slab keeps floor and ceiling returns out of the slice.
    """
    centre = floor_z + wall_height
    half = floor_thickness / 2.0
    z = cloud.positions[:, 2]
    mask = (z >= centre - half) & (z <= centre + half)
    return cloud.positions[mask, :2].astype(np.float64)


def fit_line_ransac(
    points: np.ndarray,
    rng: np.random.Generator,
    iterations: int = 200,
    inlier_threshold: float = 0.05,
) -> tuple[np.ndarray | None, np.ndarray | None]:
    """Best two-point line hypothesis by inlier count.

    Returns:
        (inlier_mask, unit_normal) of the best line, or (None, None) when
        every sampled pair was degenerate.
    """
    n = len(points)
    best_count = 0
    best_mask = None
    best_normal = None

    for _ in range(iterations):
        i1 = int(rng.integers(n))
        i2 = int(rng.integers(n - 1))
        if i2 >= i1:
            i2 += 1
        p1, p2 = points[i1], points[i2]

        # Line a*x + b*y + c = 0 through p1, p2
        a = p2[1] - p1[1]
        b = p1[0] - p2[0]
        norm = math.hypot(a, b)
        if norm < 1e-6:
            continue
        normal = np.array([a / norm, b / norm])
        c = -float(normal @ p1)

        mask = np.abs(points @ normal + c) < inlier_threshold
        count = int(np.count_nonzero(mask))
        if count > best_count:
            best_count = count
            best_mask = mask
            best_normal = normal

    return best_mask, best_normal


def ransac_extract_lines(
    points: np.ndarray,
    rng: np.random.Generator,
    *,
    max_lines: int = 20,
    iterations: int = 200,
    inlier_threshold: float = 0.05,
    min_inliers: int = 50,
    min_length: float = 0.5,
) -> list[LineSegment]:
    """Extract up to ``max_lines`` wall segments, strongest first."""
    lines: list[LineSegment] = []
    remaining = points

    for _ in range(max_lines):
        if len(remaining) <= min_inliers:
            break

        mask, normal = fit_line_ransac(remaining, rng, iterations, inlier_threshold)
        if mask is None or np.count_nonzero(mask) < min_inliers:
            break

        inliers = remaining[mask]
        direction = np.array([-normal[1], normal[0]])
        start, end = project_extent(inliers, direction)
        segment = LineSegment(
            points=inliers,
            angle=math.degrees(math.atan2(direction[1], direction[0])),
            start=start,
            end=end,
        )
        if segment.length >= min_length:
            lines.append(segment)
        else:
            logger.debug(f"Discarded short segment ({segment.length:.2f}m, {len(inliers)} inliers)")

        # Inliers leave the working set even when the segment was too short
        remaining = remaining[~mask]

    return lines
