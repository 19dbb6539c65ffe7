"""Collinear merging and dominant-axis snapping of wall segments."""

from __future__ import annotations

import logging
from dataclasses import replace

import numpy as np

from scanplan.utils.geometry import (
    angle_difference,
    direction_from_angle,
    min_endpoint_gap,
    normalize_angle,
    project_extent,
    rotate_about_midpoint,
)
from ._ransac_lines import LineSegment

logger = logging.getLogger(__name__)


def merge_collinear(
    lines: list[LineSegment],
    angle_threshold: float = 5.0,
    gap_threshold: float = 0.3,
) -> list[LineSegment]:
    """Merge near-parallel segments whose closest endpoints are within the gap.

    Segments are visited in extraction order; each one absorbs every later
    unused segment that passes both tests, re-projecting the union of their
    points onto its own direction.
    """
    if len(lines) <= 1:
        return list(lines)

    merged: list[LineSegment] = []
    used: set[int] = set()

    for i, line in enumerate(lines):
        if i in used:
            continue
        current = line
        used.add(i)

        for j in range(i + 1, len(lines)):
            if j in used:
                continue
            other = lines[j]
            if angle_difference(current.angle, other.angle) > angle_threshold:
                continue
            gap = min_endpoint_gap(current.start, current.end, other.start, other.end)
            if gap > gap_threshold:
                continue

            all_points = np.vstack([current.points, other.points])
            start, end = project_extent(all_points, direction_from_angle(current.angle))
            current = LineSegment(points=all_points, angle=current.angle, start=start, end=end)
            used.add(j)

        merged.append(current)

    if len(merged) < len(lines):
        logger.info(f"Collinear merge: {len(lines)} -> {len(merged)} segments")
    return merged


def snap_to_dominant(
    lines: list[LineSegment],
    snap_threshold: float = 5.0,
) -> list[LineSegment]:
    """Snap segments to the first segment's axis or its perpendicular.

    Snapped segments are rotated about their midpoint; length is kept.
    """
    if not lines:
        return []

    dominant = normalize_angle(lines[0].angle)
    targets = (dominant, dominant + 90.0, dominant - 90.0, dominant + 180.0)

    snapped = []
    for line in lines:
        angle = normalize_angle(line.angle)
        for target in targets:
            if angle_difference(angle, target) < snap_threshold:
                angle = target
                break
        start, end = rotate_about_midpoint(line.start, line.end, angle)
        snapped.append(replace(line, angle=angle, start=start, end=end))
    return snapped
