"""Geometry helpers for wall segments (angles modulo 180, projections) and rounding."""

from __future__ import annotations

import math

import numpy as np


def normalize_angle(angle_deg: float) -> float:
    """Map an undirected line angle into [0, 180)."""
    a = math.fmod(angle_deg, 180.0)
    if a < 0:
        a += 180.0
    return 0.0 if a >= 180.0 else a


def angle_difference(a_deg: float, b_deg: float) -> float:
    """Smallest angle between two undirected lines, in [0, 90]."""
    d = normalize_angle(a_deg - b_deg)
    return min(d, 180.0 - d)


def direction_from_angle(angle_deg: float) -> np.ndarray:
    rad = math.radians(angle_deg)
    return np.array([math.cos(rad), math.sin(rad)])


def project_extent(points: np.ndarray, direction: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Endpoints of ``points`` projected on a line through ``points[0]``.

    Args:
        points: (N, 2) array, N >= 1.
        direction: unit 2D direction of the line.

    Returns:
        (start, end) at the minimum and maximum projection.
    """
    ref = points[0]
    t = (points - ref) @ direction
    return ref + direction * t.min(), ref + direction * t.max()


def min_endpoint_gap(a_start, a_end, b_start, b_end) -> float:
    """Minimum distance over the four endpoint pairings of two segments."""
    return min(
        math.dist(a_end, b_start),
        math.dist(a_start, b_end),
        math.dist(a_start, b_start),
        math.dist(a_end, b_end),
    )


def rotate_about_midpoint(start, end, angle_deg: float) -> tuple[np.ndarray, np.ndarray]:
    """Re-orient a segment to ``angle_deg`` about its midpoint, keeping its length."""
    start = np.asarray(start, dtype=np.float64)
    end = np.asarray(end, dtype=np.float64)
    length = float(np.linalg.norm(end - start))
    mid = (start + end) / 2.0
    half = direction_from_angle(angle_deg) * (length / 2.0)
    return mid - half, mid + half


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with ties going towards +inf (builtin ``round`` ties to even)."""
    scale = 10.0 ** ndigits
    return math.floor(value * scale + 0.5) / scale
