"""Voxel-grid decimation: one averaged point per occupied cubic cell.

Algorithm:
1. Voxel edge = cbrt(bounding volume / target)
2. Bucket every point into an integer grid cell, flatten to one int64 key
3. Accumulate position (and colour) sums and counts per occupied key
4. Emit the mean of each cell and recompute bounds from the emitted points
"""

from __future__ import annotations

import logging
import math

import numpy as np

from scanplan.core.contracts import Bounds, PointCloud

logger = logging.getLogger(__name__)

DEFAULT_TARGET_POINTS = 2_000_000

# Extents at or below this are treated as flat along that axis.
_DEGENERATE_EXTENT = 1e-9


def voxel_edge_length(extent: np.ndarray, target: int) -> float:
    """Edge length giving roughly ``target`` cells over the bounding box.

    Axes with zero extent do not contribute to the volume: a flat cloud
    divides its area (or length) over the target instead, and the flat
    axis collapses into a single layer of cells. Returns 0.0 when every
    extent is zero.
    """
    live = [float(e) for e in extent if e > _DEGENERATE_EXTENT]
    if not live:
        return 0.0
    measure = math.prod(live)
    return (measure / target) ** (1.0 / len(live))


def _accumulate(values: np.ndarray, inverse: np.ndarray, n_cells: int) -> np.ndarray:
    """Per-cell column sums of an (N, 3) array, in float64."""
    return np.column_stack([
        np.bincount(inverse, weights=values[:, axis].astype(np.float64), minlength=n_cells)
        for axis in range(3)
    ])


def decimate(cloud: PointCloud, target: int = DEFAULT_TARGET_POINTS) -> PointCloud:
    """Downsample a cloud to at most about ``target`` points.

    Clouds already within budget are returned unchanged (same object).

    Args:
        cloud: Source cloud; never modified.
        target: Point budget. Must be positive.

    Returns:
        A new cloud of cell means with freshly computed bounds.
    """
    if target <= 0:
        raise ValueError(f"target must be positive, got {target}")
    if cloud.count <= target:
        return cloud

    positions = cloud.positions
    origin = cloud.bounds.min.astype(np.float64)
    extent = cloud.bounds.extent
    edge = voxel_edge_length(extent, target)

    if edge <= 0.0:
        # Every point coincides: the whole cloud is one cell.
        logger.info(f"Zero-extent cloud: collapsing {cloud.count:,} points into one")
        inverse = np.zeros(cloud.count, dtype=np.int64)
        n_cells = 1
    else:
        grid_dims = np.ceil(extent / edge).astype(np.int64) + 1
        cells = np.floor((positions.astype(np.float64) - origin) / edge).astype(np.int64)
        np.clip(cells, 0, grid_dims - 1, out=cells)
        keys = cells[:, 0] + cells[:, 1] * grid_dims[0] + cells[:, 2] * grid_dims[0] * grid_dims[1]
        _, inverse = np.unique(keys, return_inverse=True)
        inverse = inverse.reshape(-1)
        n_cells = int(inverse.max()) + 1

    counts = np.bincount(inverse, minlength=n_cells).astype(np.float64)[:, None]
    out_positions = (_accumulate(positions, inverse, n_cells) / counts).astype(np.float32)
    out_colors = None
    if cloud.colors is not None:
        out_colors = (_accumulate(cloud.colors, inverse, n_cells) / counts).astype(np.float32)

    result = PointCloud(
        positions=out_positions,
        colors=out_colors,
        bounds=Bounds.from_positions(out_positions),
    )
    logger.info(
        f"Voxel decimation (edge={edge:.4f}m): {cloud.count:,} -> {result.count:,} points "
        f"(target {target:,})"
    )
    return result
