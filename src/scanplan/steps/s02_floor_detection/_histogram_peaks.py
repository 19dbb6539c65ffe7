"""Floor detection from point density along the vertical axis.

Algorithm:
1. Histogram of z in fixed bins from the lowest point upwards
2. Gaussian smoothing (discrete convolution, zero padded)
3. Local maxima above a fraction of the strongest smoothed bin
4. Strongest-first greedy selection with a minimum floor separation
5. Ascending re-sort, exact point counts in the floor band, labelling
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from scanplan.core.contracts import PointCloud
from scanplan.utils.geometry import round_half_up
from ._floor_labels import label_floors
from .contracts import DetectedFloor

logger = logging.getLogger(__name__)


@dataclass
class _Peak:
    bin: int
    value: float


def gaussian_kernel(sigma: float) -> np.ndarray:
    """Normalised Gaussian kernel with radius ceil(3 * sigma)."""
    radius = int(math.ceil(sigma * 3))
    x = np.arange(-radius, radius + 1, dtype=np.float64)
    kernel = np.exp(-(x * x) / (2 * sigma * sigma))
    return kernel / kernel.sum()


def gaussian_smooth(histogram: np.ndarray, sigma: float) -> np.ndarray:
    """Smooth a 1D histogram; output has the same length as the input."""
    kernel = gaussian_kernel(sigma)
    radius = len(kernel) // 2
    full = np.convolve(histogram.astype(np.float64), kernel, mode="full")
    return full[radius:radius + len(histogram)]


def find_peaks(smoothed: np.ndarray, min_peak_ratio: float) -> tuple[list[_Peak], float]:
    """Bins that are >= both neighbours and above ``min_peak_ratio * max``.

    Edge bins are compared with their single neighbour, so a slab sitting
    exactly on the lowest or highest point of the cloud is still a peak.
    Returns the peaks in bin order and the global maximum.
    """
    if len(smoothed) == 0:
        return [], 0.0
    max_val = float(smoothed.max())
    threshold = max_val * min_peak_ratio
    padded = np.concatenate(([-np.inf], smoothed, [-np.inf]))
    is_peak = (
        (smoothed > threshold)
        & (smoothed >= padded[:-2])
        & (smoothed >= padded[2:])
    )
    return [_Peak(int(i), float(smoothed[i])) for i in np.flatnonzero(is_peak)], max_val


def detect_floors(
    cloud: PointCloud,
    *,
    bin_size: float = 0.05,
    smoothing_sigma: float = 3.0,
    min_peak_ratio: float = 0.02,
    min_floor_separation: float = 2.0,
    floor_thickness: float = 0.4,
    min_z_range: float = 0.5,
) -> list[DetectedFloor]:
    """Detect floor elevations, lowest first.

    Args:
        cloud: Source cloud (read only).
        bin_size: Histogram bin size in metres.
        smoothing_sigma: Gaussian sigma in bins.
        min_peak_ratio: Minimum peak height relative to the strongest bin.
        min_floor_separation: Minimum distance between kept floors (metres).
        floor_thickness: Band around each floor for the exact point count.
        min_z_range: Clouds with a smaller vertical range yield no floors.

    Returns:
        Detected floors sorted by elevation; empty when nothing is found.
    """
    if cloud.count == 0:
        return []

    z_min = float(cloud.bounds.min[2])
    z_max = float(cloud.bounds.max[2])
    z_range = z_max - z_min
    if not math.isfinite(z_range):
        logger.warning("Cloud bounds are not finite; no floors detected")
        return []
    if z_range < min_z_range:
        logger.info(f"Cloud too flat for floor detection (z range {z_range:.2f}m)")
        return []

    z = cloud.positions[:, 2].astype(np.float64)

    n_bins = int(math.ceil(z_range / bin_size)) + 1
    bins = np.floor((z - z_min) / bin_size).astype(np.int64)
    bins = bins[(bins >= 0) & (bins < n_bins)]
    histogram = np.bincount(bins, minlength=n_bins).astype(np.float64)

    smoothed = gaussian_smooth(histogram, smoothing_sigma)
    peaks, max_val = find_peaks(smoothed, min_peak_ratio)
    if not peaks:
        return []

    # Strongest first; weaker peaks near a kept one are dropped
    selected: list[_Peak] = []
    for peak in sorted(peaks, key=lambda p: p.value, reverse=True):
        pz = z_min + peak.bin * bin_size
        if all(abs(pz - (z_min + s.bin * bin_size)) >= min_floor_separation for s in selected):
            selected.append(peak)
    selected.sort(key=lambda p: p.bin)

    half = floor_thickness / 2.0
    # Stored heights are rounded to the millimetre; a band that rounds onto
    # its own floor height cannot describe that floor
    kept: list[tuple[_Peak, float]] = []
    for peak in selected:
        elev = z_min + peak.bin * bin_size
        if round_half_up(elev - half, 3) < round_half_up(elev, 3) < round_half_up(elev + half, 3):
            kept.append((peak, elev))
        else:
            logger.warning(
                f"Skipping floor at z={elev:.3f}m: thickness {floor_thickness}m "
                f"vanishes at millimetre precision"
            )

    labels = label_floors([elev for _, elev in kept])

    floors = []
    for idx, ((peak, elev), label) in enumerate(zip(kept, labels)):
        lo, hi = elev - half, elev + half
        point_count = int(np.count_nonzero((z >= lo) & (z <= hi)))
        confidence = min(100.0, peak.value / max_val * 100.0)
        floors.append(DetectedFloor(
            label=label,
            z_height_m=round_half_up(elev, 3),
            z_range_min=round_half_up(lo, 3),
            z_range_max=round_half_up(hi, 3),
            point_count=point_count,
            confidence=round_half_up(confidence, 2),
            sort_order=idx,
        ))

    logger.info(
        f"Floor detection: {len(floors)} floors from {len(peaks)} candidate peaks "
        f"(z range {z_min:.2f}-{z_max:.2f}m)"
    )
    return floors
