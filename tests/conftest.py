"""Shared pytest fixtures for scanplan tests."""

from pathlib import Path

import numpy as np
import pytest


STEP_DIRS = [
    "s00_ingest_scan",
    "s01_decimate",
    "s02_floor_detection",
    "s03_wall_detection",
    "s04_plan_layout",
]


# ---------------------------------------------------------------------------
# Synthetic geometry
# ---------------------------------------------------------------------------

def floor_disc(rng: np.random.Generator, n: int, z: float, radius: float = 4.0) -> np.ndarray:
    """Dense horizontal disc just above ``z`` (2 cm of vertical jitter)."""
    r = radius * np.sqrt(rng.uniform(0.0, 1.0, n))
    theta = rng.uniform(0.0, 2 * np.pi, n)
    return np.column_stack([
        r * np.cos(theta),
        r * np.sin(theta),
        z + rng.uniform(0.0, 0.02, n),
    ])


def rectangle_walls(
    rng: np.random.Generator,
    n: int,
    width: float,
    depth: float,
    z_low: float,
    z_high: float,
    scatter: float = 0.005,
) -> np.ndarray:
    """Points on the four sides of a width x depth rectangle at the origin.

    Points are spread uniformly along the perimeter, so each side gets a
    share proportional to its length.
    """
    perimeter = 2 * (width + depth)
    s = rng.uniform(0.0, perimeter, n)
    x = np.empty(n)
    y = np.empty(n)

    bottom = s < width
    right = (s >= width) & (s < width + depth)
    top = (s >= width + depth) & (s < 2 * width + depth)
    left = s >= 2 * width + depth

    x[bottom], y[bottom] = s[bottom], 0.0
    x[right], y[right] = width, s[right] - width
    x[top], y[top] = 2 * width + depth - s[top], depth
    x[left], y[left] = 0.0, perimeter - s[left]

    x += rng.uniform(-scatter, scatter, n)
    y += rng.uniform(-scatter, scatter, n)
    z = rng.uniform(z_low, z_high, n)
    return np.column_stack([x, y, z])


def building_positions(rng: np.random.Generator) -> np.ndarray:
    """10,000 points: slabs at z=0 and z=3 over an 8 x 6 m room, walls on the lower storey."""
    def slab_xy(n):
        return np.column_stack([rng.uniform(0.0, 8.0, n), rng.uniform(0.0, 6.0, n)])

    lower = np.column_stack([slab_xy(3000), rng.uniform(0.0, 0.02, 3000)])
    upper = np.column_stack([slab_xy(3000), 3.0 + rng.uniform(0.0, 0.02, 3000)])
    walls = rectangle_walls(rng, 4000, 8.0, 6.0, 0.0, 2.8)
    return np.vstack([lower, upper, walls])


# ---------------------------------------------------------------------------
# Scan file writers
# ---------------------------------------------------------------------------

def write_las(path: Path, positions: np.ndarray, colors: np.ndarray | None = None) -> Path:
    """Write a LAS 1.2 file (LAZ when the suffix is .laz) at millimetre precision."""
    import laspy

    header = laspy.LasHeader(point_format=2 if colors is not None else 0, version="1.2")
    header.scales = np.array([0.001, 0.001, 0.001])
    header.offsets = np.floor(positions.min(axis=0))

    las = laspy.LasData(header)
    las.x = positions[:, 0]
    las.y = positions[:, 1]
    las.z = positions[:, 2]
    if colors is not None:
        rgb16 = np.round(colors * 65535).astype(np.uint16)
        las.red = rgb16[:, 0]
        las.green = rgb16[:, 1]
        las.blue = rgb16[:, 2]
    las.write(str(path))
    return path


def write_ply(
    path: Path,
    positions: np.ndarray,
    colors_u8: np.ndarray | None = None,
    text: bool = False,
) -> Path:
    """Write a vertex-only PLY with optional uchar colours."""
    from plyfile import PlyData, PlyElement

    fields = [("x", "f4"), ("y", "f4"), ("z", "f4")]
    if colors_u8 is not None:
        fields += [("red", "u1"), ("green", "u1"), ("blue", "u1")]
    vertex = np.empty(len(positions), dtype=fields)
    vertex["x"], vertex["y"], vertex["z"] = positions[:, 0], positions[:, 1], positions[:, 2]
    if colors_u8 is not None:
        vertex["red"], vertex["green"], vertex["blue"] = colors_u8[:, 0], colors_u8[:, 1], colors_u8[:, 2]
    PlyData([PlyElement.describe(vertex, "vertex")], text=text).write(str(path))
    return path


def write_e57(path: Path, positions: np.ndarray, colors_u8: np.ndarray | None = None) -> Path:
    """Write a single-scan E57 file with optional 8-bit colours."""
    import pye57

    data = {
        "cartesianX": np.ascontiguousarray(positions[:, 0], dtype=np.float64),
        "cartesianY": np.ascontiguousarray(positions[:, 1], dtype=np.float64),
        "cartesianZ": np.ascontiguousarray(positions[:, 2], dtype=np.float64),
    }
    if colors_u8 is not None:
        for i, key in enumerate(("colorRed", "colorGreen", "colorBlue")):
            data[key] = np.ascontiguousarray(colors_u8[:, i], dtype=np.uint8)
    e57 = pye57.E57(str(path), mode="w")
    e57.write_scan_raw(data)
    e57.close()
    return path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """Create a temporary data root with the interim step layout."""
    for subdir in ["raw", *(f"interim/{d}" for d in STEP_DIRS)]:
        (tmp_path / subdir).mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(7)


@pytest.fixture
def two_floor_positions(rng: np.random.Generator) -> np.ndarray:
    """Two 1500-point discs at z=0 and z=3."""
    return np.vstack([floor_disc(rng, 1500, 0.0), floor_disc(rng, 1500, 3.0)])


@pytest.fixture
def room_slice_positions(rng: np.random.Generator) -> np.ndarray:
    """8 x 6 m wall loop sampled around 1.2 m above a floor at z=0."""
    return rectangle_walls(rng, 2000, 8.0, 6.0, 1.05, 1.35)


@pytest.fixture
def building_scan(rng: np.random.Generator, tmp_path: Path) -> Path:
    """Two-storey synthetic scan written as LAS."""
    raw = tmp_path / "raw"
    raw.mkdir(exist_ok=True)
    return write_las(raw / "building.las", building_positions(rng))


@pytest.fixture
def las_writer():
    return write_las


@pytest.fixture
def ply_writer():
    return write_ply


@pytest.fixture
def e57_writer():
    return write_e57
