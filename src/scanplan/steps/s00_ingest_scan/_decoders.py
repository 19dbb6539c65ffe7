"""Scan buffer decoders: LAS/LAZ, PLY, E57 and HFPC into a PointCloud.

The container is sniffed from its magic bytes rather than trusted from a
file extension, so the same entry point works on uploads and on disk files.
"""

from __future__ import annotations

import io
import logging
import os
import tempfile
from pathlib import Path
from typing import Literal

import numpy as np

from scanplan.core.contracts import Bounds, PointCloud
from scanplan.utils.io import HFPC_MAGIC, WireFormatError, deserialize_point_cloud

logger = logging.getLogger(__name__)

ScanFormat = Literal["las", "ply", "e57", "hfpc"]

_LAS_MAGIC = b"LASF"
_PLY_MAGIC = b"ply"
_E57_MAGIC = b"ASTM-E57"


class ParseError(ValueError):
    """No decodable position attribute in the scan buffer."""


def detect_scan_format(buffer: bytes) -> ScanFormat:
    """Identify the scan container from its leading bytes."""
    head = bytes(buffer[:8])
    if head[:4] == _LAS_MAGIC:
        return "las"
    if head[:4] == HFPC_MAGIC:
        return "hfpc"
    if head == _E57_MAGIC:
        return "e57"
    if head[:3] == _PLY_MAGIC:
        return "ply"
    raise ParseError(f"Unsupported point cloud format (leading bytes {head[:4]!r})")


def _normalise_colour_channels(channels: list[np.ndarray]) -> np.ndarray:
    """Stack integer RGB channels and scale to [0, 1].

    LAS stores 16-bit colour, but many writers put 8-bit values in those
    fields; if nothing exceeds 255 the data is treated as 8-bit.
    """
    rgb = np.column_stack([np.asarray(c) for c in channels]).astype(np.float64)
    peak = rgb.max() if rgb.size else 0.0
    depth = 255.0 if peak <= 255 else 65535.0
    return (rgb / depth).astype(np.float32)


def _decode_las(buffer: bytes) -> tuple[np.ndarray, np.ndarray | None]:
    """Decode LAS 1.0-1.4 (and LAZ through the lazrs backend) with laspy."""
    import laspy
    from laspy.errors import LaspyException

    try:
        las = laspy.read(io.BytesIO(buffer))
    except (LaspyException, ValueError, EOFError, OSError) as exc:
        raise ParseError(f"Could not decode LAS/LAZ buffer: {exc}") from exc

    positions = np.column_stack([
        np.asarray(las.x, dtype=np.float64),
        np.asarray(las.y, dtype=np.float64),
        np.asarray(las.z, dtype=np.float64),
    ]).astype(np.float32)

    dims = set(las.point_format.dimension_names)
    colors = None
    if {"red", "green", "blue"}.issubset(dims) and len(positions) > 0:
        colors = _normalise_colour_channels([las.red, las.green, las.blue])
    return positions, colors


def _decode_ply(buffer: bytes) -> tuple[np.ndarray, np.ndarray | None]:
    """Decode an ASCII or binary PLY vertex element with plyfile."""
    from plyfile import PlyData, PlyParseError

    try:
        plydata = PlyData.read(io.BytesIO(buffer))
    except (PlyParseError, ValueError, EOFError) as exc:
        raise ParseError(f"Could not decode PLY buffer: {exc}") from exc

    if "vertex" not in plydata:
        raise ParseError("PLY file has no vertex element")
    vertex = plydata["vertex"]
    prop_names = {p.name for p in vertex.properties}
    if not {"x", "y", "z"}.issubset(prop_names):
        raise ParseError("PLY vertex element has no x/y/z properties")

    positions = np.column_stack([
        vertex["x"].astype(np.float32),
        vertex["y"].astype(np.float32),
        vertex["z"].astype(np.float32),
    ])

    colors = None
    if {"red", "green", "blue"}.issubset(prop_names) and len(positions) > 0:
        channels = [vertex["red"], vertex["green"], vertex["blue"]]
        if np.issubdtype(channels[0].dtype, np.floating):
            colors = np.clip(np.column_stack(channels), 0.0, 1.0).astype(np.float32)
        else:
            colors = _normalise_colour_channels(channels)
    return positions, colors


def _decode_e57(buffer: bytes) -> tuple[np.ndarray, np.ndarray | None]:
    """Decode every scan in an ASTM E57 file with pye57, in world coordinates.

    libE57Format reads from a path, so the buffer is staged in a temporary file.
    """
    import pye57
    from pye57.libe57 import E57Exception

    fd, tmp_name = tempfile.mkstemp(suffix=".e57")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(buffer)
        try:
            e57 = pye57.E57(tmp_name)
            scans = [
                e57.read_scan(i, colors=True, ignore_missing_fields=True)
                for i in range(e57.scan_count)
            ]
            e57.close()
        except (E57Exception, RuntimeError, ValueError, KeyError) as exc:
            raise ParseError(f"Could not decode E57 buffer: {exc}") from exc
    finally:
        os.unlink(tmp_name)

    scans = [s for s in scans if "cartesianX" in s and len(s["cartesianX"]) > 0]
    if not scans:
        return np.empty((0, 3), dtype=np.float32), None

    positions = np.concatenate([
        np.column_stack([s["cartesianX"], s["cartesianY"], s["cartesianZ"]])
        for s in scans
    ]).astype(np.float32)

    colors = None
    if all({"colorRed", "colorGreen", "colorBlue"}.issubset(s) for s in scans):
        colors = _normalise_colour_channels([
            np.concatenate([s[key] for s in scans])
            for key in ("colorRed", "colorGreen", "colorBlue")
        ])
    return positions, colors


def _drop_non_finite(
    positions: np.ndarray, colors: np.ndarray | None
) -> tuple[np.ndarray, np.ndarray | None]:
    """Remove points with a NaN or infinite coordinate (scanner no-returns)."""
    finite = np.isfinite(positions).all(axis=1)
    dropped = int(len(positions) - np.count_nonzero(finite))
    if dropped == 0:
        return positions, colors
    logger.warning(f"Dropped {dropped:,} points with non-finite coordinates")
    return positions[finite], None if colors is None else colors[finite]


def parse_point_cloud(buffer: bytes | bytearray | memoryview) -> PointCloud:
    """Decode a scan byte buffer into positions, colours and bounds.

    Points with non-finite coordinates are dropped before bounds are taken.

    Raises:
        ParseError: the buffer is empty, corrupt, of an unsupported format,
            or carries no finite points.
    """
    buffer = bytes(buffer)
    if not buffer:
        raise ParseError("Empty point cloud buffer")

    fmt = detect_scan_format(buffer)
    if fmt == "hfpc":
        try:
            decoded = deserialize_point_cloud(buffer)
        except WireFormatError as exc:
            raise ParseError(f"Could not decode HFPC buffer: {exc}") from exc
        positions, colors = decoded.positions, decoded.colors
    elif fmt == "las":
        positions, colors = _decode_las(buffer)
    elif fmt == "e57":
        positions, colors = _decode_e57(buffer)
    else:
        positions, colors = _decode_ply(buffer)

    positions, colors = _drop_non_finite(positions, colors)
    if len(positions) == 0:
        raise ParseError("No position data found in point cloud file")

    if fmt == "hfpc" and len(positions) == decoded.count:
        return decoded

    cloud = PointCloud(
        positions=positions,
        colors=colors,
        bounds=Bounds.from_positions(positions),
    )
    logger.info(
        f"Decoded {cloud.count:,} points from {fmt.upper()} buffer "
        f"(colors={'yes' if cloud.has_colors else 'no'})"
    )
    return cloud


def load_point_cloud(path: Path) -> PointCloud:
    """Read a scan file from disk and decode it."""
    return parse_point_cloud(Path(path).read_bytes())
