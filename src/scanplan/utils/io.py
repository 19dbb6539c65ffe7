"""I/O utilities: HFPC point-cloud wire format, JSON artefacts."""

from __future__ import annotations

import json
import struct
from pathlib import Path
from typing import Any

import numpy as np

from scanplan.core.contracts import Bounds, PointCloud


# ── HFPC wire format ─────────────────────────────────────────────────
#
# magic(4s) | count(uint32) | has_colors(uint8) | bounds(6 x float32)
# positions (count*3 x float32) | colors (count*3 x float32, optional)
# All little-endian, no padding.

HFPC_MAGIC = b"HFPC"
_HEADER = struct.Struct("<4sIB6f")
HFPC_HEADER_SIZE = _HEADER.size  # 33 bytes
_F32_LE = np.dtype("<f4")


class WireFormatError(ValueError):
    """Raised when a buffer is not a well-formed HFPC payload."""


def serialize_point_cloud(cloud: PointCloud) -> bytes:
    """Serialize a cloud to the HFPC binary format."""
    header = _HEADER.pack(
        HFPC_MAGIC,
        cloud.count,
        1 if cloud.has_colors else 0,
        *[float(v) for v in cloud.bounds.min],
        *[float(v) for v in cloud.bounds.max],
    )
    parts = [header, cloud.positions.astype(_F32_LE, copy=False).tobytes()]
    if cloud.colors is not None:
        parts.append(cloud.colors.astype(_F32_LE, copy=False).tobytes())
    return b"".join(parts)


def deserialize_point_cloud(data: bytes | bytearray | memoryview) -> PointCloud:
    """Decode an HFPC payload back into a PointCloud."""
    buf = memoryview(data).cast("B")
    if len(buf) < HFPC_HEADER_SIZE:
        raise WireFormatError(f"HFPC header truncated: {len(buf)} < {HFPC_HEADER_SIZE} bytes")

    magic, count, has_colors, *bounds = _HEADER.unpack_from(buf, 0)
    if magic != HFPC_MAGIC:
        raise WireFormatError(f"Bad HFPC magic: {magic!r}")
    if has_colors not in (0, 1):
        raise WireFormatError(f"Bad HFPC colour flag: {has_colors}")

    block = count * 3 * _F32_LE.itemsize
    expected = HFPC_HEADER_SIZE + block * (2 if has_colors else 1)
    if len(buf) != expected:
        raise WireFormatError(
            f"HFPC payload size mismatch: expected {expected} bytes for {count} points, got {len(buf)}"
        )

    if count == 0:
        positions = np.empty((0, 3), dtype=np.float32)
        colors = np.empty((0, 3), dtype=np.float32) if has_colors else None
    else:
        positions = np.frombuffer(buf, dtype=_F32_LE, count=count * 3, offset=HFPC_HEADER_SIZE)
        colors = None
        if has_colors:
            colors = np.frombuffer(
                buf, dtype=_F32_LE, count=count * 3, offset=HFPC_HEADER_SIZE + block
            )

    return PointCloud(
        positions=positions.reshape(-1, 3),
        colors=None if colors is None else colors.reshape(-1, 3),
        bounds=Bounds(
            min=np.array(bounds[:3], dtype=np.float32),
            max=np.array(bounds[3:], dtype=np.float32),
        ),
    )


def write_hfpc(path: Path, cloud: PointCloud) -> int:
    """Write a cloud to disk in HFPC format. Returns the byte size."""
    payload = serialize_point_cloud(cloud)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)
    return len(payload)


def read_hfpc(path: Path) -> PointCloud:
    """Read an HFPC file written by write_hfpc()."""
    return deserialize_point_cloud(path.read_bytes())


# ── JSON artefacts ───────────────────────────────────────────────────

def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def read_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)
