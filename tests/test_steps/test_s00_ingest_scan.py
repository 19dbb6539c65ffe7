"""Tests for S00: Ingest scan step and scan decoders."""

import json
from pathlib import Path

import numpy as np
import pytest

from scanplan.core.contracts import PointCloud
from scanplan.steps.s00_ingest_scan._decoders import (
    ParseError,
    detect_scan_format,
    load_point_cloud,
    parse_point_cloud,
)
from scanplan.steps.s00_ingest_scan.config import IngestScanConfig
from scanplan.steps.s00_ingest_scan.contracts import IngestScanInput, IngestScanOutput
from scanplan.steps.s00_ingest_scan.step import IngestScanStep
from scanplan.utils.io import read_hfpc, serialize_point_cloud


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def scan_points(rng) -> np.ndarray:
    return rng.uniform([0, 0, 0], [10, 8, 3], (400, 3))


@pytest.fixture
def scan_colors(rng) -> np.ndarray:
    return rng.uniform(0.0, 1.0, (400, 3))


# ---------------------------------------------------------------------------
# Format detection
# ---------------------------------------------------------------------------

class TestDetectFormat:
    def test_known_magics(self):
        assert detect_scan_format(b"LASF" + b"\x00" * 20) == "las"
        assert detect_scan_format(b"HFPC" + b"\x00" * 20) == "hfpc"
        assert detect_scan_format(b"ply\nformat ascii 1.0\n") == "ply"
        assert detect_scan_format(b"ASTM-E57" + b"\x00" * 20) == "e57"

    def test_unknown(self):
        with pytest.raises(ParseError, match="Unsupported"):
            detect_scan_format(b"PK\x03\x04zipfile")


# ---------------------------------------------------------------------------
# LAS / LAZ
# ---------------------------------------------------------------------------

class TestLas:
    def test_positions_and_colors(self, tmp_path: Path, scan_points, scan_colors, las_writer):
        path = las_writer(tmp_path / "scan.las", scan_points, scan_colors)
        cloud = load_point_cloud(path)

        assert cloud.count == 400
        assert cloud.has_colors
        np.testing.assert_allclose(cloud.positions, scan_points, atol=1e-3)
        np.testing.assert_allclose(cloud.colors, scan_colors, atol=1e-4)
        assert cloud.colors.min() >= 0.0 and cloud.colors.max() <= 1.0

    def test_without_colors(self, tmp_path: Path, scan_points, las_writer):
        cloud = load_point_cloud(las_writer(tmp_path / "scan.las", scan_points))
        assert cloud.colors is None

    def test_bounds(self, tmp_path: Path, scan_points, las_writer):
        cloud = load_point_cloud(las_writer(tmp_path / "scan.las", scan_points))
        np.testing.assert_allclose(cloud.bounds.min, scan_points.min(axis=0), atol=1e-3)
        np.testing.assert_allclose(cloud.bounds.max, scan_points.max(axis=0), atol=1e-3)

    def test_laz(self, tmp_path: Path, scan_points, las_writer):
        path = las_writer(tmp_path / "scan.laz", scan_points)
        cloud = load_point_cloud(path)
        assert cloud.count == 400
        np.testing.assert_allclose(cloud.positions, scan_points, atol=1e-3)

    def test_8bit_colors_in_16bit_fields(self, tmp_path: Path, scan_points, las_writer):
        # Writers that store 0-255 in the LAS colour fields
        colors = np.full((400, 3), 200.0 / 65535)
        cloud = load_point_cloud(las_writer(tmp_path / "scan.las", scan_points, colors))
        np.testing.assert_allclose(cloud.colors, 200.0 / 255.0, atol=1e-6)


# ---------------------------------------------------------------------------
# PLY
# ---------------------------------------------------------------------------

class TestPly:
    def test_binary_with_uchar_colors(self, tmp_path: Path, scan_points, ply_writer):
        rgb = np.tile(np.array([[255, 0, 51]], dtype=np.uint8), (400, 1))
        cloud = load_point_cloud(ply_writer(tmp_path / "scan.ply", scan_points, rgb))

        assert cloud.count == 400
        np.testing.assert_allclose(cloud.positions, scan_points.astype(np.float32))
        np.testing.assert_allclose(cloud.colors[0], [1.0, 0.0, 0.2], atol=1e-6)

    def test_ascii_without_colors(self, tmp_path: Path, scan_points, ply_writer):
        cloud = load_point_cloud(ply_writer(tmp_path / "scan.ply", scan_points, text=True))
        assert cloud.count == 400
        assert cloud.colors is None

    def test_missing_xyz(self, tmp_path: Path):
        from plyfile import PlyData, PlyElement

        vertex = np.zeros(5, dtype=[("a", "f4"), ("b", "f4")])
        path = tmp_path / "bad.ply"
        PlyData([PlyElement.describe(vertex, "vertex")]).write(str(path))
        with pytest.raises(ParseError, match="x/y/z"):
            load_point_cloud(path)

    def test_zero_vertices(self, tmp_path: Path, ply_writer):
        path = ply_writer(tmp_path / "empty.ply", np.empty((0, 3)))
        with pytest.raises(ParseError, match="No position data"):
            load_point_cloud(path)


# ---------------------------------------------------------------------------
# E57
# ---------------------------------------------------------------------------

class TestE57:
    def test_positions_and_colors(self, tmp_path: Path, scan_points, e57_writer):
        rgb = np.tile(np.array([[255, 0, 51]], dtype=np.uint8), (400, 1))
        cloud = load_point_cloud(e57_writer(tmp_path / "scan.e57", scan_points, rgb))

        assert cloud.count == 400
        np.testing.assert_allclose(cloud.positions, scan_points.astype(np.float32), atol=1e-5)
        np.testing.assert_allclose(cloud.colors[0], [1.0, 0.0, 0.2], atol=1e-6)

    def test_without_colors(self, tmp_path: Path, scan_points, e57_writer):
        cloud = load_point_cloud(e57_writer(tmp_path / "scan.e57", scan_points))
        assert cloud.count == 400
        assert cloud.colors is None

    def test_corrupt(self):
        with pytest.raises(ParseError, match="E57"):
            parse_point_cloud(b"ASTM-E57" + b"\x00" * 64)


# ---------------------------------------------------------------------------
# HFPC and failures
# ---------------------------------------------------------------------------

class TestParse:
    def test_hfpc_passthrough(self, scan_points, scan_colors):
        original = PointCloud.from_arrays(scan_points, scan_colors)
        cloud = parse_point_cloud(serialize_point_cloud(original))
        np.testing.assert_array_equal(cloud.positions, original.positions)
        np.testing.assert_array_equal(cloud.colors, original.colors)

    def test_empty_buffer(self):
        with pytest.raises(ParseError, match="Empty"):
            parse_point_cloud(b"")

    def test_garbage(self):
        with pytest.raises(ParseError):
            parse_point_cloud(b"\x00\x01\x02\x03 not a scan")

    def test_corrupt_hfpc(self, scan_points):
        data = serialize_point_cloud(PointCloud.from_arrays(scan_points))
        with pytest.raises(ParseError, match="HFPC"):
            parse_point_cloud(data[:-1])

    def test_ply_nan_vertex_dropped(self, tmp_path: Path, scan_points, ply_writer):
        pts = scan_points.copy()
        pts[0, 2] = np.nan
        pts[1, 0] = np.inf
        cloud = load_point_cloud(ply_writer(tmp_path / "scan.ply", pts))

        assert cloud.count == 398
        assert np.isfinite(cloud.positions).all()
        np.testing.assert_array_equal(cloud.bounds.min, cloud.positions.min(axis=0))
        np.testing.assert_array_equal(cloud.bounds.max, cloud.positions.max(axis=0))

    def test_hfpc_nan_rows_dropped_with_colors(self, scan_points, scan_colors):
        pts = scan_points.copy()
        pts[5] = np.nan
        cloud = parse_point_cloud(serialize_point_cloud(PointCloud.from_arrays(pts, scan_colors)))

        assert cloud.count == 399
        np.testing.assert_array_equal(cloud.colors[5], scan_colors[6].astype(np.float32))
        assert np.isfinite(cloud.bounds.min).all()

    def test_all_non_finite(self, tmp_path: Path, ply_writer):
        path = ply_writer(tmp_path / "nan.ply", np.full((3, 3), np.nan))
        with pytest.raises(ParseError, match="No position data"):
            load_point_cloud(path)

    def test_empty_hfpc(self):
        data = serialize_point_cloud(PointCloud.from_arrays(np.empty((0, 3))))
        with pytest.raises(ParseError, match="No position data"):
            parse_point_cloud(data)


# ---------------------------------------------------------------------------
# Step
# ---------------------------------------------------------------------------

class TestIngestScanStep:
    def test_execute(self, data_root: Path, scan_points, scan_colors, las_writer):
        scan = las_writer(data_root / "raw" / "scan.las", scan_points, scan_colors)
        step = IngestScanStep(config=IngestScanConfig(), data_root=data_root)
        output = step.execute(IngestScanInput(scan_path=scan))

        assert isinstance(output, IngestScanOutput)
        assert output.num_points == 400
        assert output.has_colors
        assert output.cloud_path == data_root / "interim" / "s00_ingest_scan" / "cloud.hfpc"

        cloud = read_hfpc(output.cloud_path)
        assert cloud.count == 400
        assert cloud.has_colors

        with open(output.metadata_path) as f:
            meta = json.load(f)
        assert meta["source_format"] == "las"
        assert meta["num_points"] == 400
        assert meta["bounds_min"] == output.bounds.min

    def test_drop_colors(self, data_root: Path, scan_points, scan_colors, las_writer):
        scan = las_writer(data_root / "raw" / "scan.las", scan_points, scan_colors)
        step = IngestScanStep(config=IngestScanConfig(keep_colors=False), data_root=data_root)
        output = step.execute(IngestScanInput(scan_path=scan))
        assert not output.has_colors
        assert read_hfpc(output.cloud_path).colors is None

    def test_execute_e57(self, data_root: Path, scan_points, e57_writer):
        scan = e57_writer(data_root / "raw" / "scan.e57", scan_points)
        step = IngestScanStep(config=IngestScanConfig(), data_root=data_root)
        output = step.execute(IngestScanInput(scan_path=scan))

        assert output.num_points == 400
        with open(output.metadata_path) as f:
            assert json.load(f)["source_format"] == "e57"

    def test_validate_missing_file(self, data_root: Path):
        step = IngestScanStep(config=IngestScanConfig(), data_root=data_root)
        assert not step.validate_inputs(IngestScanInput(scan_path=data_root / "nope.las"))

    def test_validate_unsupported_suffix(self, data_root: Path):
        path = data_root / "raw" / "scan.xyz"
        path.write_bytes(b"0 0 0\n")
        step = IngestScanStep(config=IngestScanConfig(), data_root=data_root)
        assert not step.validate_inputs(IngestScanInput(scan_path=path))
        with pytest.raises(ValueError):
            step.execute(IngestScanInput(scan_path=path))

    def test_corrupt_scan_raises_parse_error(self, data_root: Path):
        path = data_root / "raw" / "scan.ply"
        path.write_bytes(b"not a ply file")
        step = IngestScanStep(config=IngestScanConfig(), data_root=data_root)
        with pytest.raises(ParseError):
            step.execute(IngestScanInput(scan_path=path))
