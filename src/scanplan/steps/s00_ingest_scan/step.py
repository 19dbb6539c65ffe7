"""Step 00: Decode a raw scan (LAS/LAZ/PLY/E57/HFPC) into the pipeline cloud format."""

from __future__ import annotations

import logging
from typing import ClassVar

from scanplan.core.contracts import PointCloud
from scanplan.core.step_base import BaseStep
from scanplan.utils.io import write_hfpc, write_json
from ._decoders import detect_scan_format, parse_point_cloud
from .config import IngestScanConfig
from .contracts import IngestScanInput, IngestScanOutput

logger = logging.getLogger(__name__)


class IngestScanStep(BaseStep[IngestScanInput, IngestScanOutput, IngestScanConfig]):
    """Decode a scan file and store it as a full-resolution HFPC cloud.

    Produces cloud.hfpc + metadata.json consumed by decimation, floor and
    wall detection.
    """

    name: ClassVar[str] = "ingest_scan"
    input_type: ClassVar = IngestScanInput
    output_type: ClassVar = IngestScanOutput
    config_type: ClassVar = IngestScanConfig

    def validate_inputs(self, inputs: IngestScanInput) -> bool:
        if not inputs.scan_path.exists():
            logger.error(f"Scan file not found: {inputs.scan_path}")
            return False
        suffix = inputs.scan_path.suffix.lower()
        if suffix not in self.config.allowed_suffixes:
            logger.error(f"Unsupported scan extension: {suffix}")
            return False
        return True

    def run(self, inputs: IngestScanInput) -> IngestScanOutput:
        output_dir = self.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)

        raw = inputs.scan_path.read_bytes()
        source_format = detect_scan_format(raw)
        cloud = parse_point_cloud(raw)

        if cloud.has_colors and not self.config.keep_colors:
            cloud = PointCloud(positions=cloud.positions, colors=None, bounds=cloud.bounds)
            logger.info("Dropped per-point colour (keep_colors=False)")

        cloud_path = output_dir / "cloud.hfpc"
        size = write_hfpc(cloud_path, cloud)
        logger.info(f"Saved {cloud.count:,} points -> {cloud_path} ({size / 1e6:.1f} MB)")

        bounds = cloud.bounds.to_model()
        metadata = {
            "source": str(inputs.scan_path),
            "source_format": source_format,
            "source_size_bytes": len(raw),
            "num_points": cloud.count,
            "has_colors": cloud.has_colors,
            "bounds_min": bounds.min,
            "bounds_max": bounds.max,
        }
        metadata_path = output_dir / "metadata.json"
        write_json(metadata_path, metadata)

        return IngestScanOutput(
            cloud_path=cloud_path,
            metadata_path=metadata_path,
            num_points=cloud.count,
            has_colors=cloud.has_colors,
            bounds=bounds,
        )
