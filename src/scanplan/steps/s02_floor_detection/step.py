"""Step 02: Detect floor levels from the vertical point-density histogram."""

from __future__ import annotations

import logging
from typing import ClassVar

from scanplan.core.step_base import BaseStep
from scanplan.utils.io import read_hfpc, write_json
from ._histogram_peaks import detect_floors
from .config import FloorDetectionConfig
from .contracts import FloorDetectionInput, FloorDetectionOutput

logger = logging.getLogger(__name__)


class FloorDetectionStep(BaseStep[FloorDetectionInput, FloorDetectionOutput, FloorDetectionConfig]):
    """Find storey elevations in the full-resolution cloud and write floors.json."""

    name: ClassVar[str] = "floor_detection"
    input_type: ClassVar = FloorDetectionInput
    output_type: ClassVar = FloorDetectionOutput
    config_type: ClassVar = FloorDetectionConfig

    def validate_inputs(self, inputs: FloorDetectionInput) -> bool:
        if not inputs.cloud_path.exists():
            logger.error(f"Cloud file not found: {inputs.cloud_path}")
            return False
        return True

    def run(self, inputs: FloorDetectionInput) -> FloorDetectionOutput:
        cloud = read_hfpc(inputs.cloud_path)
        cfg = self.config
        floors = detect_floors(
            cloud,
            bin_size=cfg.bin_size,
            smoothing_sigma=cfg.smoothing_sigma,
            min_peak_ratio=cfg.min_peak_ratio,
            min_floor_separation=cfg.min_floor_separation,
            floor_thickness=cfg.floor_thickness,
            min_z_range=cfg.min_z_range,
        )
        if not floors:
            logger.warning("No floors detected; wall detection will have nothing to process")

        for f in floors:
            logger.info(
                f"  {f.label}: z={f.z_height_m:.3f}m, {f.point_count:,} pts, "
                f"confidence={f.confidence:.1f}"
            )

        floors_file = self.output_dir / "floors.json"
        write_json(floors_file, [f.model_dump() for f in floors])

        return FloorDetectionOutput(floors_file=floors_file, num_floors=len(floors))
