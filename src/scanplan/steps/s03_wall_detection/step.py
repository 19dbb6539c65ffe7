"""Step 03: Detect wall segments for the detected floors."""

from __future__ import annotations

import logging
from typing import ClassVar

import numpy as np

from scanplan.core.step_base import BaseStep
from scanplan.steps.s02_floor_detection.contracts import DetectedFloor
from scanplan.utils.io import read_hfpc, read_json, write_json
from ._wall_detection import detect_walls
from .config import WallDetectionConfig
from .contracts import FloorWalls, LabelledWall, WallDetectionInput, WallDetectionOutput

logger = logging.getLogger(__name__)


class WallDetectionStep(BaseStep[WallDetectionInput, WallDetectionOutput, WallDetectionConfig]):
    """Run wall detection per floor and write walls.json.

    Every floor is processed unless ``floor_index`` selects one; walls are
    labelled "Wall 1", "Wall 2", ... in extraction order.
    """

    name: ClassVar[str] = "wall_detection"
    input_type: ClassVar = WallDetectionInput
    output_type: ClassVar = WallDetectionOutput
    config_type: ClassVar = WallDetectionConfig

    def validate_inputs(self, inputs: WallDetectionInput) -> bool:
        if not inputs.cloud_path.exists():
            logger.error(f"Cloud file not found: {inputs.cloud_path}")
            return False
        if not inputs.floors_file.exists():
            logger.error(f"floors.json not found: {inputs.floors_file}")
            return False
        return True

    def _select_floors(self, floors: list[DetectedFloor]) -> list[DetectedFloor]:
        if self.config.floor_index is None:
            return floors
        selected = [f for f in floors if f.sort_order == self.config.floor_index]
        if not selected:
            logger.warning(f"floor_index {self.config.floor_index} not among {len(floors)} floors")
        return selected

    def run(self, inputs: WallDetectionInput) -> WallDetectionOutput:
        cfg = self.config
        cloud = read_hfpc(inputs.cloud_path)
        floors = [DetectedFloor(**f) for f in read_json(inputs.floors_file)]
        rng = np.random.default_rng(cfg.random_seed)

        results: list[FloorWalls] = []
        for floor in self._select_floors(floors):
            walls = detect_walls(
                cloud,
                floor.z_height_m,
                cfg.floor_thickness,
                rng=rng,
                wall_height=cfg.wall_height,
                max_lines=cfg.max_lines,
                ransac_iterations=cfg.ransac_iterations,
                inlier_threshold=cfg.inlier_threshold,
                min_inliers=cfg.min_inliers,
                min_wall_length=cfg.min_wall_length,
                merge_angle_threshold=cfg.merge_angle_threshold,
                merge_gap_threshold=cfg.merge_gap_threshold,
                snap_angle_threshold=cfg.snap_angle_threshold,
            )
            logger.info(f"  {floor.label}: {len(walls)} walls")
            results.append(FloorWalls(
                floor_label=floor.label,
                z_height_m=floor.z_height_m,
                sort_order=floor.sort_order,
                walls=[
                    LabelledWall(wall_label=f"Wall {i + 1}", **w.model_dump())
                    for i, w in enumerate(walls)
                ],
            ))

        walls_file = self.output_dir / "walls.json"
        write_json(walls_file, [r.model_dump() for r in results])

        return WallDetectionOutput(
            walls_file=walls_file,
            num_floors_processed=len(results),
            num_walls=sum(len(r.walls) for r in results),
        )
