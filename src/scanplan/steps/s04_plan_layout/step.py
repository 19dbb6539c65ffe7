"""Step 04: Paper-space plan layout for one floor, handed to the PDF/DXF exporter."""

from __future__ import annotations

import logging
from typing import ClassVar

from scanplan.core.step_base import BaseStep
from scanplan.steps.s03_wall_detection.contracts import FloorWalls
from scanplan.utils.io import read_json, write_json
from ._layout import calculate_layout
from .config import PlanLayoutConfig
from .contracts import ExportOptions, PlanLayoutInput, PlanLayoutOutput

logger = logging.getLogger(__name__)


class PlanLayoutStep(BaseStep[PlanLayoutInput, PlanLayoutOutput, PlanLayoutConfig]):
    """Lay out the walls of the configured floor and write layout.json.

    layout.json carries the camelCase layout plus the export options the
    drawing exporter needs for its title block.
    """

    name: ClassVar[str] = "plan_layout"
    input_type: ClassVar = PlanLayoutInput
    output_type: ClassVar = PlanLayoutOutput
    config_type: ClassVar = PlanLayoutConfig

    def validate_inputs(self, inputs: PlanLayoutInput) -> bool:
        if not inputs.walls_file.exists():
            logger.error(f"walls.json not found: {inputs.walls_file}")
            return False
        return True

    def _plan_reference(self) -> str:
        return f"{self.config.plan_reference_prefix}{self.config.plan_number:04d}"

    def run(self, inputs: PlanLayoutInput) -> PlanLayoutOutput:
        cfg = self.config
        floors = [FloorWalls(**f) for f in read_json(inputs.walls_file)]
        floor = next((f for f in floors if f.sort_order == cfg.floor_index), None)

        if floor is None:
            logger.warning(
                f"Floor {cfg.floor_index} has no wall set; laying out an empty sheet"
            )
            floor_label, walls = "", []
        else:
            floor_label, walls = floor.floor_label, floor.walls

        options = ExportOptions(
            format=cfg.format,
            paper_size=cfg.paper_size,
            scale=cfg.scale,
            floor_label=floor_label,
            project_name=cfg.project_name,
            plan_reference=self._plan_reference(),
        )
        layout = calculate_layout(walls, options)
        logger.info(
            f"Layout for '{floor_label or '-'}': {len(layout.walls)} walls, "
            f"{len(layout.dimensions)} dimensions on {cfg.paper_size} at 1:{layout.scale}"
        )

        layout_file = self.output_dir / "layout.json"
        write_json(layout_file, {
            "options": options.model_dump(),
            "layout": layout.model_dump(by_alias=True),
        })

        return PlanLayoutOutput(
            layout_file=layout_file,
            floor_label=floor_label,
            num_walls=len(layout.walls),
            num_dimensions=len(layout.dimensions),
        )
