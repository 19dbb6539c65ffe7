"""Step 01: Voxel-grid decimation of the ingested cloud into a viewer payload."""

from __future__ import annotations

import logging
from typing import ClassVar

from scanplan.core.step_base import BaseStep
from scanplan.utils.io import read_hfpc, write_hfpc
from ._voxel_grid import decimate
from .config import DecimateConfig
from .contracts import DecimateInput, DecimateOutput

logger = logging.getLogger(__name__)


class DecimateStep(BaseStep[DecimateInput, DecimateOutput, DecimateConfig]):
    """Downsample the cloud to the configured point budget and store it as HFPC."""

    name: ClassVar[str] = "decimate"
    input_type: ClassVar = DecimateInput
    output_type: ClassVar = DecimateOutput
    config_type: ClassVar = DecimateConfig

    def validate_inputs(self, inputs: DecimateInput) -> bool:
        if not inputs.cloud_path.exists():
            logger.error(f"Cloud file not found: {inputs.cloud_path}")
            return False
        return True

    def run(self, inputs: DecimateInput) -> DecimateOutput:
        cloud = read_hfpc(inputs.cloud_path)
        decimated = decimate(cloud, self.config.target_points)

        decimated_path = self.output_dir / self.config.output_name
        size = write_hfpc(decimated_path, decimated)
        logger.info(f"Saved {decimated.count:,} points -> {decimated_path}")

        return DecimateOutput(
            decimated_path=decimated_path,
            decimated_count=decimated.count,
            decimated_size_bytes=size,
        )
