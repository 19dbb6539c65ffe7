"""Base class for all pipeline steps.

Steps exchange typed Pydantic models: the runner wires one step's Output
into the next step's Input by field name, and the CLI can print the JSON
Schema of any step. Artefacts go to ``<data_root>/interim/<step package>/``.
"""

from __future__ import annotations

import time
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, Optional, TypeVar, ClassVar

from pydantic import BaseModel

from .contracts import StepMeta

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)
ConfigT = TypeVar("ConfigT", bound=BaseModel)

logger = logging.getLogger(__name__)

STEP_META_FILE = "step_meta.json"


class BaseStep(ABC, Generic[InputT, OutputT, ConfigT]):
    """Abstract base for pipeline steps.

    Subclasses set ``name``, ``input_type``, ``output_type`` and
    ``config_type`` and implement ``validate_inputs`` and ``run``:

        class DecimateStep(BaseStep[DecimateInput, DecimateOutput, DecimateConfig]):
            name = "decimate"
            input_type = DecimateInput
            output_type = DecimateOutput
            config_type = DecimateConfig
    """

    name: ClassVar[str] = ""
    input_type: ClassVar[type[BaseModel]]
    output_type: ClassVar[type[BaseModel]]
    config_type: ClassVar[type[BaseModel]]

    def __init__(self, config: ConfigT, data_root: Path):
        self.config = config
        self.data_root = Path(data_root)
        self.last_meta: Optional[StepMeta] = None

    @property
    def output_dir(self) -> Path:
        """Per-step artefact directory, named after the step package (e.g. s01_decimate)."""
        return self.data_root / "interim" / self.__module__.split(".")[-2]

    @abstractmethod
    def run(self, inputs: InputT) -> OutputT:
        """Execute this pipeline step. Returns output model."""
        ...

    @abstractmethod
    def validate_inputs(self, inputs: InputT) -> bool:
        """Check that all required input artefacts exist; log and return False otherwise."""
        ...

    def execute(self, inputs: InputT) -> OutputT:
        """Validate, run and time the step, then record its StepMeta."""
        step_name = self.name or self.__class__.__name__
        logger.info(f"[{step_name}] Validating inputs...")

        if not self.validate_inputs(inputs):
            raise ValueError(f"[{step_name}] Input validation failed")

        logger.info(f"[{step_name}] Starting...")
        t0 = time.perf_counter()
        result = self.run(inputs)
        elapsed = time.perf_counter() - t0

        self.last_meta = StepMeta(
            step_name=step_name,
            elapsed_seconds=round(elapsed, 3),
            params=self.config.model_dump(mode="json"),
        )
        self.output_dir.mkdir(parents=True, exist_ok=True)
        (self.output_dir / STEP_META_FILE).write_text(
            self.last_meta.model_dump_json(indent=2), encoding="utf-8"
        )
        logger.info(f"[{step_name}] Done in {elapsed:.1f}s")
        return result

    @classmethod
    def get_input_schema(cls) -> dict:
        """Return JSON schema for inputs."""
        return cls.input_type.model_json_schema()

    @classmethod
    def get_output_schema(cls) -> dict:
        """Return JSON schema for outputs."""
        return cls.output_type.model_json_schema()

    @classmethod
    def get_config_schema(cls) -> dict:
        """Return JSON schema for config."""
        return cls.config_type.model_json_schema()
