"""I/O contracts for Step 04: Plan layout (paper-space geometry for exporters)."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ExportOptions(BaseModel):
    format: Literal["pdf", "dxf"] = "pdf"
    paper_size: str = Field("A3", description="A1, A3 or A4; anything else falls back to A3")
    scale: str = Field("1:100", description="Drawing scale as '1:N'")
    floor_label: str = ""
    project_name: Optional[str] = None
    plan_reference: str = ""


class _CamelModel(BaseModel):
    """Exporter/UI payloads use camelCase keys; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaperWall(_CamelModel):
    x1: float
    y1: float
    x2: float
    y2: float
    length_mm: float = Field(..., alias="length_mm", description="Real-world wall length, not paper length")


class DimensionLine(_CamelModel):
    x1: float
    y1: float
    x2: float
    y2: float
    label: str


class PlanLayout(_CamelModel):
    paper_width: float = Field(..., description="Paper width (mm)")
    paper_height: float = Field(..., description="Paper height (mm)")
    scale: int = Field(..., description="N of the 1:N drawing scale")
    offset_x: float = Field(0.0, description="Paper X of the wall bounding-box origin (mm)")
    offset_y: float = Field(0.0, description="Paper Y of the wall bounding-box origin (mm)")
    walls: list[PaperWall] = Field(default_factory=list)
    dimensions: list[DimensionLine] = Field(default_factory=list)


class PlanLayoutInput(BaseModel):
    walls_file: Path = Field(..., description="Path to walls.json from s03")


class PlanLayoutOutput(BaseModel):
    layout_file: Path = Field(..., description="Path to layout.json (layout + export metadata)")
    floor_label: str = Field("", description="Floor the layout was computed for")
    num_walls: int = Field(0)
    num_dimensions: int = Field(0)
