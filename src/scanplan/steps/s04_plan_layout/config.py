"""Configuration for Step 04: Plan layout."""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class PlanLayoutConfig(BaseModel):
    floor_index: int = Field(0, ge=0, description="Floor (sort_order) to lay out")
    format: Literal["pdf", "dxf"] = Field("pdf", description="Target exporter format")
    paper_size: str = Field("A3", description="Paper size: A1, A3 or A4")
    scale: str = Field("1:100", description="Drawing scale as '1:N'")
    project_name: Optional[str] = Field(None, description="Title-block project name")
    plan_number: int = Field(1, ge=1, description="Sequence number for the plan reference")
    plan_reference_prefix: str = Field("HF-PLN-", description="Plan reference prefix")
