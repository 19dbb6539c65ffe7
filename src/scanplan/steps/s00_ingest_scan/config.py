"""Configuration for Step 00: Ingest a raw laser scan."""

from pydantic import BaseModel, Field


class IngestScanConfig(BaseModel):
    keep_colors: bool = Field(True, description="Keep per-point colour when the scan carries it")
    allowed_suffixes: list[str] = Field(
        [".las", ".laz", ".ply", ".e57", ".hfpc"], description="Accepted scan file extensions"
    )
