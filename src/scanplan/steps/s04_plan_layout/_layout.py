"""Paper-space layout of detected walls, shared by the PDF and DXF exporters.

Walls (metres, scan coordinates) are scaled to 1:N, centred in the drawable
area of the sheet (paper minus margins and title block) and annotated with
offset dimension lines.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

from scanplan.utils.geometry import round_half_up
from .contracts import DimensionLine, ExportOptions, PaperWall, PlanLayout

logger = logging.getLogger(__name__)

# (width, height) in mm, landscape
PAPER_SIZES: Mapping[str, tuple[float, float]] = MappingProxyType({
    "A1": (841.0, 594.0),
    "A3": (420.0, 297.0),
    "A4": (297.0, 210.0),
})
DEFAULT_PAPER_SIZE = "A3"
DEFAULT_SCALE = 100

TITLE_BLOCK_HEIGHT = 40.0  # mm
MARGIN = 15.0  # mm
DIMENSION_OFFSET = 8.0  # mm
MIN_DIMENSION_LENGTH = 1.0  # mm on paper

_SCALE_RE = re.compile(r"1:(\d+)")


def parse_scale(scale: str | None) -> int:
    """N from a '1:N' scale string; DEFAULT_SCALE when missing, invalid or zero."""
    match = _SCALE_RE.search(scale or "")
    if not match:
        return DEFAULT_SCALE
    value = int(match.group(1))
    return value if value > 0 else DEFAULT_SCALE


def paper_dimensions(paper_size: str | None) -> tuple[float, float]:
    return PAPER_SIZES.get(paper_size or "", PAPER_SIZES[DEFAULT_PAPER_SIZE])


def _coords(wall: Any) -> tuple[float, float, float, float, float]:
    """start_x, start_y, end_x, end_y, length_mm from a model, object or mapping."""
    if isinstance(wall, Mapping):
        get = wall.__getitem__
    else:
        def get(name):
            return getattr(wall, name)
    return (
        float(get("start_x")),
        float(get("start_y")),
        float(get("end_x")),
        float(get("end_y")),
        float(get("length_mm")),
    )


def _dimension_line(wall: PaperWall) -> DimensionLine | None:
    """Dimension line offset along the wall's left-hand normal, or None if too short."""
    dx = wall.x2 - wall.x1
    dy = wall.y2 - wall.y1
    length = math.hypot(dx, dy)
    if length < MIN_DIMENSION_LENGTH:
        return None
    nx = -dy / length * DIMENSION_OFFSET
    ny = dx / length * DIMENSION_OFFSET
    return DimensionLine(
        x1=wall.x1 + nx,
        y1=wall.y1 + ny,
        x2=wall.x2 + nx,
        y2=wall.y2 + ny,
        label=str(int(round_half_up(wall.length_mm))),
    )


def calculate_layout(walls: Sequence[Any], options: ExportOptions) -> PlanLayout:
    """Compute paper-space geometry for a set of walls.

    Args:
        walls: Objects or mappings with start_x/start_y/end_x/end_y (metres)
            and length_mm.
        options: Export options; only paper_size and scale affect geometry.

    Returns:
        The layout. An empty wall list gives the requested sheet at the
        default scale with no geometry.
    """
    paper_width, paper_height = paper_dimensions(options.paper_size)

    if not walls:
        return PlanLayout(
            paper_width=paper_width,
            paper_height=paper_height,
            scale=DEFAULT_SCALE,
            offset_x=0.0,
            offset_y=0.0,
        )

    scale = parse_scale(options.scale)
    drawable_width = paper_width - 2 * MARGIN
    drawable_height = paper_height - TITLE_BLOCK_HEIGHT - 2 * MARGIN

    coords = [_coords(w) for w in walls]
    min_x = min(min(c[0], c[2]) for c in coords)
    min_y = min(min(c[1], c[3]) for c in coords)
    max_x = max(max(c[0], c[2]) for c in coords)
    max_y = max(max(c[1], c[3]) for c in coords)

    # Wall extent on paper (mm) at 1:scale
    extent_x = (max_x - min_x) * 1000 / scale
    extent_y = (max_y - min_y) * 1000 / scale

    offset_x = MARGIN + (drawable_width - extent_x) / 2
    offset_y = MARGIN + TITLE_BLOCK_HEIGHT + (drawable_height - extent_y) / 2

    if extent_x > drawable_width or extent_y > drawable_height:
        logger.warning(
            f"Plan {extent_x:.0f}x{extent_y:.0f}mm at 1:{scale} exceeds the "
            f"{drawable_width:.0f}x{drawable_height:.0f}mm drawable area of {options.paper_size}"
        )

    paper_walls = [
        PaperWall(
            x1=offset_x + (sx - min_x) * 1000 / scale,
            y1=offset_y + (sy - min_y) * 1000 / scale,
            x2=offset_x + (ex - min_x) * 1000 / scale,
            y2=offset_y + (ey - min_y) * 1000 / scale,
            length_mm=length_mm,
        )
        for sx, sy, ex, ey, length_mm in coords
    ]
    dimensions = [d for d in (_dimension_line(w) for w in paper_walls) if d is not None]

    return PlanLayout(
        paper_width=paper_width,
        paper_height=paper_height,
        scale=scale,
        offset_x=offset_x,
        offset_y=offset_y,
        walls=paper_walls,
        dimensions=dimensions,
    )
