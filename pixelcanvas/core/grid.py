"""Grid Model — fixed-size 2D color-cell container and its text codec.

Invariants:
    - Every row has identical length (xsize); row count equals ysize
    - Indexed grid[y][x] (row = y, col = x)
    - xsize < 1 or ysize < 1 yields an empty grid ([]), never an error
    - set_cell never clamps: any out-of-bounds coordinate raises IndexError
    - serialize_grid / deserialize_grid are inverse on well-formed grids

Design Decisions:
    - Plain nested lists over numpy: grids are small and cross the wire as JSON
    - Empty stored text regenerates a fresh grid (rows created before the first save)
    - Undecodable stored text is logged and regenerated the same way; one bad row
      never blocks startup or a gallery listing
"""

import json
import logging

from pixelcanvas.core.domain_types import DEFAULT_COLOR, Grid

logger = logging.getLogger(__name__)


def create_grid(width: int, height: int, fill_color: str = DEFAULT_COLOR) -> Grid:
    """Return a height x width grid filled with fill_color ([] when degenerate)."""
    if width < 1 or height < 1:
        return []
    return [[fill_color for _ in range(width)] for _ in range(height)]


def set_cell(grid: Grid, x: int, y: int, color: str) -> None:
    """Paint one cell in place. Raises IndexError outside the grid."""
    if y < 0 or y >= len(grid) or x < 0 or x >= len(grid[y]):
        raise IndexError(f"cell ({x}, {y}) outside grid")
    grid[y][x] = color


def serialize_grid(grid: Grid) -> str:
    return json.dumps(grid, separators=(",", ":"))


def deserialize_grid(
    text: str, xsize: int, ysize: int, fill_color: str = DEFAULT_COLOR,
) -> Grid:
    """Decode stored grid text. Empty text regenerates from the stored dimensions.

    Rows written by the legacy client quoted colors with single quotes;
    those are normalized before decoding.
    """
    if not text:
        return create_grid(xsize, ysize, fill_color)
    try:
        grid = json.loads(text)
    except json.JSONDecodeError:
        try:
            grid = json.loads(text.replace("'", '"'))
        except json.JSONDecodeError as e:
            logger.error(f"Stored grid text is not decodable, regenerating: {e}")
            return create_grid(xsize, ysize, fill_color)
    if not isinstance(grid, list):
        logger.error(f"Stored grid decoded to {type(grid).__name__}, regenerating")
        return create_grid(xsize, ysize, fill_color)
    return grid
