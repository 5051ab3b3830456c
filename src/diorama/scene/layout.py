"""Built-in diorama layout.

Generates the default voxel layout for a chunk of any size: a stone base
capped with grass, a small grassy hill, a water pond, a tree with a wooden
trunk and a leaf canopy, and glowstone lamps that keep the scene lit at
night. Feature positions are fractions of the chunk dimensions, so the same
scene scales with the chunk. Generation is deterministic.

Layouts are NumPy arrays of shape (nx, ny, nz) indexed [i, j, k], with j the
vertical axis, holding MaterialType values.

Example:
    >>> from diorama.scene.layout import build_default_layout
    >>> layout = build_default_layout((16, 10, 16))
    >>> layout.shape
    (16, 10, 16)
"""

import numpy as np
import numpy.typing as npt

from diorama.materials.types import MaterialType

EMPTY = int(MaterialType.EMPTY)
WATER = int(MaterialType.WATER)
GRASS = int(MaterialType.GRASS)
STONE = int(MaterialType.STONE)
WOOD = int(MaterialType.WOOD)
GLOWSTONE = int(MaterialType.GLOWSTONE)

# Feature placement as fractions of (nx, nz)
HILL_CENTER = (0.25, 0.25)
HILL_RADIUS = 0.35
HILL_HEIGHT = 3
POND_CENTER = (0.65, 0.7)
POND_RADIUS = 0.2
TREE_POSITION = (0.75, 0.3)
TRUNK_HEIGHT = 4
LAMP_POSITIONS = ((0.15, 0.85), (0.9, 0.9), (0.45, 0.5))


def _cell(fraction: float, n: int) -> int:
    return min(int(fraction * n), n - 1)


def _radial_mask(nx: int, nz: int, center: tuple[float, float], radius: float) -> npt.NDArray[np.float64]:
    """Normalized distance of each column center from a fractional center point."""
    ii, kk = np.meshgrid(np.arange(nx) + 0.5, np.arange(nz) + 0.5, indexing="ij")
    scale = radius * min(nx, nz)
    return np.hypot(ii - center[0] * nx, kk - center[1] * nz) / scale


def terrain_heights(shape: tuple[int, int, int]) -> npt.NDArray[np.int64]:
    """Number of solid cells in each (i, k) column before features are added."""
    nx, ny, nz = shape
    ground = max(1, ny // 4)
    falloff = np.clip(1.0 - _radial_mask(nx, nz, HILL_CENTER, HILL_RADIUS), 0.0, 1.0)
    hill = np.floor(HILL_HEIGHT * falloff).astype(np.int64)
    return np.minimum(ground + hill, ny)


def pond_mask(shape: tuple[int, int, int]) -> npt.NDArray[np.bool_]:
    """Columns covered by the pond."""
    nx, _, nz = shape
    return _radial_mask(nx, nz, POND_CENTER, POND_RADIUS) < 1.0


def build_default_layout(shape: tuple[int, int, int] = (16, 10, 16)) -> npt.NDArray[np.int32]:
    """Generate the built-in diorama for a chunk of the given dimensions.

    Args:
        shape: Chunk dimensions (nx, ny, nz); each must be positive.

    Returns:
        An int32 array of MaterialType values with the given shape.

    Raises:
        ValueError: If the shape is not three positive integers.
    """
    if len(shape) != 3 or min(shape) <= 0:
        raise ValueError(f"Layout shape must be three positive integers, got {shape}")
    nx, ny, nz = (int(n) for n in shape)
    layout = np.zeros((nx, ny, nz), dtype=np.int32)

    # Stone base capped with grass
    heights = terrain_heights((nx, ny, nz))
    jj = np.arange(ny)[None, :, None]
    layout[jj < heights[:, None, :]] = STONE
    layout[jj == heights[:, None, :] - 1] = GRASS

    # Pond: flatten to ground level and fill the top layer with water
    ground = max(1, ny // 4)
    pond = pond_mask((nx, ny, nz))
    layout[pond[:, None, :] & (jj >= ground)] = EMPTY
    layout[:, ground - 1, :][pond] = WATER
    heights[pond] = ground

    # Tree: wooden trunk with a 3x3 leaf canopy around its top
    tree_i, tree_k = _cell(TREE_POSITION[0], nx), _cell(TREE_POSITION[1], nz)
    if not pond[tree_i, tree_k] and heights[tree_i, tree_k] < ny:
        base = int(heights[tree_i, tree_k])
        top = min(base + TRUNK_HEIGHT, ny) - 1
        layout[tree_i, base : top + 1, tree_k] = WOOD
        for j in range(top - 1, top + 2):
            for i in range(tree_i - 1, tree_i + 2):
                for k in range(tree_k - 1, tree_k + 2):
                    if 0 <= i < nx and 0 <= j < ny and 0 <= k < nz and layout[i, j, k] == EMPTY:
                        layout[i, j, k] = GRASS

    # Glowstone lamps resting on the terrain
    for fx, fz in LAMP_POSITIONS:
        i, k = _cell(fx, nx), _cell(fz, nz)
        j = int(heights[i, k])
        if not pond[i, k] and j < ny and layout[i, j, k] == EMPTY:
            layout[i, j, k] = GLOWSTONE

    return layout


def material_counts(layout: npt.ArrayLike) -> dict[MaterialType, int]:
    """Count the voxels of each block material in a layout."""
    grid = np.asarray(layout)
    return {tag: int(np.count_nonzero(grid == int(tag))) for tag in MaterialType if tag != MaterialType.EMPTY}
