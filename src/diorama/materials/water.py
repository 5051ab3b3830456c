"""Water: a flat blue block with a mirror reflection.

Water is the only block material with a nonzero default reflectivity. The
integrator blends its direct shading with the color seen along the mirror
direction:

    shaded = (1 - reflectivity) * direct + reflectivity * reflected

The body color is nearly uniform; a faint per-column ripple keeps large
water surfaces from looking completely flat without depending on the
layer (j) so stacked water stays consistent.
"""

import taichi as ti
import taichi.math as tm

from diorama.materials.terrain import hash_voxel
from diorama.materials.types import BlockMaterial

vec3 = tm.vec3
ivec3 = tm.ivec3

WATER_SALT = 0x51ED

# Largest brightness deviation of the ripple pattern
RIPPLE_AMPLITUDE = 0.04

WATER = BlockMaterial(
    name="water",
    base_color=(0.16, 0.38, 0.72),
    variation=0.0,
    reflectivity=0.45,
)


@ti.func
def water_color(base: vec3, variation: ti.f32, voxel: ivec3) -> vec3:
    """Near-uniform water color.

    Args:
        base: Base RGB color.
        variation: Extra per-voxel variation (0 for the default water).
        voxel: Integer voxel coordinates.

    Returns:
        The water color with a small ripple that depends only on (i, k).
    """
    column = ivec3(voxel[0], 0, voxel[2])
    noise = 2.0 * hash_voxel(column, ti.u32(WATER_SALT)) - 1.0
    factor = 1.0 + (RIPPLE_AMPLITUDE + variation) * noise
    return tm.clamp(base * factor, 0.0, 1.0)
