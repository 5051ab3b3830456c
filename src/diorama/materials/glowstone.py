"""Glowstone: a bright yellow block that emits light.

Glowstone scatters light diffusely like the terrain blocks and additionally
emits light. Emission is modelled in steady state: the integrator adds

    emission = emissive * color

to the shaded color regardless of the sun and the ambient level, so glowstone
stays visible through the night.
"""

import taichi as ti
import taichi.math as tm

from diorama.materials.types import BlockMaterial

vec3 = tm.vec3
ivec3 = tm.ivec3

GLOWSTONE = BlockMaterial(
    name="glowstone",
    base_color=(1.0, 0.86, 0.42),
    variation=0.0,
    emissive=0.85,
)


@ti.func
def glowstone_color(base: vec3, variation: ti.f32, voxel: ivec3) -> vec3:
    """Constant glowstone color (the voxel coordinates are ignored)."""
    return base

