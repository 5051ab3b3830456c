"""Procedurally colored terrain blocks: grass, stone and wood.

These materials scatter light diffusely and carry no reflection or emission.
Their color is a base hue perturbed per voxel by a pure integer hash of the
voxel coordinates, so neighbouring blocks look varied while any given block
always renders with the same color:

    color(i, j, k) = clamp(base * (1 + variation * (2 * h(i, j, k) - 1)))

Each family adds its own twist on top of the brightness jitter: grass shifts
its green channel, stone gets occasional dark speckles and wood darkens every
other layer to suggest grain rings.

Example:
    >>> # Inside a Taichi kernel:
    >>> # color = grass_color(base, variation, ivec3(3, 4, 5))
"""

import taichi as ti
import taichi.math as tm

from diorama.materials.types import BlockMaterial

# Type aliases for 3D vectors
vec3 = tm.vec3
ivec3 = tm.ivec3

# Per-family hash salts so the three families do not share a noise pattern
GRASS_SALT = 0x9E37
STONE_SALT = 0x7F4A
WOOD_SALT = 0x3C6E

GRASS = BlockMaterial(
    name="grass",
    base_color=(0.33, 0.62, 0.22),
    variation=0.18,
)

STONE = BlockMaterial(
    name="stone",
    base_color=(0.50, 0.50, 0.52),
    variation=0.14,
)

WOOD = BlockMaterial(
    name="wood",
    base_color=(0.47, 0.31, 0.16),
    variation=0.12,
)


@ti.func
def hash_voxel(voxel: ivec3, salt: ti.u32) -> ti.f32:
    """Hash integer voxel coordinates to a float in [0, 1].

    A pure function of its inputs (spatial-hash primes followed by an
    avalanche mix in wrapping u32 arithmetic), so it involves no random
    generator state and returns identical values across frames and runs.

    Args:
        voxel: Integer voxel coordinates (i, j, k). Negative values are allowed.
        salt: Per-material salt decorrelating different noise patterns.

    Returns:
        A pseudo-random value in [0, 1].
    """
    h = ti.cast(voxel[0], ti.u32) * ti.u32(73856093)
    h ^= ti.cast(voxel[1], ti.u32) * ti.u32(19349663)
    h ^= ti.cast(voxel[2], ti.u32) * ti.u32(83492791)
    h ^= salt * ti.u32(668265261)
    h ^= h >> ti.u32(16)
    h *= ti.u32(1540483477)
    h ^= h >> ti.u32(13)
    h *= ti.u32(374761393)
    h ^= h >> ti.u32(16)
    return ti.cast(h & ti.u32(0xFFFF), ti.f32) / 65535.0


@ti.func
def _jitter(base: vec3, variation: ti.f32, noise: ti.f32) -> vec3:
    """Scale a base color by a brightness factor in [1 - variation, 1 + variation]."""
    factor = 1.0 + variation * (2.0 * noise - 1.0)
    return tm.clamp(base * factor, 0.0, 1.0)


@ti.func
def grass_color(base: vec3, variation: ti.f32, voxel: ivec3) -> vec3:
    """Grass color: brightness jitter plus an independent green shift."""
    color = _jitter(base, variation, hash_voxel(voxel, ti.u32(GRASS_SALT)))
    green_shift = 0.5 * variation * (2.0 * hash_voxel(voxel, ti.u32(GRASS_SALT + 1)) - 1.0)
    color[1] = tm.clamp(color[1] + green_shift, 0.0, 1.0)
    return color


@ti.func
def stone_color(base: vec3, variation: ti.f32, voxel: ivec3) -> vec3:
    """Stone color: gray brightness jitter with rare dark speckles."""
    color = _jitter(base, variation, hash_voxel(voxel, ti.u32(STONE_SALT)))
    if hash_voxel(voxel, ti.u32(STONE_SALT + 1)) > 0.9:
        color *= 0.75
    return color


@ti.func
def wood_color(base: vec3, variation: ti.f32, voxel: ivec3) -> vec3:
    """Wood color: brightness jitter with darker grain rings on odd layers."""
    color = _jitter(base, variation, hash_voxel(voxel, ti.u32(WOOD_SALT)))
    if (voxel[1] & 1) == 1:
        color *= 0.88
    return color
