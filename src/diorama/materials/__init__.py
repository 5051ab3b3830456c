"""Materials module for block appearance.

This module implements the closed set of block materials a voxel can be made of:

Components:
    types: MaterialType tags and the immutable BlockMaterial description
    terrain: Grass, stone and wood with procedural per-voxel color
    water: Reflective water
    glowstone: Emissive glowstone
    palette: MaterialPalette uploading the materials to Taichi fields

Each material provides:
    - color_at(): Deterministic color for a voxel, seeded by its coordinates
    - reflectivity(): Mirror blend coefficient in [0, 1]
    - emissive(): Emission strength in [0, 1], independent of lighting

Color variation is a pure hash of the integer voxel coordinates, so repeated
renders of the same voxel always yield the same color.
"""

from .glowstone import GLOWSTONE, glowstone_color
from .palette import DEFAULT_MATERIALS, MaterialPalette
from .terrain import (
    GRASS,
    STONE,
    WOOD,
    grass_color,
    hash_voxel,
    stone_color,
    wood_color,
)
from .types import BLOCK_TYPES, NUM_MATERIAL_SLOTS, BlockMaterial, MaterialType
from .water import WATER, water_color

__all__ = [
    # Types
    "MaterialType",
    "BlockMaterial",
    "BLOCK_TYPES",
    "NUM_MATERIAL_SLOTS",
    # Terrain
    "GRASS",
    "STONE",
    "WOOD",
    "hash_voxel",
    "grass_color",
    "stone_color",
    "wood_color",
    # Water
    "WATER",
    "water_color",
    # Glowstone
    "GLOWSTONE",
    "glowstone_color",
    # Palette
    "MaterialPalette",
    "DEFAULT_MATERIALS",
]
