"""Material palette: block materials uploaded to Taichi fields.

The palette maps every MaterialType tag to its BlockMaterial and stores the
properties in small Taichi fields indexed by tag, so kernels can dispatch on
the tag stored in a voxel:

    color_at(tag, voxel)  -> vec3   (procedural per-voxel color)
    reflectivity(tag)     -> f32
    emissive(tag)         -> f32

A palette is built once at scene setup and treated as read-only afterwards.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from diorama.materials.palette import MaterialPalette
    >>> from diorama.materials.types import MaterialType
    >>> from diorama.materials.water import WATER
    >>> palette = MaterialPalette(overrides={MaterialType.WATER: WATER.with_reflectivity(0.6)})
    >>> palette.get_material(MaterialType.WATER).reflectivity
    0.6
"""

from collections.abc import Mapping

import taichi as ti
import taichi.math as tm

from diorama.materials.glowstone import GLOWSTONE, glowstone_color
from diorama.materials.terrain import GRASS, STONE, WOOD, grass_color, stone_color, wood_color
from diorama.materials.types import NUM_MATERIAL_SLOTS, BlockMaterial, MaterialType
from diorama.materials.water import WATER, water_color

vec3 = tm.vec3
ivec3 = tm.ivec3

DEFAULT_MATERIALS: dict[MaterialType, BlockMaterial] = {
    MaterialType.WATER: WATER,
    MaterialType.GRASS: GRASS,
    MaterialType.STONE: STONE,
    MaterialType.WOOD: WOOD,
    MaterialType.GLOWSTONE: GLOWSTONE,
}


@ti.data_oriented
class MaterialPalette:
    """Block materials stored in Taichi fields for kernel-side lookup.

    Attributes:
        materials: The BlockMaterial for each block tag (EMPTY excluded).
        base_colors: Field of base colors indexed by tag.
        variations: Field of color variation amplitudes indexed by tag.
        reflectivities: Field of reflectivity coefficients indexed by tag.
        emissives: Field of emissive intensities indexed by tag.
    """

    def __init__(self, overrides: Mapping[MaterialType, BlockMaterial] | None = None) -> None:
        """Build the palette from the default materials.

        Args:
            overrides: Optional replacements for individual block materials,
                e.g. water with a different reflectivity.

        Raises:
            ValueError: If an override targets MaterialType.EMPTY or is not a
                BlockMaterial.
        """
        self.materials: dict[MaterialType, BlockMaterial] = dict(DEFAULT_MATERIALS)
        for tag, material in (overrides or {}).items():
            tag = MaterialType(tag)
            if tag == MaterialType.EMPTY:
                raise ValueError("The EMPTY slot cannot be assigned a material")
            if not isinstance(material, BlockMaterial):
                raise ValueError(f"Override for {tag.name} must be a BlockMaterial, got {material!r}")
            self.materials[tag] = material

        self.base_colors = ti.Vector.field(3, dtype=ti.f32, shape=NUM_MATERIAL_SLOTS)
        self.variations = ti.field(dtype=ti.f32, shape=NUM_MATERIAL_SLOTS)
        self.reflectivities = ti.field(dtype=ti.f32, shape=NUM_MATERIAL_SLOTS)
        self.emissives = ti.field(dtype=ti.f32, shape=NUM_MATERIAL_SLOTS)

        for tag, material in self.materials.items():
            idx = int(tag)
            self.base_colors[idx] = list(material.base_color)
            self.variations[idx] = material.variation
            self.reflectivities[idx] = material.reflectivity
            self.emissives[idx] = material.emissive

    def get_material(self, tag: int) -> BlockMaterial | None:
        """Get the BlockMaterial for a tag (Python side).

        Returns:
            The material, or None for EMPTY and unknown tags.
        """
        try:
            return self.materials.get(MaterialType(tag))
        except ValueError:
            return None

    # =========================================================================
    # Kernel-side lookup
    # =========================================================================

    @ti.func
    def color_at(self, tag: ti.i32, voxel: ivec3) -> vec3:
        """Get the color of a voxel made of the given material.

        Args:
            tag: The MaterialType value stored in the voxel.
            voxel: Integer voxel coordinates seeding the color variation.

        Returns:
            The RGB color in [0, 1]. EMPTY and unknown tags yield black.
        """
        color = vec3(0.0, 0.0, 0.0)
        if 0 < tag < NUM_MATERIAL_SLOTS:
            base = self.base_colors[tag]
            variation = self.variations[tag]
            if tag == int(MaterialType.WATER):
                color = water_color(base, variation, voxel)
            elif tag == int(MaterialType.GRASS):
                color = grass_color(base, variation, voxel)
            elif tag == int(MaterialType.STONE):
                color = stone_color(base, variation, voxel)
            elif tag == int(MaterialType.WOOD):
                color = wood_color(base, variation, voxel)
            elif tag == int(MaterialType.GLOWSTONE):
                color = glowstone_color(base, variation, voxel)
        return color

    @ti.func
    def reflectivity(self, tag: ti.i32) -> ti.f32:
        """Get the reflectivity coefficient for a material tag."""
        result = 0.0
        if 0 < tag < NUM_MATERIAL_SLOTS:
            result = self.reflectivities[tag]
        return result

    @ti.func
    def emissive(self, tag: ti.i32) -> ti.f32:
        """Get the emissive intensity for a material tag."""
        result = 0.0
        if 0 < tag < NUM_MATERIAL_SLOTS:
            result = self.emissives[tag]
        return result
