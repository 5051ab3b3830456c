"""Block material tags and material descriptions.

Every voxel of a chunk stores a single integer tag. Tag 0 is the empty slot;
the remaining tags form the closed set of block materials. The visual
properties of each tag are described by an immutable BlockMaterial, which
the MaterialPalette uploads to Taichi fields for use inside kernels.
"""

from dataclasses import dataclass
from enum import IntEnum


class MaterialType(IntEnum):
    """Voxel slot tags.

    EMPTY marks an unoccupied slot; the other members are the block materials
    a voxel may be made of. The values are stored verbatim in the chunk field
    and used to index the palette fields.
    """

    EMPTY = 0
    WATER = 1
    GRASS = 2
    STONE = 3
    WOOD = 4
    GLOWSTONE = 5


# Number of palette slots (one per tag, including EMPTY)
NUM_MATERIAL_SLOTS = len(MaterialType)

# Tags that name an actual block material
BLOCK_TYPES = tuple(m for m in MaterialType if m != MaterialType.EMPTY)


def _check_unit_interval(name: str, value: float) -> None:
    if value < 0.0 or value > 1.0:
        raise ValueError(f"{name} = {value} is outside [0, 1].")


@dataclass(frozen=True)
class BlockMaterial:
    """Immutable description of a block material.

    Attributes:
        name: Human readable name ("grass", "water", ...).
        base_color: Base RGB color, each component in [0, 1].
        variation: Amplitude of the per-voxel color perturbation in [0, 1].
            Zero yields a uniform color.
        reflectivity: Fraction of the shaded color taken from the mirror
            reflection, in [0, 1].
        emissive: Emission strength in [0, 1], added to the shaded color
            independent of the sun and ambient light.

    Raises:
        ValueError: If any component or coefficient is outside [0, 1].
    """

    name: str
    base_color: tuple[float, float, float]
    variation: float = 0.0
    reflectivity: float = 0.0
    emissive: float = 0.0

    def __post_init__(self) -> None:
        if len(self.base_color) != 3:
            raise ValueError(f"base_color must have 3 components, got {len(self.base_color)}")
        for i, component in enumerate(self.base_color):
            _check_unit_interval(f"Base color component {i}", component)
        _check_unit_interval("Variation", self.variation)
        _check_unit_interval("Reflectivity", self.reflectivity)
        _check_unit_interval("Emissive intensity", self.emissive)

    def with_reflectivity(self, reflectivity: float) -> "BlockMaterial":
        """Return a copy of this material with a different reflectivity."""
        return BlockMaterial(
            name=self.name,
            base_color=self.base_color,
            variation=self.variation,
            reflectivity=reflectivity,
            emissive=self.emissive,
        )

    def with_emissive(self, emissive: float) -> "BlockMaterial":
        """Return a copy of this material with a different emissive intensity."""
        return BlockMaterial(
            name=self.name,
            base_color=self.base_color,
            variation=self.variation,
            reflectivity=self.reflectivity,
            emissive=emissive,
        )
