"""Voxel chunk storage and ray-voxel intersection.

A chunk is a dense 3D grid of voxel slots. Each slot holds a MaterialType
tag (EMPTY for unoccupied slots). The grid has a world-space origin (the
minimum corner) and a uniform cell size; voxel (i, j, k) covers

    origin + cell_size * [i, i+1] x [j, j+1] x [k, k+1]

Rays are intersected with a grid traversal (Amanatides & Woo DDA): the ray is
clipped against the chunk's bounding box, the entry cell is located, and the
ray then steps cell by cell to whichever axis boundary is nearest, stopping
at the first occupied cell or when it leaves the grid. The axis crossed last
gives the face normal of the hit. Exact ties between axes are broken in the
order x, y, z.

Chunks are built once from a NumPy layout and never modified afterwards.

Example:
    >>> import numpy as np
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from diorama.materials.types import MaterialType
    >>> from diorama.scene.chunk import Chunk
    >>> layout = np.zeros((4, 4, 4), dtype=np.int32)
    >>> layout[1, 1, 1] = MaterialType.STONE
    >>> chunk = Chunk(layout)
    >>> hit = chunk.intersect_ray((1.5, 1.5, 10.0), (0.0, 0.0, -1.0))
    >>> hit.voxel, hit.normal
    ((1, 1, 1), (0.0, 0.0, 1.0))
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from diorama.core.ray import guard_direction
from diorama.materials.types import MaterialType

logger = logging.getLogger(__name__)

vec3 = tm.vec3
ivec3 = tm.ivec3

EMPTY = int(MaterialType.EMPTY)


@ti.dataclass
class VoxelHit:
    """Record of a ray-chunk intersection.

    Attributes:
        hit: Whether the ray hit an occupied voxel (1 if hit, 0 if miss).
        distance: Ray parameter of the hit (distance along a unit direction).
            Only valid if hit == 1.
        point: World-space point where the ray entered the voxel.
            Only valid if hit == 1.
        normal: Unit face normal of the struck face, a signed coordinate axis.
            Only valid if hit == 1.
        voxel: Integer coordinates of the hit voxel. Only valid if hit == 1.
        material: MaterialType tag of the hit voxel (EMPTY on a miss).
    """

    hit: ti.i32
    distance: ti.f32
    point: vec3
    normal: vec3
    voxel: ivec3
    material: ti.i32


@dataclass(frozen=True)
class ChunkHit:
    """Python-side copy of a VoxelHit, returned by Chunk.intersect_ray().

    Attributes:
        point: World-space hit point.
        normal: Unit face normal of the struck face.
        voxel: Integer coordinates of the hit voxel.
        material: The hit voxel's material.
        distance: Distance from the ray origin to the hit point.
    """

    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    voxel: tuple[int, int, int]
    material: MaterialType
    distance: float


def _as_float3(name: str, value) -> tuple[float, float, float]:
    values = tuple(float(v) for v in value)
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return values  # type: ignore[return-value]


@ti.data_oriented
class Chunk:
    """Dense voxel grid with a DDA ray intersection query.

    Attributes:
        shape: Grid dimensions (nx, ny, nz).
        origin: World-space position of the grid's minimum corner.
        cell_size: Edge length of one voxel in world units.
        voxels: Taichi field of MaterialType tags, shape (nx, ny, nz).
    """

    def __init__(
        self,
        layout: npt.ArrayLike,
        origin: tuple[float, float, float] = (0.0, 0.0, 0.0),
        cell_size: float = 1.0,
    ) -> None:
        """Build a chunk from a layout array.

        Args:
            layout: Integer array of shape (nx, ny, nz) holding MaterialType
                values; 0 (EMPTY) marks unoccupied slots.
            origin: World-space position of the grid's minimum corner.
            cell_size: Edge length of one voxel. Must be positive.

        Raises:
            ValueError: If the layout is not a non-empty 3D array, contains
                unknown material tags, or cell_size is not positive.
        """
        grid = np.asarray(layout)
        if grid.ndim != 3:
            raise ValueError(f"Chunk layout must be 3-dimensional, got shape {grid.shape}")
        if min(grid.shape) <= 0:
            raise ValueError(f"Chunk dimensions must be positive, got {grid.shape}")
        if not np.issubdtype(grid.dtype, np.integer):
            raise ValueError(f"Chunk layout must hold integer tags, got dtype {grid.dtype}")
        valid_tags = [int(tag) for tag in MaterialType]
        unknown = np.setdiff1d(np.unique(grid), valid_tags)
        if unknown.size > 0:
            raise ValueError(f"Unknown material tags in layout: {unknown.tolist()}")
        if cell_size <= 0.0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")

        self.shape: tuple[int, int, int] = (int(grid.shape[0]), int(grid.shape[1]), int(grid.shape[2]))
        self.nx, self.ny, self.nz = self.shape
        self.origin = _as_float3("origin", origin)
        self.cell_size = float(cell_size)

        self._layout = grid.astype(np.int32)
        self._layout.setflags(write=False)

        self.voxels = ti.field(dtype=ti.i32, shape=self.shape)
        self.voxels.from_numpy(self._layout)

        self._bounds_min = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._bounds_min[None] = list(self.origin)
        self._cell_size = ti.field(dtype=ti.f32, shape=())
        self._cell_size[None] = self.cell_size

        # Result storage for Python-side intersection queries
        self._probe_hit = ti.field(dtype=ti.i32, shape=())
        self._probe_distance = ti.field(dtype=ti.f32, shape=())
        self._probe_point = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._probe_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._probe_voxel = ti.Vector.field(3, dtype=ti.i32, shape=())
        self._probe_material = ti.field(dtype=ti.i32, shape=())

        logger.debug(
            "Built chunk %s at origin %s (cell size %.3f, %d occupied voxels)",
            self.shape,
            self.origin,
            self.cell_size,
            self.occupied_count(),
        )

    # =========================================================================
    # Python-side queries
    # =========================================================================

    def material_at(self, i: int, j: int, k: int) -> MaterialType:
        """Get the material tag of a voxel slot.

        Coordinates outside the grid always resolve to EMPTY.
        """
        if 0 <= i < self.nx and 0 <= j < self.ny and 0 <= k < self.nz:
            return MaterialType(int(self._layout[i, j, k]))
        return MaterialType.EMPTY

    def layout(self) -> npt.NDArray[np.int32]:
        """Get a read-only view of the voxel tags, shape (nx, ny, nz)."""
        return self._layout

    def occupied_count(self) -> int:
        """Get the number of non-empty voxel slots."""
        return int(np.count_nonzero(self._layout != EMPTY))

    def bounds(self) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
        """Get the world-space bounding box as (min_corner, max_corner)."""
        lo = self.origin
        hi = (
            lo[0] + self.nx * self.cell_size,
            lo[1] + self.ny * self.cell_size,
            lo[2] + self.nz * self.cell_size,
        )
        return lo, hi

    def center(self) -> tuple[float, float, float]:
        """Get the world-space center of the bounding box."""
        lo, hi = self.bounds()
        return (0.5 * (lo[0] + hi[0]), 0.5 * (lo[1] + hi[1]), 0.5 * (lo[2] + hi[2]))

    def bounding_radius(self) -> float:
        """Get the radius of the sphere around center() enclosing the whole grid."""
        lo, hi = self.bounds()
        return 0.5 * math.dist(lo, hi)

    def contains_point(self, point: tuple[float, float, float]) -> bool:
        """Check whether a world-space point lies inside the bounding box."""
        lo, hi = self.bounds()
        return all(lo[a] <= point[a] <= hi[a] for a in range(3))

    def intersect_ray(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
    ) -> ChunkHit | None:
        """Intersect a single ray with the chunk (Python-callable).

        This runs the same traversal the renderer uses. For rendering, call
        intersect() from inside a kernel instead.

        Args:
            origin: Ray origin in world space.
            direction: Ray direction; normalized before tracing.

        Returns:
            A ChunkHit for the first occupied voxel, or None if the ray never
            enters the grid or leaves it without hitting anything.

        Raises:
            ValueError: If the direction has (near) zero length.
        """
        o = np.asarray(_as_float3("origin", origin), dtype=np.float64)
        d = np.asarray(_as_float3("direction", direction), dtype=np.float64)
        norm = float(np.linalg.norm(d))
        if norm < 1e-12:
            raise ValueError("Ray direction must be non-zero")
        d = d / norm

        self._probe_kernel(o[0], o[1], o[2], d[0], d[1], d[2])

        if self._probe_hit[None] == 0:
            return None

        point = self._probe_point[None]
        normal = self._probe_normal[None]
        voxel = self._probe_voxel[None]
        return ChunkHit(
            point=(float(point[0]), float(point[1]), float(point[2])),
            normal=(float(normal[0]), float(normal[1]), float(normal[2])),
            voxel=(int(voxel[0]), int(voxel[1]), int(voxel[2])),
            material=MaterialType(int(self._probe_material[None])),
            distance=float(self._probe_distance[None]),
        )

    @ti.kernel
    def _probe_kernel(self, ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32):
        rec = self.intersect(vec3(ox, oy, oz), vec3(dx, dy, dz))
        self._probe_hit[None] = rec.hit
        self._probe_distance[None] = rec.distance
        self._probe_point[None] = rec.point
        self._probe_normal[None] = rec.normal
        self._probe_voxel[None] = rec.voxel
        self._probe_material[None] = rec.material

    # =========================================================================
    # Kernel-side queries
    # =========================================================================

    @ti.func
    def in_bounds(self, cell: ivec3) -> ti.i32:
        """Check whether integer cell coordinates lie inside the grid."""
        return (
            0 <= cell[0] < self.nx
            and 0 <= cell[1] < self.ny
            and 0 <= cell[2] < self.nz
        )

    @ti.func
    def lookup(self, cell: ivec3) -> ti.i32:
        """Get the material tag of a cell; out-of-bounds cells are EMPTY."""
        tag = EMPTY
        if self.in_bounds(cell):
            tag = self.voxels[cell[0], cell[1], cell[2]]
        return tag

    @ti.func
    def intersect(self, origin: vec3, direction: vec3) -> VoxelHit:
        """Find the first occupied voxel along a ray.

        Args:
            origin: The ray origin in world space.
            direction: The unit ray direction. Near-zero components are
                replaced by a signed epsilon before computing crossing distances.

        Returns:
            A VoxelHit. hit == 0 if the ray misses the bounding box or leaves
            the grid without meeting an occupied voxel. A ray starting inside
            an occupied voxel hits it at distance 0, with the normal facing
            against the dominant direction axis.
        """
        d = guard_direction(direction)
        inv_d = 1.0 / d
        cell_size = self._cell_size[None]
        box_min = self._bounds_min[None]
        box_max = box_min + cell_size * vec3(self.nx, self.ny, self.nz)

        # Slab test against the chunk's bounding box
        t0 = (box_min - origin) * inv_d
        t1 = (box_max - origin) * inv_d
        t_near = tm.min(t0, t1)
        t_far = tm.max(t0, t1)
        t_enter = ti.max(t_near[0], ti.max(t_near[1], t_near[2]))
        t_exit = ti.min(t_far[0], ti.min(t_far[1], t_far[2]))

        hit = 0
        t_hit = 0.0
        hit_normal = vec3(0.0, 0.0, 0.0)
        hit_cell = ivec3(0, 0, 0)
        hit_tag = EMPTY

        if t_exit >= t_enter and t_exit >= 0.0:
            step = ivec3(1, 1, 1)
            for axis in ti.static(range(3)):
                if d[axis] < 0.0:
                    step[axis] = -1

            t = ti.max(t_enter, 0.0)
            normal = vec3(0.0, 0.0, 0.0)
            if t_enter > 0.0:
                # Entered through the face of the last slab crossed
                if t_near[0] >= t_near[1] and t_near[0] >= t_near[2]:
                    normal[0] = -ti.cast(step[0], ti.f32)
                elif t_near[1] >= t_near[2]:
                    normal[1] = -ti.cast(step[1], ti.f32)
                else:
                    normal[2] = -ti.cast(step[2], ti.f32)
            else:
                # Origin inside the grid: face against the dominant axis
                abs_d = ti.abs(d)
                if abs_d[0] >= abs_d[1] and abs_d[0] >= abs_d[2]:
                    normal[0] = -ti.cast(step[0], ti.f32)
                elif abs_d[1] >= abs_d[2]:
                    normal[1] = -ti.cast(step[1], ti.f32)
                else:
                    normal[2] = -ti.cast(step[2], ti.f32)

            # Entry cell, clamped against round-off at the entry face
            local = (origin + d * t - box_min) / cell_size
            cell = ti.cast(ti.floor(local), ti.i32)
            cell[0] = ti.min(ti.max(cell[0], 0), self.nx - 1)
            cell[1] = ti.min(ti.max(cell[1], 0), self.ny - 1)
            cell[2] = ti.min(ti.max(cell[2], 0), self.nz - 1)

            # Parameter of the next boundary crossing on each axis
            t_max = vec3(0.0, 0.0, 0.0)
            for axis in ti.static(range(3)):
                boundary = box_min[axis] + ti.cast(cell[axis], ti.f32) * cell_size
                if step[axis] > 0:
                    boundary += cell_size
                t_max[axis] = (boundary - origin[axis]) * inv_d[axis]
            t_delta = ti.abs(cell_size * inv_d)

            active = 1
            for _ in range(self.nx + self.ny + self.nz + 1):
                if active == 1:
                    tag = self.lookup(cell)
                    if tag != EMPTY:
                        hit = 1
                        t_hit = t
                        hit_normal = normal
                        hit_cell = cell
                        hit_tag = tag
                        active = 0
                    else:
                        # Advance to the nearest boundary, ties broken x, y, z
                        normal = vec3(0.0, 0.0, 0.0)
                        if t_max[0] <= t_max[1] and t_max[0] <= t_max[2]:
                            t = t_max[0]
                            t_max[0] += t_delta[0]
                            cell[0] += step[0]
                            normal[0] = -ti.cast(step[0], ti.f32)
                        elif t_max[1] <= t_max[2]:
                            t = t_max[1]
                            t_max[1] += t_delta[1]
                            cell[1] += step[1]
                            normal[1] = -ti.cast(step[1], ti.f32)
                        else:
                            t = t_max[2]
                            t_max[2] += t_delta[2]
                            cell[2] += step[2]
                            normal[2] = -ti.cast(step[2], ti.f32)
                        if not self.in_bounds(cell):
                            active = 0

        return VoxelHit(
            hit=hit,
            distance=t_hit,
            point=origin + t_hit * direction,
            normal=hit_normal,
            voxel=hit_cell,
            material=hit_tag,
        )
