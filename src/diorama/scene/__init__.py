"""Scene module: what is rendered and under which light.

Components:
    chunk: Dense voxel grid with DDA ray intersection
    sun: Day/night light source
    config: Startup configuration
    layout: Built-in diorama layout
    manager: Scene object and the per-frame render entry point
"""

from .chunk import Chunk, ChunkHit, VoxelHit
from .config import DioramaConfig, load_config, save_config
from .layout import build_default_layout, material_counts
from .sun import Sun, SunState

# Note: manager is NOT imported here to avoid circular imports with core.integrator.
# Import Scene and create_diorama_scene from diorama.scene.manager.

__all__ = [
    "Chunk",
    "ChunkHit",
    "VoxelHit",
    "DioramaConfig",
    "load_config",
    "save_config",
    "build_default_layout",
    "material_counts",
    "Sun",
    "SunState",
]
