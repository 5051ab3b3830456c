"""Taichi-based ray tracer for a voxel diorama with a day/night cycle.

This package renders a small block world (grass, stone, wood, water and
glowstone) by ray tracing it on the GPU or CPU with Taichi, with support for:
- Grid (DDA) traversal of a dense voxel chunk
- Procedural per-voxel color, water reflections and emissive glowstone
- A sun that moves through a continuous day/night cycle
- An orbit camera driven by keyboard input

Subpackages:
    core: Ray utilities, the shading integrator and the frame animator
    materials: Block materials and the material palette
    scene: Voxel chunk, sun, configuration, default layout and the Scene
    camera: Orbit camera with primary ray generation
    preview: Image export and preview windows
"""

__version__ = "0.1.0"
