"""Pytest configuration for diorama tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session, and small
factories for chunks and scenes built from hand-written layouts.
"""

import math

import numpy as np
import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture
def make_layout():
    """Factory for layouts: make_layout((nx, ny, nz), {(i, j, k): tag, ...})."""

    def _make(shape, voxels=None):
        layout = np.zeros(shape, dtype=np.int32)
        for (i, j, k), tag in (voxels or {}).items():
            layout[i, j, k] = int(tag)
        return layout

    return _make


@pytest.fixture
def make_scene(make_layout):
    """Factory for small scenes around a hand-written layout.

    Keyword arguments override the lighting and camera settings; the
    render target is kept small.
    """
    from diorama.camera.orbit import OrbitCamera
    from diorama.materials.palette import MaterialPalette
    from diorama.scene.chunk import Chunk
    from diorama.scene.manager import Scene
    from diorama.scene.sun import Sun

    def _make(
        shape=(3, 3, 3),
        voxels=None,
        *,
        phase=0.5 * math.pi,
        ambient=0.12,
        max_depth=3,
        overrides=None,
        radius=10.0,
        yaw=0.0,
        pitch=0.3,
    ):
        chunk = Chunk(make_layout(shape, voxels))
        palette = MaterialPalette(overrides=overrides)
        sun = Sun(phase=phase)
        camera = OrbitCamera(radius=radius, yaw=yaw, pitch=pitch)
        return Scene(
            chunk,
            palette,
            sun,
            camera,
            ambient=ambient,
            max_depth=max_depth,
            max_width=64,
            max_height=64,
        )

    return _make
