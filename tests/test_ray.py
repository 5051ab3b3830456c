"""Unit tests for the ray module.

Tests cover:
- Ray dataclass and ray_at function
- Vector utility functions (dot, cross, normalize, length, reflect)
- Direction guarding used by the grid traversal
"""

import numpy as np
import pytest
import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from diorama.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0), bounce_budget=3)
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 2.0) < 1e-6
        assert abs(r[2] - 3.0) < 1e-6

    def test_ray_at_positive_t(self):
        """Test ray_at computes correct point along ray."""
        from diorama.core.ray import make_ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(1.0, 0.0, 0.0), 1)
            result[None] = ray_at(ray, 5.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 5.0) < 1e-6
        assert abs(r[1]) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_make_ray_keeps_bounce_budget(self):
        """Test make_ray stores the bounce budget."""
        from diorama.core.ray import make_ray, vec3

        result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 1.0, 1.0), vec3(0.0, 0.0, 1.0), 7)
            result[None] = ray.bounce_budget

        test_kernel()
        assert result[None] == 7


class TestVectorUtilities:
    """Tests for vector utility functions."""

    def test_length(self):
        """Test vector length computation."""
        from diorama.core.ray import length, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = length(vec3(3.0, 4.0, 0.0))

        test_kernel()
        assert abs(result[None] - 5.0) < 1e-6

    def test_length_squared(self):
        """Test squared length."""
        from diorama.core.ray import length_squared, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = length_squared(vec3(3.0, 4.0, 0.0))

        test_kernel()
        assert abs(result[None] - 25.0) < 1e-6

    def test_dot_and_cross(self):
        """Test dot of orthogonal axes is zero and x cross y is z."""
        from diorama.core.ray import cross, dot, vec3

        dot_result = ti.field(dtype=ti.f32, shape=())
        cross_result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            dot_result[None] = dot(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))
            cross_result[None] = cross(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert abs(dot_result[None]) < 1e-6
        assert np.allclose(cross_result[None].to_numpy(), [0.0, 0.0, 1.0], atol=1e-6)

    def test_normalize_produces_unit_length(self):
        """Test normalize gives unit length for a spread of nonzero vectors."""
        from diorama.core.ray import normalize

        rng = np.random.default_rng(3)
        vectors = np.concatenate(
            [
                rng.normal(size=(20, 3)) * 100.0,
                rng.normal(size=(20, 3)) * 1e-3,
                np.array([[1e-6, 0.0, 0.0], [0.0, -250.0, 0.0], [1.0, 1.0, 1.0]]),
            ]
        ).astype(np.float32)
        n = len(vectors)
        inputs = ti.Vector.field(3, dtype=ti.f32, shape=n)
        outputs = ti.field(dtype=ti.f32, shape=n)
        inputs.from_numpy(vectors)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                outputs[i] = normalize(inputs[i]).norm()

        test_kernel()
        assert np.allclose(outputs.to_numpy(), 1.0, atol=1e-5)

    def test_normalize_zero_vector_returns_fallback(self):
        """Test normalize of a zero vector returns the fallback direction."""
        from diorama.core.ray import FALLBACK_DIRECTION, normalize, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = normalize(vec3(0.0, 0.0, 0.0))

        test_kernel()
        r = result[None].to_numpy()
        assert np.all(np.isfinite(r))
        assert np.allclose(r, FALLBACK_DIRECTION)

    def test_reflect_off_floor(self):
        """Test reflect flips the component along the normal."""
        from diorama.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert np.allclose(result[None].to_numpy(), [1.0, 1.0, 0.0], atol=1e-6)

    def test_reflect_twice_is_identity(self):
        """Test reflect(reflect(v, n), n) == v for unit normals."""
        from diorama.core.ray import reflect

        rng = np.random.default_rng(11)
        normals = rng.normal(size=(16, 3))
        normals /= np.linalg.norm(normals, axis=1, keepdims=True)
        vectors = rng.normal(size=(16, 3))

        v_field = ti.Vector.field(3, dtype=ti.f32, shape=16)
        n_field = ti.Vector.field(3, dtype=ti.f32, shape=16)
        out = ti.Vector.field(3, dtype=ti.f32, shape=16)
        v_field.from_numpy(vectors.astype(np.float32))
        n_field.from_numpy(normals.astype(np.float32))

        @ti.kernel
        def test_kernel():
            for i in range(16):
                out[i] = reflect(reflect(v_field[i], n_field[i]), n_field[i])

        test_kernel()
        assert np.allclose(out.to_numpy(), vectors, atol=1e-4)


class TestGuardDirection:
    """Tests for the epsilon substitution applied before grid traversal."""

    @pytest.mark.parametrize(
        "direction, expected",
        [
            ((0.0, 0.0, -1.0), (1e-6, 1e-6, -1.0)),
            ((-1e-9, 1.0, 0.0), (-1e-6, 1.0, 1e-6)),
            ((0.6, -0.8, 0.0), (0.6, -0.8, 1e-6)),
        ],
    )
    def test_small_components_replaced(self, direction, expected):
        """Test components below the epsilon become a signed epsilon."""
        from diorama.core.ray import guard_direction, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(x: ti.f32, y: ti.f32, z: ti.f32):
            result[None] = guard_direction(vec3(x, y, z))

        test_kernel(*direction)
        assert np.allclose(result[None].to_numpy(), expected, rtol=1e-4, atol=1e-9)
