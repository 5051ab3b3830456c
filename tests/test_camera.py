"""Tests for the orbit camera.

Tests cover:
- Eye placement on the orbit sphere
- Rotation wrapping and pitch clamping
- Zoom clamping and fitting to a bounding box
- Orthonormal basis (including the fallback up vector)
- Primary rays (Python and kernel versions agree)
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestOrbitPlacement:
    """Tests for the eye position."""

    def test_eye_on_positive_z_at_zero_angles(self):
        """Test yaw=0 and pitch=0 put the eye on +z from the target."""
        from diorama.camera.orbit import OrbitCamera

        camera = OrbitCamera(target=(1.0, 2.0, 3.0), radius=5.0, yaw=0.0, pitch=0.0)
        assert camera.eye() == pytest.approx((1.0, 2.0, 8.0))

    def test_eye_distance_equals_radius(self):
        """Test the eye always sits at the orbit radius."""
        from diorama.camera.orbit import OrbitCamera

        camera = OrbitCamera(target=(4.0, 0.0, -2.0), radius=7.5, yaw=2.1, pitch=-0.6)
        distance = np.linalg.norm(np.subtract(camera.eye(), camera.target))
        assert distance == pytest.approx(7.5)

    def test_positive_pitch_raises_eye(self):
        """Test positive pitch places the eye above the target."""
        from diorama.camera.orbit import OrbitCamera

        camera = OrbitCamera(radius=10.0, pitch=0.5)
        assert camera.eye()[1] == pytest.approx(10.0 * math.sin(0.5))

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"vfov": 0.0},
            {"vfov": 180.0},
            {"min_radius": 0.0},
            {"min_radius": 5.0, "max_radius": 4.0},
            {"rotate_step": 0.0},
            {"zoom_step": -1.0},
        ],
    )
    def test_invalid_arguments_raise(self, kwargs):
        """Test invalid settings raise ValueError."""
        from diorama.camera.orbit import OrbitCamera

        with pytest.raises(ValueError):
            OrbitCamera(**kwargs)


class TestOrbitControls:
    """Tests for rotate and zoom."""

    def test_rotate_left_right_inverse(self):
        """Test rotating left then right restores the yaw."""
        from diorama.camera.orbit import OrbitCamera

        camera = OrbitCamera(yaw=1.0)
        camera.rotate_left()
        assert camera.yaw == pytest.approx(1.0 + camera.rotate_step)
        camera.rotate_right()
        assert camera.yaw == pytest.approx(1.0)

    def test_yaw_wraps(self):
        """Test yaw stays in [0, 2*pi)."""
        from diorama.camera.orbit import OrbitCamera

        camera = OrbitCamera(yaw=0.0)
        camera.rotate_right()
        assert 0.0 <= camera.yaw < 2.0 * math.pi
        assert camera.yaw == pytest.approx(2.0 * math.pi - camera.rotate_step)

    def test_pitch_clamped(self):
        """Test repeated rotation never passes the pitch limit."""
        from diorama.camera.orbit import PITCH_LIMIT, OrbitCamera

        camera = OrbitCamera(pitch=0.0)
        for _ in range(100):
            camera.rotate_up()
        assert camera.pitch == pytest.approx(PITCH_LIMIT)

        for _ in range(100):
            camera.rotate_down()
        assert camera.pitch == pytest.approx(-PITCH_LIMIT)

    def test_zoom_clamped(self):
        """Test zoom stays within [min_radius, max_radius]."""
        from diorama.camera.orbit import OrbitCamera

        camera = OrbitCamera(radius=5.0, min_radius=2.0, max_radius=8.0, zoom_step=1.0)
        camera.zoom_in()
        assert camera.radius == pytest.approx(4.0)
        for _ in range(10):
            camera.zoom_in()
        assert camera.radius == pytest.approx(2.0)
        for _ in range(10):
            camera.zoom_out()
        assert camera.radius == pytest.approx(8.0)

    def test_fit_to_bounds(self):
        """Test fitting centers the target and keeps the eye outside the box."""
        from diorama.camera.orbit import DEFAULT_ZOOM_MARGIN, OrbitCamera

        camera = OrbitCamera(radius=3.0)
        camera.fit_to_bounds((0.0, 0.0, 0.0), (16.0, 10.0, 16.0))

        assert camera.target == pytest.approx((8.0, 5.0, 8.0))
        half_diagonal = 0.5 * math.sqrt(16.0**2 + 10.0**2 + 16.0**2)
        assert camera.min_radius == pytest.approx(half_diagonal + DEFAULT_ZOOM_MARGIN)
        assert camera.radius >= camera.min_radius

        for _ in range(50):
            camera.zoom_in()
        eye_distance = np.linalg.norm(np.subtract(camera.eye(), camera.target))
        assert eye_distance > half_diagonal


class TestCameraBasis:
    """Tests for the view basis."""

    def test_basis_orthonormal(self):
        """Test forward, right and up are orthonormal for many orientations."""
        from diorama.camera.orbit import OrbitCamera

        for yaw in np.linspace(0.0, 6.0, 7):
            for pitch in (-1.2, -0.3, 0.0, 0.8, 1.4):
                camera = OrbitCamera(radius=10.0, yaw=yaw, pitch=pitch)
                forward, right, up = camera.basis()
                for v in (forward, right, up):
                    assert np.linalg.norm(v) == pytest.approx(1.0)
                assert np.dot(forward, right) == pytest.approx(0.0, abs=1e-9)
                assert np.dot(forward, up) == pytest.approx(0.0, abs=1e-9)
                assert np.dot(right, up) == pytest.approx(0.0, abs=1e-9)
                # Up never points downward in normal use
                assert up[1] > 0.0

    def test_forward_points_at_target(self):
        """Test forward is the unit vector from eye to target."""
        from diorama.camera.orbit import OrbitCamera

        camera = OrbitCamera(target=(2.0, 1.0, -3.0), radius=6.0, yaw=0.4, pitch=0.2)
        forward, _, _ = camera.basis()
        expected = np.subtract(camera.target, camera.eye())
        expected /= np.linalg.norm(expected)
        assert np.allclose(forward, expected)

    def test_fallback_up_when_looking_straight_down(self):
        """Test a vertical view direction still gives a finite basis."""
        from diorama.camera.orbit import OrbitCamera

        camera = OrbitCamera(radius=10.0)
        # Bypass the clamp to reach the degenerate orientation
        camera.pitch = 0.5 * math.pi
        forward, right, up = camera.basis()

        for v in (forward, right, up):
            assert np.all(np.isfinite(v))
            assert np.linalg.norm(v) == pytest.approx(1.0)
        assert np.dot(right, forward) == pytest.approx(0.0, abs=1e-9)

    def test_frame_snapshot(self):
        """Test the frame carries the basis and projection values."""
        from diorama.camera.orbit import OrbitCamera

        camera = OrbitCamera(radius=10.0, vfov=90.0)
        frame = camera.frame(aspect=2.0)

        assert frame.eye == pytest.approx(camera.eye())
        assert frame.tan_half_fov == pytest.approx(1.0)
        assert frame.aspect == 2.0


class TestPrimaryRays:
    """Tests for primary ray generation."""

    def test_center_ray_is_forward(self):
        """Test the ray through the image center looks at the target."""
        from diorama.camera.orbit import OrbitCamera

        camera = OrbitCamera(radius=10.0, yaw=0.3, pitch=0.2)
        # Odd size so a pixel center sits exactly in the middle
        origin, direction = camera.primary_ray(50, 50, 101, 101)
        forward, _, _ = camera.basis()

        assert np.allclose(origin, camera.eye())
        assert np.allclose(direction, forward, atol=1e-9)

    def test_top_row_points_up(self):
        """Test py = 0 is the top of the image and px = 0 the left."""
        from diorama.camera.orbit import OrbitCamera

        camera = OrbitCamera(radius=10.0, yaw=0.0, pitch=0.0)
        _, top = camera.primary_ray(50, 0, 101, 101)
        _, bottom = camera.primary_ray(50, 100, 101, 101)
        _, left = camera.primary_ray(0, 50, 101, 101)
        _, right = camera.primary_ray(100, 50, 101, 101)

        assert top[1] > 0.0 > bottom[1]
        # Eye on +z looking toward -z: image right is +x
        assert right[0] > 0.0 > left[0]

    def test_directions_are_unit(self):
        """Test primary ray directions are normalized."""
        from diorama.camera.orbit import OrbitCamera

        camera = OrbitCamera(radius=10.0, yaw=1.0, pitch=0.5)
        for px, py in [(0, 0), (63, 0), (0, 31), (63, 31), (17, 9)]:
            _, direction = camera.primary_ray(px, py, 64, 32)
            assert np.linalg.norm(direction) == pytest.approx(1.0)

    def test_invalid_image_size_raises(self):
        """Test a zero-sized image is rejected."""
        from diorama.camera.orbit import OrbitCamera

        with pytest.raises(ValueError):
            OrbitCamera().primary_ray(0, 0, 0, 10)

    def test_kernel_matches_python(self):
        """Test primary_ray_direction agrees with OrbitCamera.primary_ray."""
        from diorama.camera.orbit import OrbitCamera, primary_ray_direction

        camera = OrbitCamera(target=(8.0, 5.0, 8.0), radius=25.0, yaw=0.6, pitch=0.45)
        width, height = 24, 16
        frame = camera.frame(width / height)
        result = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))

        @ti.kernel
        def directions_kernel(
            forward: ti.math.vec3, right: ti.math.vec3, up: ti.math.vec3, tan_half_fov: ti.f32, aspect: ti.f32
        ):
            for px, py in result:
                result[px, py] = primary_ray_direction(
                    px, py, width, height, forward, right, up, tan_half_fov, aspect
                )

        directions_kernel(
            ti.math.vec3(*frame.forward),
            ti.math.vec3(*frame.right),
            ti.math.vec3(*frame.up),
            frame.tan_half_fov,
            frame.aspect,
        )
        kernel_dirs = result.to_numpy()

        for px, py in [(0, 0), (23, 0), (0, 15), (23, 15), (11, 7)]:
            _, expected = camera.primary_ray(px, py, width, height)
            assert np.allclose(kernel_dirs[px, py], expected, atol=1e-5)

    def test_kernel_degenerate_basis_gives_fallback(self):
        """Test a zero basis yields the fallback direction instead of NaN."""
        from diorama.camera.orbit import primary_ray_direction
        from diorama.core.ray import FALLBACK_DIRECTION

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def degenerate_kernel():
            zero = ti.math.vec3(0.0, 0.0, 0.0)
            result[None] = primary_ray_direction(3, 2, 8, 6, zero, zero, zero, 1.0, 1.0)

        degenerate_kernel()
        assert np.allclose(result[None].to_numpy(), FALLBACK_DIRECTION)
