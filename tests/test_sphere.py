"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Ray tangent to sphere
- Interval bounds (t_min exclusive, t_max inclusive)
- Negative radius (hollow shell inner wall)
- Numerical stability edge cases
"""

import math

import pytest
import taichi as ti


@pytest.fixture(scope="module")
def trace_sphere():
    """Kernel wrapper around hit_sphere returning a dict per call."""
    from pathtracer.core.vector import vec3
    from pathtracer.geometry.sphere import Sphere, hit_sphere

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.Vector.field(3, dtype=ti.f32, shape=())
    normal = ti.Vector.field(3, dtype=ti.f32, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def hit_kernel(
        origin: vec3, direction: vec3, center: vec3, radius: ti.f32, t_min: ti.f32, t_max: ti.f32
    ):
        record = hit_sphere(origin, direction, Sphere(center=center, radius=radius), t_min, t_max)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face

    def trace(origin, direction, center=(0.0, 0.0, 0.0), radius=1.0, t_min=0.001, t_max=1000.0):
        hit_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, t_min, t_max)
        return {
            "hit": int(hit[None]),
            "t": float(t_val[None]),
            "point": tuple(float(c) for c in point[None]),
            "normal": tuple(float(c) for c in normal[None]),
            "front_face": int(front_face[None]),
        }

    return trace


def assert_vec_close(actual, expected, tol=1e-5):
    for a, e in zip(actual, expected):
        assert abs(a - e) < tol, f"{actual} != {expected}"


class TestSphereBasics:
    """Tests for Sphere dataclass and basic operations."""

    def test_make_sphere(self):
        """Test make_sphere convenience function."""
        from pathtracer.core.vector import vec3
        from pathtracer.geometry.sphere import make_sphere

        center_result = ti.field(dtype=ti.math.vec3, shape=())
        radius_result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(1.0, 2.0, 3.0), -0.5)
            center_result[None] = sphere.center
            radius_result[None] = sphere.radius

        test_kernel()
        assert_vec_close(center_result[None], (1.0, 2.0, 3.0))
        assert abs(radius_result[None] - (-0.5)) < 1e-6


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_hit_from_outside(self, trace_sphere):
        """Test the head-on hit of a half-unit sphere one unit down -z."""
        rec = trace_sphere((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), center=(0.0, 0.0, -1.0), radius=0.5)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 0.5) < 1e-5
        assert_vec_close(rec["point"], (0.0, 0.0, -0.5))
        assert_vec_close(rec["normal"], (0.0, 0.0, 1.0))
        assert rec["front_face"] == 1

    def test_miss(self, trace_sphere):
        """Test ray parallel to the sphere and offset past its radius."""
        rec = trace_sphere((5.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert rec["hit"] == 0

    def test_hit_from_inside(self, trace_sphere):
        """Test ray from the center hits the far wall with a flipped normal."""
        rec = trace_sphere((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert rec["hit"] == 1
        assert abs(rec["t"] - 1.0) < 1e-5
        assert_vec_close(rec["normal"], (0.0, 0.0, -1.0))
        assert rec["front_face"] == 0

    def test_tangent_ray_hits_once(self, trace_sphere):
        """Test a ray grazing the sphere reports the single touching point."""
        rec = trace_sphere((1.0, 0.0, -5.0), (0.0, 0.0, 1.0))
        assert rec["hit"] == 1
        assert abs(rec["t"] - 5.0) < 1e-4
        assert_vec_close(rec["point"], (1.0, 0.0, 0.0), tol=1e-4)

    def test_sphere_behind_ray(self, trace_sphere):
        """Test that spheres behind the ray origin are missed."""
        rec = trace_sphere((0.0, 0.0, 5.0), (0.0, 0.0, 1.0))
        assert rec["hit"] == 0

    def test_normal_is_unit_length(self, trace_sphere):
        rec = trace_sphere((3.0, 4.0, 10.0), (-0.3, -0.4, -1.0), radius=5.0)
        assert rec["hit"] == 1
        n = rec["normal"]
        assert abs(math.sqrt(sum(c * c for c in n)) - 1.0) < 1e-5

    def test_normal_opposes_ray(self, trace_sphere):
        """Test dot(direction, normal) <= 0 for hits from both sides."""
        for origin, direction in [
            ((5.0, 0.0, 5.0), (-1.0, 0.0, -1.0)),
            ((0.2, 0.1, 0.0), (0.3, -1.0, 0.5)),
        ]:
            rec = trace_sphere(origin, direction)
            assert rec["hit"] == 1
            assert sum(d * n for d, n in zip(direction, rec["normal"])) <= 0.0

    def test_unnormalized_ray_direction(self, trace_sphere):
        """Test the hit point does not depend on direction length."""
        rec = trace_sphere((0.0, 0.0, 5.0), (0.0, 0.0, -2.0))
        assert rec["hit"] == 1
        assert abs(rec["t"] - 2.0) < 1e-5
        assert_vec_close(rec["point"], (0.0, 0.0, 1.0))


class TestIntervalBounds:
    """Tests for the accepted t interval."""

    def test_near_root_rejected_far_root_accepted(self, trace_sphere):
        """Test a near root at or below t_min falls through to the far root."""
        rec = trace_sphere((0.0, 0.0, 1.001), (0.0, 0.0, -1.0), t_min=0.01)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 2.001) < 1e-4
        assert rec["front_face"] == 0

    def test_t_max_rejects_far_hits(self, trace_sphere):
        rec = trace_sphere((0.0, 0.0, 100.0), (0.0, 0.0, -1.0), t_max=50.0)
        assert rec["hit"] == 0

    def test_t_max_is_inclusive(self, trace_sphere):
        """Test a root exactly at t_max is accepted."""
        rec = trace_sphere((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), t_max=4.0)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 4.0) < 1e-6

    def test_infinite_t_max(self, trace_sphere):
        rec = trace_sphere((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), t_max=math.inf)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 4.0) < 1e-5


class TestNegativeRadius:
    """Tests for negative-radius spheres used as hollow shell walls."""

    def test_outside_hit_reports_back_face(self, trace_sphere):
        """Test the outward normal points inward, so an outside hit is a back face."""
        rec = trace_sphere((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), radius=-1.0)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 4.0) < 1e-5
        assert rec["front_face"] == 0
        assert_vec_close(rec["normal"], (0.0, 0.0, 1.0))

    def test_inside_hit_reports_front_face(self, trace_sphere):
        rec = trace_sphere((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), radius=-1.0)
        assert rec["hit"] == 1
        assert rec["front_face"] == 1
        assert_vec_close(rec["normal"], (0.0, 0.0, -1.0))


class TestRobustQuadratic:
    """Tests for numerical robustness of the quadratic formula."""

    def test_near_tangent_stability(self, trace_sphere):
        """Test a barely grazing ray hits or misses cleanly with no NaN."""
        rec = trace_sphere((1.0 + 1e-7, 0.0, -5.0), (0.0, 0.0, 1.0))
        assert rec["hit"] in (0, 1)
        if rec["hit"] == 1:
            assert all(not math.isnan(c) for c in rec["point"])

    def test_large_sphere_large_distance(self, trace_sphere):
        """Test f32 precision holds for a ground-sized sphere far away."""
        rec = trace_sphere((0.0, 0.0, 1e6), (0.0, 0.0, -1.0), radius=1000.0, t_max=1e10)
        assert rec["hit"] == 1
        # f32 has ~7 significant digits, so at 1e6 we expect error of ~10-100
        assert abs(rec["t"] - 999000.0) < 100.0

    def test_small_sphere(self, trace_sphere):
        rec = trace_sphere((0.0, 0.0, 1.0), (0.0, 0.0, -1.0), radius=0.001, t_min=1e-6)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 0.999) < 1e-4

    def test_zero_direction_misses(self, trace_sphere):
        """Test a zero-length direction never reports a hit."""
        rec = trace_sphere((0.0, 0.0, 5.0), (0.0, 0.0, 0.0))
        assert rec["hit"] == 0
