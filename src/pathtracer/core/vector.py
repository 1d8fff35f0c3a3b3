"""Vector kernel for the path tracer.

This module provides the 3-component vector operations used by every other
part of the renderer. Points, directions and colors all share Taichi's
``vec3`` type; the semantic role is a naming convention, not a type.

Kernel-side helpers are ``@ti.func`` so they inline into Taichi kernels.
Randomized constructors draw from Taichi's per-thread generator
(``ti.random``), so parallel pixels never share random state.

A small set of NumPy helpers covers the Python-scope math needed when
setting up the camera and building scenes.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.vector import reflect, vec3
    >>> @ti.kernel
    ... def mirror() -> vec3:
    ...     return reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
    >>> mirror()  # (1, 1, 0)
"""

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Components below this magnitude count as zero in near_zero()
NEAR_ZERO_EPSILON = 1e-8

# Upper bound on rejection-sampling draws. The expected number of draws is
# about 2 for the ball and 1.27 for the disk.
MAX_REJECTION_TRIES = 64


# =============================================================================
# Geometric Operations
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared Euclidean length of ``v``."""
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    """Euclidean length of ``v``."""
    return ti.sqrt(tm.dot(v, v))


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Args:
        v: The input vector.

    Returns:
        ``v / |v|``. A zero-length input returns the zero vector rather
        than propagating NaN into the rest of the path.
    """
    result = vec3(0.0, 0.0, 0.0)
    len_sq = tm.dot(v, v)
    if len_sq > 0.0:
        result = v / ti.sqrt(len_sq)
    return result


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect ``v`` about the unit normal ``n``: ``v - 2 (v . n) n``.

    The result has the same length as ``v``.
    """
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: ti.f32) -> vec3:
    """Refract a unit direction through a surface using Snell's law.

    The refracted ray is split into a component perpendicular to the normal,
    ``eta * (uv + cos_theta * n)``, and a component parallel to it,
    ``-sqrt(|1 - |r_perp|^2|) * n``. The cosine is clamped to 1 and the
    radicand taken in absolute value so floating-point overshoot never
    produces NaN.

    Args:
        uv: The incoming direction (unit length).
        n: The unit normal, on the same side as the incoming ray.
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(-tm.dot(uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - tm.dot(r_out_perp, r_out_perp))) * n
    return r_out_perp + r_out_parallel


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used to catch degenerate scatter directions.

    Returns:
        1 if every component is below NEAR_ZERO_EPSILON in magnitude.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_float() -> ti.f32:
    """Uniform random number in [0, 1)."""
    return ti.random(ti.f32)


@ti.func
def random_range(lo: ti.f32, hi: ti.f32) -> ti.f32:
    """Uniform random number in [lo, hi)."""
    return lo + (hi - lo) * ti.random(ti.f32)


@ti.func
def random_vec3() -> vec3:
    """Vector with each component uniform in [0, 1)."""
    return vec3(ti.random(ti.f32), ti.random(ti.f32), ti.random(ti.f32))


@ti.func
def random_vec3_range(lo: ti.f32, hi: ti.f32) -> vec3:
    """Vector with each component uniform in [lo, hi)."""
    return vec3(random_range(lo, hi), random_range(lo, hi), random_range(lo, hi))


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point inside the unit ball.

    Draws points in the cube [-1, 1]^3 and keeps the first one with squared
    length below 1. If every draw is rejected the origin is returned, so the
    result always lies strictly inside the ball.

    Returns:
        A random point with squared length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            candidate = random_vec3_range(-1.0, 1.0)
            if tm.dot(candidate, candidate) < 1.0:
                p = candidate
                found = True
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Random unit vector, the normalized unit-ball sample."""
    return unit_vector(random_in_unit_sphere())


@ti.func
def random_in_hemisphere(normal: vec3) -> vec3:
    """Random point in the unit ball on the same side as ``normal``.

    The ball sample is flipped when it falls in the opposite hemisphere, so
    the dot product with ``normal`` is never negative.
    """
    in_unit_sphere = random_in_unit_sphere()
    result = in_unit_sphere
    if tm.dot(in_unit_sphere, normal) < 0.0:
        result = -in_unit_sphere
    return result


@ti.func
def random_in_unit_disk() -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used for thin-lens (depth of field) sampling.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            candidate = vec3(random_range(-1.0, 1.0), random_range(-1.0, 1.0), 0.0)
            if tm.dot(candidate, candidate) < 1.0:
                p = candidate
                found = True
    return p


# =============================================================================
# Python-scope Helpers
# =============================================================================


def to_vec3(values: Sequence[float]) -> vec3:
    """Convert an (x, y, z) sequence into a Taichi vec3."""
    if len(values) != 3:
        raise ValueError(f"Expected 3 components, got {len(values)}")
    return vec3(float(values[0]), float(values[1]), float(values[2]))


def normalize_np(v: Sequence[float] | npt.NDArray[np.floating]) -> npt.NDArray[np.float64]:
    """Normalize a vector on the host.

    Args:
        v: The vector to normalize.

    Returns:
        The unit vector as a float64 array.

    Raises:
        ValueError: If ``v`` has zero length.
    """
    arr = np.asarray(v, dtype=np.float64)
    norm = float(np.linalg.norm(arr))
    if norm == 0.0 or not np.isfinite(norm):
        raise ValueError(f"Cannot normalize degenerate vector {tuple(arr.tolist())}")
    return arr / norm
