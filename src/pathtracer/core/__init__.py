"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    vector: vec3 operations, reflection/refraction and random samplers
    ray: Ray data structure
    integrator: Radiance estimator, render target and sampling kernels
    progressive: Batched sample accumulation with progress reporting

The integrator follows each camera ray through a chain of material
scattering events, bounded by a maximum depth, and returns sky radiance
when a ray escapes the scene.
"""

from .ray import Ray, make_ray, ray_at
from .vector import (
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    normalize_np,
    random_float,
    random_in_hemisphere,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_range,
    random_unit_vector,
    random_vec3,
    random_vec3_range,
    reflect,
    refract,
    to_vec3,
    unit_vector,
    vec3,
)

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from pathtracer.core.integrator or pathtracer.core.progressive.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "dot",
    "cross",
    "unit_vector",
    "reflect",
    "refract",
    "near_zero",
    "random_float",
    "random_range",
    "random_vec3",
    "random_vec3_range",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_hemisphere",
    "random_in_unit_disk",
    "to_vec3",
    "normalize_np",
]
