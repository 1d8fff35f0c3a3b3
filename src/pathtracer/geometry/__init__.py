"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with analytic ray-sphere intersection

Spheres are the only primitive. The intersection routine is a Taichi
function (@ti.func) so it inlines into the per-pixel rendering kernels.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
]
