"""Sphere primitive and ray-sphere intersection.

The intersection solves ``|o + t d - c|^2 = r^2`` in its half-b form, which
drops a factor of two from every coefficient and keeps cancellation down:

    a      = |d|^2
    half_b = dot(oc, d)          where oc = o - c
    c'     = |oc|^2 - r^2
    disc   = half_b^2 - a c'

The smaller root is tried first and the larger one only if the smaller falls
outside the accepted interval ``(t_min, t_max]``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.vector import vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. A negative radius turns the
            outward normal inward, which models the inner wall of a hollow
            glass shell.
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: Whether the ray intersected the sphere (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit surface normal at the intersection, always facing
            against the incoming ray. Only valid if hit == 1.
        front_face: 1 if the ray arrived from the side the outward normal
            points to, 0 if it hit the surface from inside.
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be
            normalized).
        sphere: The sphere to test intersection against.
        t_min: Exclusive lower bound on accepted t (skips self-intersection).
        t_max: Inclusive upper bound on accepted t.

    Returns:
        A HitRecord for the closest root in ``(t_min, t_max]``. Check the
        hit field to determine if an intersection occurred.
    """
    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant >= 0.0 and a > 0.0:
        sqrt_d = ti.sqrt(discriminant)

        # Smaller root first, then the larger one
        t = (-half_b - sqrt_d) / a
        valid = t > t_min and t <= t_max
        if not valid:
            t = (-half_b + sqrt_d) / a
            valid = t > t_min and t <= t_max

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction

            # Unit length by construction: |point - center| == |radius|
            outward_normal = (hit_point - sphere.center) / sphere.radius

            if tm.dot(ray_direction, outward_normal) < 0.0:
                is_front_face = 1
                hit_normal = outward_normal
            else:
                is_front_face = 0
                hit_normal = -outward_normal

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius inside a Taichi kernel."""
    return Sphere(center=center, radius=radius)
