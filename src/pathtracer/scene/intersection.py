"""Scene-level sphere intersection testing.

The scene is an ordered table of spheres stored in Taichi fields
(structure-of-arrays layout). Each sphere carries the unified ID of the
material it was registered with. There is no spatial index: every query
tests every sphere, narrowing the accepted interval to the closest hit found
so far.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.intersection import (
    ...     SceneHitRecord, add_sphere, intersect_scene, clear_scene
    ... )
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, -1), 0.5, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import logging
import math

import taichi as ti

from pathtracer.core.vector import vec3
from pathtracer.geometry.sphere import HitRecord, Sphere, hit_sphere

logger = logging.getLogger(__name__)


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Extends the basic HitRecord with the material ID of the sphere that was
    hit, which indexes the scene's material table.

    Attributes:
        hit: Whether the ray intersected any sphere (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit surface normal facing against the ray.
            Only valid if hit == 1.
        front_face: Whether the ray hit the front face (1) or back face (0).
            Only valid if hit == 1.
        material_id: The material ID of the hit sphere. -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout for GPU efficiency
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. The actual field data is not cleared
    but will be overwritten when new spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere. Negative values flip the normal
            (hollow shells); zero is rejected.
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
        ValueError: If the radius is zero or not finite.
    """
    if radius == 0.0 or not math.isfinite(radius):
        raise ValueError(f"Sphere radius must be non-zero and finite, got {radius}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def _hit_record_to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Test ray against all spheres in the scene.

    Iterates the spheres in insertion order, passing the closest t found so
    far as the upper bound of the next test. A later sphere at exactly the
    same t replaces the earlier one.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Exclusive lower bound on accepted t.
        t_max: Inclusive upper bound on accepted t.

    Returns:
        A SceneHitRecord containing the closest intersection, or a miss
        record if no intersection was found.
    """
    closest_t = t_max
    result = _make_miss_record()

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _hit_record_to_scene_hit_record(rec, sphere_material_ids[i])

    return result


# Python-side trace results, written by _trace_hit_kernel
_traced_hit = ti.field(dtype=ti.i32, shape=())
_traced_t = ti.field(dtype=ti.f32, shape=())
_traced_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_traced_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_traced_front_face = ti.field(dtype=ti.i32, shape=())
_traced_material_id = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _trace_hit_kernel(origin: vec3, direction: vec3, t_min: ti.f32, t_max: ti.f32):
    # Single-iteration outer loop keeps the sphere loop serial
    for _ in range(1):
        rec = intersect_scene(origin, direction, t_min, t_max)
        _traced_hit[None] = rec.hit
        _traced_t[None] = rec.t
        _traced_point[None] = rec.point
        _traced_normal[None] = rec.normal
        _traced_front_face[None] = rec.front_face
        _traced_material_id[None] = rec.material_id


def trace_hit(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    t_min: float = 0.001,
    t_max: float = float("inf"),
) -> dict | None:
    """Intersect a single ray with the scene from Python scope.

    Useful for debugging scenes and for tests.

    Args:
        origin: Ray origin as (x, y, z).
        direction: Ray direction as (x, y, z).
        t_min: Exclusive lower bound on accepted t.
        t_max: Inclusive upper bound on accepted t.

    Returns:
        A dictionary with t, point, normal, front_face and material_id,
        or None if the ray misses every sphere.
    """
    _trace_hit_kernel(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        t_min,
        t_max,
    )
    if _traced_hit[None] == 0:
        return None

    point = _traced_point[None]
    normal = _traced_normal[None]
    logger.debug("Traced ray hit material %d at t=%f", _traced_material_id[None], _traced_t[None])
    return {
        "t": float(_traced_t[None]),
        "point": (float(point[0]), float(point[1]), float(point[2])),
        "normal": (float(normal[0]), float(normal[1]), float(normal[2])),
        "front_face": bool(_traced_front_face[None]),
        "material_id": int(_traced_material_id[None]),
    }
