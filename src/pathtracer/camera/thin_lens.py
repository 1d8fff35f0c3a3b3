"""Thin-lens camera model for ray generation with depth of field.

This module implements a positionable camera that generates primary rays for
rendering. The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view specification
- Arbitrary aspect ratios
- Defocus blur through a finite aperture and focus distance
- Jittered sampling for anti-aliasing

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The image plane sits at focus_dist along -w. Ray origins are jittered over a
disk of radius aperture / 2 spanned by u and v, so geometry on the focus plane
stays sharp while nearer and farther geometry blurs. With aperture 0 the
camera degenerates to a pinhole.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from pathtracer.camera.thin_lens import ThinLensCamera, setup_camera, get_ray
    >>>
    >>> camera = ThinLensCamera(
    ...     lookfrom=(13.0, 2.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=16.0 / 9.0,
    ...     aperture=0.1,
    ...     focus_dist=10.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from pathtracer.core.ray import Ray, make_ray
from pathtracer.core.vector import random_in_unit_disk, unit_vector, vec3

logger = logging.getLogger(__name__)

# Parallel lookfrom-lookat/vup pairs produce a cross product below this norm
_DEGENERATE_EPSILON = 1e-9

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens (perspective, defocus) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 gives a pinhole camera with no defocus.
        focus_dist: Distance from lookfrom to the plane in perfect focus.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_dist: float = 1.0


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

# Camera origin (position)
_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Viewport vectors on the focus plane
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())  # Lower-left of viewport

_lens_radius = ti.field(dtype=ti.f32, shape=())


def _validate_camera(camera: ThinLensCamera) -> None:
    if not 0.0 < camera.vfov < 180.0:
        raise ValueError(f"vfov must be in (0, 180) degrees, got {camera.vfov}")
    if camera.aspect_ratio <= 0.0:
        raise ValueError(f"aspect_ratio must be positive, got {camera.aspect_ratio}")
    if camera.focus_dist <= 0.0:
        raise ValueError(f"focus_dist must be positive, got {camera.focus_dist}")
    if camera.aperture < 0.0:
        raise ValueError(f"aperture must be non-negative, got {camera.aperture}")


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: ThinLensCamera) -> None:
    """Initialize camera state from configuration.

    Computes the camera's orthonormal basis (u, v, w), the viewport on the
    focus plane and the lens radius. This must be called before rendering.

    Args:
        camera: Camera configuration with position, orientation, FOV and lens.

    Raises:
        ValueError: If lookfrom equals lookat, vup is parallel to the view
            direction, or a scalar parameter is out of range.

    Note:
        This function writes to Taichi fields and should be called from
        Python (not from within a Taichi kernel).
    """
    _validate_camera(camera)

    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)

    # Viewport dimensions at unit distance
    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.asarray(camera.lookfrom, dtype=np.float64)
    lookat = np.asarray(camera.lookat, dtype=np.float64)
    vup = np.asarray(camera.vup, dtype=np.float64)

    # w points from lookat toward lookfrom (backward)
    w = lookfrom - lookat
    w_norm = np.linalg.norm(w)
    if w_norm < _DEGENERATE_EPSILON:
        raise ValueError("lookfrom and lookat must be distinct points")
    w = w / w_norm

    # u points right (perpendicular to w and vup)
    u = np.cross(vup, w)
    u_norm = np.linalg.norm(u)
    if u_norm < _DEGENERATE_EPSILON:
        raise ValueError("vup must not be parallel to the view direction")
    u = u / u_norm

    # v points up in the camera's frame
    v = np.cross(w, u)

    horizontal = camera.focus_dist * viewport_width * u
    vertical = camera.focus_dist * viewport_height * v
    lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - camera.focus_dist * w

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()
    _lens_radius[None] = camera.aperture / 2.0

    logger.debug(
        "Camera at %s looking at %s (vfov=%.1f, aperture=%.3f, focus_dist=%.3f)",
        tuple(camera.lookfrom),
        tuple(camera.lookat),
        camera.vfov,
        camera.aperture,
        camera.focus_dist,
    )


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def get_ray(s: ti.f32, t: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (s, t).

    The ray starts at a random point on the lens disk and passes through the
    point (s, t) on the focus plane:
    - s = 0: left edge, s = 1: right edge
    - t = 0: bottom edge, t = 1: top edge

    Args:
        s: Horizontal coordinate in [0, 1] (left to right).
        t: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray with unit-length direction.
    """
    rd = _lens_radius[None] * random_in_unit_disk()
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y

    origin = _camera_origin[None] + offset
    target = _lower_left_corner[None] + s * _viewport_horizontal[None] + t * _viewport_vertical[None]

    return make_ray(origin, unit_vector(target - origin))


@ti.func
def get_ray_jittered(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate a ray through a random point inside pixel (i, j).

    When accumulated over multiple samples, the sub-pixel jitter
    anti-aliases edges.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
    """
    s = (ti.cast(pixel_i, ti.f32) + ti.random(ti.f32)) / ti.cast(width, ti.f32)
    t = (ti.cast(pixel_j, ti.f32) + ti.random(ti.f32)) / ti.cast(height, ti.f32)
    return get_ray(s, t)


# =============================================================================
# Utility Functions
# =============================================================================


def _as_tuple(vec) -> tuple[float, float, float]:
    return (float(vec[0]), float(vec[1]), float(vec[2]))


def get_camera_info() -> dict[str, tuple[float, float, float] | float]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        and lens_radius.
    """
    return {
        "origin": _as_tuple(_camera_origin[None]),
        "u": _as_tuple(_camera_u[None]),
        "v": _as_tuple(_camera_v[None]),
        "w": _as_tuple(_camera_w[None]),
        "horizontal": _as_tuple(_viewport_horizontal[None]),
        "vertical": _as_tuple(_viewport_vertical[None]),
        "lower_left": _as_tuple(_lower_left_corner[None]),
        "lens_radius": float(_lens_radius[None]),
    }


_MAX_SAMPLED_RAYS = 65536
_sampled_origins = ti.Vector.field(3, dtype=ti.f32, shape=_MAX_SAMPLED_RAYS)
_sampled_directions = ti.Vector.field(3, dtype=ti.f32, shape=_MAX_SAMPLED_RAYS)


@ti.kernel
def _sample_camera_rays_kernel(s: ti.f32, t: ti.f32, n: ti.i32):
    for k in range(n):
        ray = get_ray(s, t)
        _sampled_origins[k] = ray.origin
        _sampled_directions[k] = ray.direction


def sample_camera_rays(s: float, t: float, n: int) -> tuple[np.ndarray, np.ndarray]:
    """Draw n camera rays through (s, t) and return them as NumPy arrays.

    Useful for inspecting the lens sampling from Python.

    Returns:
        Tuple (origins, directions), each of shape (n, 3).

    Raises:
        ValueError: If n is not in [1, 65536].
    """
    if not 1 <= n <= _MAX_SAMPLED_RAYS:
        raise ValueError(f"n must be in [1, {_MAX_SAMPLED_RAYS}], got {n}")
    _sample_camera_rays_kernel(s, t, n)
    origins = _sampled_origins.to_numpy()[:n]
    directions = _sampled_directions.to_numpy()[:n]
    return origins, directions
