"""Path tracing integrator for Monte Carlo light transport.

This module implements the radiance estimator and the per-pixel sampling
kernels. A camera ray is traced through the scene, bouncing off spheres
according to their material, until it escapes to the sky, is absorbed, or
runs out of bounces. Each bounce multiplies the path throughput by the
material attenuation; an escaping ray picks up the sky gradient.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Vertical white-to-blue sky gradient as the only light source
    - Bounded path depth; paths that exhaust it contribute black
    - Progressive sample accumulation into a per-pixel running mean

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from pathtracer.core.integrator import render_image, setup_render_target
    >>> from pathtracer.scene.presets import create_three_sphere_scene
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_three_sphere_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(400, 225)
    >>> render_image(num_samples=100, max_depth=50)
"""

import logging

import numpy as np
import taichi as ti
import taichi.math as tm

from pathtracer.camera.thin_lens import get_ray_jittered
from pathtracer.core.vector import unit_vector, vec3
from pathtracer.materials.dielectric import (
    get_dielectric_ior,
    scatter_dielectric,
)
from pathtracer.materials.lambertian import (
    get_lambertian_albedo,
    scatter_lambertian,
)
from pathtracer.materials.metal import (
    get_metal_albedo,
    get_metal_fuzz,
    scatter_metal,
)
from pathtracer.scene.intersection import intersect_scene
from pathtracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum number of bounces after the camera ray
MAX_DEPTH = 50

# Default samples per pixel
SAMPLES_PER_PIXEL = 100

# Accepted ray parameter interval (t_min, t_max]. t_min > 0 keeps scattered
# rays from re-hitting the surface they leave (shadow acne).
T_MIN = 0.001
T_MAX = tm.inf

# Sky gradient endpoints
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Running mean of the samples per pixel (preallocated to max size)
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Sample count per pixel (preallocated to max size)
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.
    The buffers are preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT
    to avoid Taichi kernel recompilation issues.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum
            supported size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()
    logger.debug("Render target set to %dx%d", width, height)


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_image() -> "ti.MatrixField":
    """Get the color buffer.

    Note: This returns the full preallocated buffer. Use get_image_dimensions()
    to determine the active region.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _color_buffer


def get_sample_count() -> "ti.ScalarField":
    """Get the sample count field.

    Note: This returns the full preallocated buffer. Use get_image_dimensions()
    to determine the active region.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _sample_count


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the appropriate material scattering function.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The surface normal (unit length, facing the incoming ray).
        front_face: 1 if hit front face, 0 if back face.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        did_scatter is 1 if the ray scattered and 0 if it was absorbed.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_lambertian_albedo(type_index)
        scattered_direction, attenuation = scatter_lambertian(albedo, normal)
        did_scatter = 1

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        scattered_direction, attenuation, did_scatter = scatter_metal(
            albedo, fuzz, incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        ior = get_dielectric_ior(type_index)
        scattered_direction, attenuation = scatter_dielectric(
            ior, incident_direction, normal, front_face
        )
        did_scatter = 1

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background radiance for a ray that escapes the scene.

    Linear blend from white at the horizon to light blue overhead, keyed on
    the y component of the unit direction.
    """
    t = 0.5 * (unit_vector(direction).y + 1.0)
    return (1.0 - t) * SKY_HORIZON_COLOR + t * SKY_ZENITH_COLOR


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    The camera ray is at depth 0 and every scatter increments the depth.
    A ray at depth greater than max_depth contributes black, so at most
    max_depth + 1 intersections are tested. Absorbed rays contribute black;
    escaping rays contribute the sky color scaled by the product of the
    attenuations collected along the way.

    Args:
        origin: The ray origin.
        direction: The ray direction (any non-zero length).
        max_depth: The maximum number of scatters to follow.

    Returns:
        The estimated radiance (RGB).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    ray_origin = origin
    ray_direction = direction

    # Iterative form of the recursive estimate; Taichi functions cannot recurse
    active = 1
    for _ in range(max_depth + 1):
        if active == 1:
            rec = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * sky_color(ray_direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    rec.material_id, ray_direction, rec.normal, rec.front_face
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    ray_origin = rec.point
                    ray_direction = scattered_direction

    return color


@ti.func
def render_sample_impl(
    pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32, max_depth: ti.i32
) -> vec3:
    """Render a single jittered sample for a pixel.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: The maximum number of scatters to follow.
    """
    ray = get_ray_jittered(pixel_i, pixel_j, width, height)
    return ray_color(ray.origin, ray.direction, max_depth)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32, max_depth: ti.i32):
    """Render one sample per pixel and fold it into the running mean."""
    for i, j in ti.ndrange(width, height):
        color = render_sample_impl(i, j, width, height, max_depth)

        # Clamp negative values (numerical errors)
        color = tm.max(color, vec3(0.0, 0.0, 0.0))

        for c in ti.static(range(3)):
            if tm.isnan(color[c]) or tm.isinf(color[c]):
                color[c] = 0.0

        _sample_count[i, j] += 1
        n = _sample_count[i, j]

        # Running average: avg_n = avg_{n-1} + (x_n - avg_{n-1}) / n
        _color_buffer[i, j] += (color - _color_buffer[i, j]) / ti.cast(n, ti.f32)


# Python-side result, written by the single-sample kernels
_sample_color = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32, max_depth: ti.i32
):
    # Single-iteration outer loop keeps the path loop serial
    for _ in range(1):
        _sample_color[None] = render_sample_impl(pixel_i, pixel_j, width, height, max_depth)


@ti.kernel
def _ray_color_kernel(origin: vec3, direction: vec3, max_depth: ti.i32):
    for _ in range(1):
        _sample_color[None] = ray_color(origin, direction, max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def _check_max_depth(max_depth: int) -> None:
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")


def trace_ray_color(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Evaluate one radiance sample for an arbitrary ray from Python.

    Intended for tests and debugging; the scene must already be built.

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        ValueError: If max_depth is negative.
    """
    _check_max_depth(max_depth)
    _ray_color_kernel(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        max_depth,
    )
    color = _sample_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def render_sample(pixel_i: int, pixel_j: int, max_depth: int = MAX_DEPTH) -> tuple[float, float, float]:
    """Render a single sample for a specific pixel.

    This is a Python-callable function for testing. For production rendering,
    use render_image() which processes all pixels in parallel.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        max_depth: The maximum number of scatters to follow.

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    _check_max_depth(max_depth)

    width, height = get_image_dimensions()
    _render_single_pixel(pixel_i, pixel_j, width, height, max_depth)
    color = _sample_color[None]

    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(num_samples: int = SAMPLES_PER_PIXEL, max_depth: int = MAX_DEPTH) -> None:
    """Render the image with the specified number of samples per pixel.

    Progressively accumulates samples into the color buffer. Can be called
    multiple times to add more samples for convergence.

    Args:
        num_samples: Number of samples to render per pixel.
        max_depth: The maximum number of scatters to follow.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If max_depth is negative.
    """
    _check_render_target_initialized()
    _check_max_depth(max_depth)

    width, height = get_image_dimensions()
    logger.debug("Rendering %d spp at %dx%d (max_depth=%d)", num_samples, width, height, max_depth)

    for _ in range(num_samples):
        _render_one_spp(width, height, max_depth)


def get_total_samples() -> int:
    """Get the total number of samples rendered so far.

    Returns the sample count from pixel (0, 0), which is the same for all
    pixels after calling render_image().

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_sample_count[0, 0])


def get_normalized_image_numpy() -> np.ndarray:
    """Get the per-pixel sample mean as a NumPy array.

    Values are linear radiance, not gamma corrected or clamped. The array
    shape is (height, width, 3) with the top row first, dtype float32.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :]

    # Transpose from (width, height, 3) to (height, width, 3) for standard image format
    image = np.transpose(image, (1, 0, 2))

    # Flip vertically (row j = 0 is the bottom of the image)
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)
