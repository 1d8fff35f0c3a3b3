"""Dielectric (glass/water) material implementation.

Dielectrics split incoming light between reflection and refraction:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Total internal reflection when the refraction ratio times sin(theta)
      exceeds 1
    - Schlick's approximation for the reflected fraction

Instead of tracing both branches, a single ray picks reflection with
probability equal to the Schlick reflectance, which converges to the same
image under Monte Carlo averaging. Clear glass does not tint light, so the
attenuation is always white.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face
    >>> # )
"""

import math

import taichi as ti
import taichi.math as tm

from pathtracer.core.vector import random_float, reflect, refract, unit_vector, vec3


@ti.func
def schlick_reflectance(cosine: ti.f32, ref_idx: ti.f32) -> ti.f32:
    """Schlick's approximation of Fresnel reflectance.

    ``r0 = ((1 - n) / (1 + n))^2`` is symmetric in ``n`` and ``1 / n``, so
    either the index or the refraction ratio may be passed.

    Args:
        cosine: Cosine of the angle between the incoming ray and the normal.
        ref_idx: Index of refraction (or refraction ratio).

    Returns:
        The approximate reflectance in [0, 1].
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def refraction_ratio_for(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """``1 / ior`` when entering the medium, ``ior`` when leaving it."""
    ratio = 1.0 / ior
    if front_face == 0:
        ratio = ior
    return ratio


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Compute scattered ray direction for dielectric material.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if the ray enters the material from outside,
            0 if it is leaving the material.

    Returns:
        A tuple of (scattered_direction, attenuation). Dielectrics always
        scatter.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    refraction_ratio = refraction_ratio_for(ior, front_face)

    unit_direction = unit_vector(incident_direction)
    cos_theta = tm.min(tm.dot(-unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(tm.max(1.0 - cos_theta * cos_theta, 0.0))

    cannot_refract = refraction_ratio * sin_theta > 1.0

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract or schlick_reflectance(cos_theta, refraction_ratio) > random_float():
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, refraction_ratio)

    return scattered_direction, attenuation


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

# Storage for dielectric material properties
dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass).
            Must be >= 1.0 (physically meaningful IOR).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If IOR is less than 1.0 or not finite.
    """
    if not 1.0 <= ior < math.inf:
        raise ValueError(
            f"Index of refraction = {ior} is less than 1.0 or not finite. "
            "IOR must be a finite value >= 1.0."
        )

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    return dielectric_iors[material_idx]
