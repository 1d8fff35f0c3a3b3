"""Scene building on top of the sphere table and material registries.

Each material kind keeps its own registry (albedos for Lambertian, albedo
and fuzz for metal, IOR for dielectric). Spheres, however, store a single
integer material ID. This module owns that shared ID space: every ID maps
to a ``(MaterialType, registry index)`` pair kept in two Taichi fields so
the integrator can dispatch on material kind inside a kernel.

Materials never change after registration. Several spheres may share one
ID, and the preset builders give every sphere its own.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> ground = scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
    >>> scene.add_sphere(center=(0, -1000, 0), radius=1000, material_id=ground)
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti

from pathtracer.core.vector import vec3
from pathtracer.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from pathtracer.materials.lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
)
from pathtracer.materials.metal import (
    add_metal_material,
    clear_metal_materials,
)
from pathtracer.scene.intersection import (
    add_sphere,
    clear_scene,
    get_sphere_count,
)

logger = logging.getLogger(__name__)

# (center, radius, {"type": "lambertian" | "metal" | "dielectric", ...params})
SphereSpec = tuple[Sequence[float], float, Mapping[str, Any]]


class MaterialType(IntEnum):
    """Material kind stored per material ID and switched on by the integrator."""

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


MAX_MATERIALS = 1024

# Kind and per-kind registry slot of each material ID
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Look up the MaterialType value of ``material_id``; -1 if unregistered."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Look up where ``material_id`` lives in its kind's registry.

    For example the second metal ever registered has index 1, whatever its
    material ID. Returns -1 for an unregistered ID.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class MaterialInfo:
    """Host-side record of one registered material."""

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Host-side record of one sphere, mirroring its row in the sphere table."""

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Plain-data snapshot of a scene.

    ``materials`` holds parameter mappings in registration order, so a
    sphere's ``material_id`` is a position in that list.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_triple(values: Sequence[float]) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"Expected 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Builds the single live scene used by the renderer.

    The sphere table and material registries are module-level Taichi
    fields, so there is only ever one scene. Constructing a SceneManager
    or calling clear() wipes all of them.

    Example:
        >>> scene = SceneManager()
        >>> glass = scene.add_dielectric_material(ior=1.5)
        >>> scene.add_sphere((0, 1, 0), 1.0, glass)
        >>> scene.add_metal_sphere((4, 1, 0), 1.0, albedo=(0.7, 0.6, 0.5))
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Drop every sphere and material."""
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    # -- materials ----------------------------------------------------------

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(MaterialInfo(material_id, material_type, type_index, params))
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Register a diffuse material and return its material ID.

        Raises:
            ValueError: If albedo is not three values in [0, 1].
            RuntimeError: If a registry is full.
        """
        albedo = _as_triple(albedo)
        type_index = add_lambertian_material(albedo)
        return self._register_material(MaterialType.LAMBERTIAN, type_index, {"albedo": albedo})

    def add_metal_material(self, albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
        """Register a metal and return its material ID.

        Args:
            albedo: Reflected color, each channel in [0, 1].
            fuzz: Roughness in [0, 1]; 0 is a perfect mirror.

        Raises:
            ValueError: If albedo or fuzz is out of range.
            RuntimeError: If a registry is full.
        """
        albedo = _as_triple(albedo)
        type_index = add_metal_material(albedo, fuzz)
        return self._register_material(
            MaterialType.METAL, type_index, {"albedo": albedo, "fuzz": fuzz}
        )

    def add_dielectric_material(self, ior: float = 1.5) -> int:
        """Register a clear dielectric with index of refraction ``ior``."""
        type_index = add_dielectric_material(ior)
        return self._register_material(MaterialType.DIELECTRIC, type_index, {"ior": ior})

    def add_material(self, params: Mapping[str, Any]) -> int:
        """Register a material from a ``{"type": ..., **params}`` mapping.

        Missing parameters fall back to mid-grey diffuse, a light grey mirror
        and glass respectively.

        Raises:
            ValueError: If ``params["type"]`` names no known material.
        """
        mat_type = str(params.get("type", "")).lower()
        if mat_type == "lambertian":
            return self.add_lambertian_material(params.get("albedo", (0.5, 0.5, 0.5)))
        if mat_type == "metal":
            return self.add_metal_material(
                params.get("albedo", (0.8, 0.8, 0.8)),
                params.get("fuzz", 0.0),
            )
        if mat_type == "dielectric":
            return self.add_dielectric_material(params.get("ior", 1.5))
        raise ValueError(f"Unknown material type: {mat_type!r}")

    def get_material_count(self) -> int:
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Host-side twin of the get_material_type() Taichi function."""
        info = self.get_material_info(material_id)
        return info.material_type if info is not None else None

    # -- spheres ------------------------------------------------------------

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Place a sphere using an already registered material.

        A negative radius turns the normals inward, which is how a hollow
        glass shell is modelled.

        Returns:
            The sphere's row in the sphere table.

        Raises:
            ValueError: If material_id is unregistered, or the radius is zero
                or not finite.
            RuntimeError: If the sphere table is full.
        """
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

        center = _as_triple(center)
        sphere_index = add_sphere(vec3(center[0], center[1], center[2]), radius, material_id)
        self.spheres.append(SphereInfo(sphere_index, center, radius, material_id))
        return sphere_index

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Shorthand for a diffuse material plus a sphere; returns (sphere, material)."""
        material_id = self.add_lambertian_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        material_id = self.add_metal_material(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ior: float = 1.5,
    ) -> tuple[int, int]:
        material_id = self.add_dielectric_material(ior)
        return self.add_sphere(center, radius, material_id), material_id

    def add_sphere_from_spec(self, spec: SphereSpec) -> tuple[int, int]:
        """Register the material of ``spec`` and place its sphere.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        center, radius, material_params = spec
        material_id = self.add_material(material_params)
        sphere_index = self.add_sphere(_as_triple(center), float(radius), material_id)
        return sphere_index, material_id

    @classmethod
    def from_sphere_specs(cls, specs: Iterable[SphereSpec]) -> "SceneManager":
        """Start a fresh scene holding one sphere and one material per spec."""
        scene = cls()
        for spec in specs:
            scene.add_sphere_from_spec(spec)
        logger.info(
            "Built scene with %d spheres and %d materials",
            scene.get_sphere_count(),
            scene.get_material_count(),
        )
        return scene

    def get_sphere_count(self) -> int:
        return get_sphere_count()

    # -- snapshots ----------------------------------------------------------

    def to_config(self) -> SceneConfig:
        """Snapshot the scene as plain data."""
        materials = [
            {"type": mat.material_type.name.lower(), **mat.params} for mat in self.materials
        ]
        spheres = [
            {
                "center": list(sphere.center),
                "radius": sphere.radius,
                "material_id": sphere.material_id,
            }
            for sphere in self.spheres
        ]
        return SceneConfig(materials=materials, spheres=spheres)

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with the one described by ``config``.

        Raises:
            ValueError: If a material type, material ID or sphere is invalid.
        """
        self.clear()

        for mat_config in config.materials:
            self.add_material(mat_config)

        for sphere_config in config.spheres:
            self.add_sphere(
                _as_triple(sphere_config.get("center", (0.0, 0.0, 0.0))),
                sphere_config.get("radius", 1.0),
                sphere_config.get("material_id", 0),
            )
