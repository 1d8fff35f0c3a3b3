"""Scene module for sphere storage, scene building and preset scenes.

Components:
    intersection: Sphere table in Taichi fields and closest-hit queries
    manager: Unified scene manager coordinating spheres and materials
    presets: Ready-made scenes with matching cameras

Scene data is organized for efficient GPU access:
    - Structure-of-Arrays layout for sphere data
    - Per-sphere material IDs indexing a unified material table
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
    trace_hit,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    SphereSpec,
    get_material_type,
    get_material_type_index,
    material_type_indices,
    material_types,
    num_materials,
)
from .presets import (
    SCENE_NAMES,
    create_random_scene,
    create_scene,
    create_three_sphere_scene,
    random_scene_specs,
    three_sphere_specs,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "trace_hit",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SphereSpec",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "material_types",
    "material_type_indices",
    "num_materials",
    # Presets module
    "SCENE_NAMES",
    "create_random_scene",
    "create_three_sphere_scene",
    "create_scene",
    "random_scene_specs",
    "three_sphere_specs",
]
