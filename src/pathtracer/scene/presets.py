"""Ready-made scenes.

Each builder clears the global scene tables, fills them, and returns the
SceneManager together with a camera framing the scene. Call setup_camera()
on the returned camera before rendering.

Example:
    >>> scene, camera = create_random_scene(seed=7)
    >>> setup_camera(camera)
"""

import logging

import numpy as np

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.scene.manager import SceneManager, SphereSpec

logger = logging.getLogger(__name__)

DEFAULT_ASPECT_RATIO = 16.0 / 9.0

# Small spheres are laid out on a grid with cells in [-GRID_EXTENT, GRID_EXTENT)
GRID_EXTENT = 11
SMALL_SPHERE_RADIUS = 0.2

# Small spheres closer than this to the metal showcase sphere are skipped
_CLEARANCE_POINT = np.array([4.0, 0.2, 0.0])
_CLEARANCE_RADIUS = 0.9


def random_scene_specs(rng: np.random.Generator) -> list[SphereSpec]:
    """Build the sphere list of the random scene.

    A large grey ground sphere, a grid of small spheres with randomly chosen
    materials, and three large showcase spheres (glass, diffuse, metal).

    Args:
        rng: Random generator used for positions and materials.

    Returns:
        List of (center, radius, material) tuples.
    """
    specs: list[SphereSpec] = [
        ((0.0, -1000.0, 0.0), 1000.0, {"type": "lambertian", "albedo": (0.5, 0.5, 0.5)}),
    ]

    for a in range(-GRID_EXTENT, GRID_EXTENT):
        for b in range(-GRID_EXTENT, GRID_EXTENT):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), SMALL_SPHERE_RADIUS, b + 0.9 * rng.random()])

            if np.linalg.norm(center - _CLEARANCE_POINT) <= _CLEARANCE_RADIUS:
                continue

            if choose_mat < 0.8:
                albedo = rng.random(3) * rng.random(3)
                material = {"type": "lambertian", "albedo": tuple(albedo.tolist())}
            elif choose_mat < 0.95:
                albedo = rng.uniform(0.5, 1.0, size=3)
                fuzz = float(rng.uniform(0.0, 0.5))
                material = {"type": "metal", "albedo": tuple(albedo.tolist()), "fuzz": fuzz}
            else:
                material = {"type": "dielectric", "ior": 1.5}

            specs.append((tuple(center.tolist()), SMALL_SPHERE_RADIUS, material))

    specs.extend(
        [
            ((0.0, 1.0, 0.0), 1.0, {"type": "dielectric", "ior": 1.5}),
            ((-4.0, 1.0, 0.0), 1.0, {"type": "lambertian", "albedo": (0.4, 0.2, 0.1)}),
            ((4.0, 1.0, 0.0), 1.0, {"type": "metal", "albedo": (0.7, 0.6, 0.5), "fuzz": 0.0}),
        ]
    )
    return specs


def create_random_scene(
    seed: int | None = None,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the random spheres scene.

    Args:
        seed: Seed for the layout; the same seed gives the same scene.
        aspect_ratio: Aspect ratio of the returned camera.

    Returns:
        Tuple of (scene_manager, camera).
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager.from_sphere_specs(random_scene_specs(rng))

    camera = ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )
    logger.debug("Random scene seed=%s", seed)
    return scene, camera


def three_sphere_specs() -> list[SphereSpec]:
    """Sphere list of the three sphere scene.

    A ground sphere, a diffuse sphere in the middle, a hollow glass sphere
    on the left and a metal sphere on the right. The hollow glass is a
    sphere with a smaller negative-radius sphere inside it.
    """
    glass = {"type": "dielectric", "ior": 1.5}
    return [
        ((0.0, -100.5, -1.0), 100.0, {"type": "lambertian", "albedo": (0.8, 0.8, 0.0)}),
        ((0.0, 0.0, -1.0), 0.5, {"type": "lambertian", "albedo": (0.1, 0.2, 0.5)}),
        ((-1.0, 0.0, -1.0), 0.5, glass),
        ((-1.0, 0.0, -1.0), -0.4, glass),
        ((1.0, 0.0, -1.0), 0.5, {"type": "metal", "albedo": (0.8, 0.6, 0.2), "fuzz": 0.0}),
    ]


def create_three_sphere_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the three sphere scene.

    Returns:
        Tuple of (scene_manager, camera).
    """
    scene = SceneManager.from_sphere_specs(three_sphere_specs())

    camera = ThinLensCamera(
        lookfrom=(-2.0, 2.0, 1.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
    )
    return scene, camera


SCENE_NAMES = ("random", "three_spheres")


def create_scene(
    name: str,
    seed: int | None = None,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create a preset scene by name.

    Args:
        name: One of SCENE_NAMES.
        seed: Layout seed, used by scenes with random content.
        aspect_ratio: Aspect ratio of the returned camera.

    Raises:
        ValueError: If the name is unknown.
    """
    if name == "random":
        return create_random_scene(seed, aspect_ratio)
    if name == "three_spheres":
        return create_three_sphere_scene(aspect_ratio)
    raise ValueError(f"Unknown scene {name!r}; choose from {list(SCENE_NAMES)}")
