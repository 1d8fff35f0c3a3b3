"""Tests for the preset scenes.

Tests cover:
- Random scene layout (determinism, ground, clearance, showcase spheres)
- Three sphere scene contents
- Preset cameras
- Lookup by name
"""

import numpy as np
import pytest


class TestRandomSceneSpecs:
    """Tests for the random scene sphere list."""

    def test_same_seed_same_layout(self):
        from pathtracer.scene.presets import random_scene_specs

        specs_a = random_scene_specs(np.random.default_rng(123))
        specs_b = random_scene_specs(np.random.default_rng(123))

        assert specs_a == specs_b

    def test_different_seeds_differ(self):
        from pathtracer.scene.presets import random_scene_specs

        specs_a = random_scene_specs(np.random.default_rng(1))
        specs_b = random_scene_specs(np.random.default_rng(2))

        assert specs_a != specs_b

    def test_ground_and_showcase_spheres(self):
        from pathtracer.scene.presets import random_scene_specs

        specs = random_scene_specs(np.random.default_rng(0))

        center, radius, material = specs[0]
        assert center == (0.0, -1000.0, 0.0)
        assert radius == 1000.0
        assert material == {"type": "lambertian", "albedo": (0.5, 0.5, 0.5)}

        showcase = specs[-3:]
        assert [s[0] for s in showcase] == [(0.0, 1.0, 0.0), (-4.0, 1.0, 0.0), (4.0, 1.0, 0.0)]
        assert [s[2]["type"] for s in showcase] == ["dielectric", "lambertian", "metal"]

    def test_small_spheres_layout(self):
        from pathtracer.scene.presets import GRID_EXTENT, SMALL_SPHERE_RADIUS, random_scene_specs

        specs = random_scene_specs(np.random.default_rng(0))
        small = specs[1:-3]

        assert 0 < len(small) <= (2 * GRID_EXTENT) ** 2
        for center, radius, _material in small:
            assert radius == SMALL_SPHERE_RADIUS
            assert center[1] == SMALL_SPHERE_RADIUS
            assert -GRID_EXTENT <= center[0] < GRID_EXTENT
            assert -GRID_EXTENT <= center[2] < GRID_EXTENT
            distance = np.linalg.norm(np.array(center) - np.array([4.0, 0.2, 0.0]))
            assert distance > 0.9

    def test_small_sphere_materials_are_valid(self):
        from pathtracer.scene.presets import random_scene_specs

        specs = random_scene_specs(np.random.default_rng(5))

        for _center, _radius, material in specs[1:-3]:
            if material["type"] == "lambertian":
                assert all(0.0 <= c <= 1.0 for c in material["albedo"])
            elif material["type"] == "metal":
                assert all(0.5 <= c <= 1.0 for c in material["albedo"])
                assert 0.0 <= material["fuzz"] <= 0.5
            else:
                assert material == {"type": "dielectric", "ior": 1.5}


class TestCreateRandomScene:
    """Tests for create_random_scene."""

    def test_scene_is_loaded(self):
        from pathtracer.scene.intersection import get_sphere_count
        from pathtracer.scene.presets import create_random_scene, random_scene_specs

        scene, _camera = create_random_scene(seed=7)
        expected = len(random_scene_specs(np.random.default_rng(7)))

        assert scene.get_sphere_count() == expected
        assert get_sphere_count() == expected
        assert scene.get_material_count() == expected

    def test_camera(self):
        from pathtracer.scene.presets import create_random_scene

        _scene, camera = create_random_scene(seed=7, aspect_ratio=1.5)

        assert camera.lookfrom == (13.0, 2.0, 3.0)
        assert camera.lookat == (0.0, 0.0, 0.0)
        assert camera.vfov == 20.0
        assert camera.aperture == 0.1
        assert camera.focus_dist == 10.0
        assert camera.aspect_ratio == 1.5


class TestThreeSphereScene:
    """Tests for the three sphere scene."""

    def test_specs(self):
        from pathtracer.scene.presets import three_sphere_specs

        specs = three_sphere_specs()

        assert len(specs) == 5
        assert [s[1] for s in specs] == [100.0, 0.5, 0.5, -0.4, 0.5]
        # The hollow glass shell shares its center with the inner surface
        assert specs[2][0] == specs[3][0] == (-1.0, 0.0, -1.0)
        assert specs[4][2] == {"type": "metal", "albedo": (0.8, 0.6, 0.2), "fuzz": 0.0}

    def test_create(self):
        from pathtracer.scene.manager import MaterialType
        from pathtracer.scene.presets import create_three_sphere_scene

        scene, camera = create_three_sphere_scene()

        assert scene.get_sphere_count() == 5
        assert scene.get_material_type_python(3) == MaterialType.DIELECTRIC
        assert camera.lookfrom == (-2.0, 2.0, 1.0)
        assert camera.lookat == (0.0, 0.0, -1.0)
        assert camera.aperture == 0.0

    def test_center_ray_hits_diffuse_sphere(self):
        from pathtracer.scene.intersection import trace_hit
        from pathtracer.scene.presets import create_three_sphere_scene

        scene, _camera = create_three_sphere_scene()

        hit = trace_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit is not None
        assert hit["t"] == pytest.approx(0.5, abs=1e-5)
        assert scene.get_material_info(hit["material_id"]).params["albedo"] == (0.1, 0.2, 0.5)


class TestCreateScene:
    """Tests for lookup by name."""

    @pytest.mark.parametrize("name", ["random", "three_spheres"])
    def test_known_names(self, name):
        from pathtracer.scene.presets import create_scene

        scene, camera = create_scene(name, seed=3, aspect_ratio=2.0)

        assert scene.get_sphere_count() > 0
        assert camera.aspect_ratio == 2.0

    def test_unknown_name(self):
        from pathtracer.scene.presets import create_scene

        with pytest.raises(ValueError, match="Unknown scene"):
            create_scene("cornell")

    def test_names_match_config_choices(self):
        from pathtracer.config import SCENE_CHOICES
        from pathtracer.scene.presets import SCENE_NAMES

        assert tuple(SCENE_CHOICES) == tuple(SCENE_NAMES)
