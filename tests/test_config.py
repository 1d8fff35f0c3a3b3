"""Tests for RenderConfig.

Note: pathtracer.config never imports Taichi, so it is imported at module
level. The camera module allocates Taichi fields and is imported inside
helpers, after the session fixture has initialized Taichi.
"""

from pathlib import Path

import pytest

from pathtracer.config import RenderConfig


def make_base_camera():
    from pathtracer.camera.thin_lens import ThinLensCamera

    return ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=16.0 / 9.0,
        aperture=0.1,
        focus_dist=10.0,
    )


class TestDefaults:
    def test_defaults(self):
        config = RenderConfig()

        assert config.image_width == 400
        assert config.image_height == 225
        assert config.samples_per_pixel == 100
        assert config.max_depth == 50
        assert config.scene == "random"
        assert config.output == Path("image.ppm")

    def test_output_is_converted_to_path(self):
        config = RenderConfig(output="render.png")

        assert isinstance(config.output, Path)
        assert config.output.suffix == ".png"

    @pytest.mark.parametrize(
        "width, aspect, expected",
        [(400, 16.0 / 9.0, 225), (200, 2.0, 100), (100, 1.0, 100), (10, 3.0, 3)],
    )
    def test_image_height(self, width, aspect, expected):
        assert RenderConfig(image_width=width, aspect_ratio=aspect).image_height == expected


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs, match",
        [
            ({"image_width": 0}, "image_width"),
            ({"aspect_ratio": 0.0}, "aspect_ratio"),
            ({"image_width": 1, "aspect_ratio": 2.0}, "empty image"),
            ({"samples_per_pixel": 0}, "samples_per_pixel"),
            ({"max_depth": -1}, "max_depth"),
            ({"batch_size": 0}, "batch_size"),
            ({"scene": "cornell"}, "Unknown scene"),
            ({"arch": "tpu"}, "Unknown arch"),
            ({"output": "image.jpg"}, "Output must end"),
            ({"lookfrom": (1.0, 2.0)}, "lookfrom"),
            ({"vfov": 180.0}, "vfov"),
            ({"vfov": 0.0}, "vfov"),
            ({"aperture": -0.5}, "aperture"),
            ({"focus_dist": 0.0}, "focus_dist"),
        ],
    )
    def test_invalid_values(self, kwargs, match):
        with pytest.raises(ValueError, match=match):
            RenderConfig(**kwargs)

    def test_max_depth_zero_is_allowed(self):
        assert RenderConfig(max_depth=0).max_depth == 0


class TestCameraOverrides:
    def test_no_overrides_keeps_preset(self):
        base = make_base_camera()

        camera = RenderConfig(aspect_ratio=2.0).camera(base)

        assert camera.lookfrom == base.lookfrom
        assert camera.vfov == base.vfov
        assert camera.aperture == base.aperture
        assert camera.aspect_ratio == 2.0

    def test_overrides_replace_fields(self):
        base = make_base_camera()
        config = RenderConfig(lookfrom=(1, 2, 3), vfov=45.0, aperture=0.0, focus_dist=3.0)

        camera = config.camera(base)

        assert camera.lookfrom == (1.0, 2.0, 3.0)
        assert camera.lookat == base.lookat
        assert camera.vfov == 45.0
        assert camera.aperture == 0.0
        assert camera.focus_dist == 3.0

    def test_base_camera_unchanged(self):
        base = make_base_camera()

        RenderConfig(vfov=60.0).camera(base)

        assert base.vfov == 20.0
