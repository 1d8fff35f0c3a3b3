"""Render configuration.

RenderConfig collects everything needed to produce an image: output size,
sampling parameters, the preset scene, optional camera overrides, and the
Taichi backend. It performs no Taichi work itself, so it can be built and
validated before ti.init() is called.

Example:
    >>> config = RenderConfig(image_width=400, samples_per_pixel=50)
    >>> config.image_height
    225
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathtracer.camera.thin_lens import ThinLensCamera

Vec3Tuple = tuple[float, float, float]

SCENE_CHOICES = ("random", "three_spheres")
ARCH_CHOICES = ("cpu", "gpu")
IMAGE_SUFFIXES = (".ppm", ".png")


@dataclass
class RenderConfig:
    """Configuration for a single render.

    Camera fields left as None keep the value of the preset scene's camera.

    Attributes:
        image_width: Output width in pixels.
        aspect_ratio: Width divided by height; the height is
            int(image_width / aspect_ratio).
        samples_per_pixel: Number of Monte Carlo samples per pixel.
        max_depth: Maximum number of scatters followed per path.
        scene: Preset scene name.
        seed: Seed for random scene layout. None draws fresh entropy.
        arch: Taichi backend ("cpu" or "gpu"). None tries the GPU and falls
            back to the CPU.
        output: Output image path (.ppm or .png).
        batch_size: Samples rendered between progress reports.
        lookfrom: Camera position override.
        lookat: Camera target override.
        vup: Camera up vector override.
        vfov: Vertical field of view override, in degrees.
        aperture: Lens diameter override.
        focus_dist: Focus distance override.
    """

    image_width: int = 400
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 100
    max_depth: int = 50
    scene: str = "random"
    seed: int | None = None
    arch: str | None = None
    output: Path = Path("image.ppm")
    batch_size: int = 10
    lookfrom: Vec3Tuple | None = None
    lookat: Vec3Tuple | None = None
    vup: Vec3Tuple | None = None
    vfov: float | None = None
    aperture: float | None = None
    focus_dist: float | None = None

    def __post_init__(self) -> None:
        self.output = Path(self.output)
        self.validate()

    def validate(self) -> None:
        """Check every field.

        Raises:
            ValueError: If any field is out of range.
        """
        if self.image_width <= 0:
            raise ValueError(f"image_width must be positive, got {self.image_width}")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.image_height <= 0:
            raise ValueError(
                f"image_width {self.image_width} and aspect_ratio {self.aspect_ratio} "
                "give an empty image"
            )
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.scene not in SCENE_CHOICES:
            raise ValueError(f"Unknown scene {self.scene!r}; choose from {list(SCENE_CHOICES)}")
        if self.arch is not None and self.arch not in ARCH_CHOICES:
            raise ValueError(f"Unknown arch {self.arch!r}; choose from {list(ARCH_CHOICES)}")
        if self.output.suffix.lower() not in IMAGE_SUFFIXES:
            raise ValueError(f"Output must end in one of {list(IMAGE_SUFFIXES)}, got {self.output}")
        for name in ("lookfrom", "lookat", "vup"):
            value = getattr(self, name)
            if value is not None and len(value) != 3:
                raise ValueError(f"{name} must have 3 components, got {len(value)}")
        if self.vfov is not None and not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.aperture is not None and self.aperture < 0.0:
            raise ValueError(f"aperture must be non-negative, got {self.aperture}")
        if self.focus_dist is not None and self.focus_dist <= 0.0:
            raise ValueError(f"focus_dist must be positive, got {self.focus_dist}")

    @property
    def image_height(self) -> int:
        """Output height in pixels."""
        return int(self.image_width / self.aspect_ratio)

    def camera(self, base: ThinLensCamera) -> ThinLensCamera:
        """Apply the camera overrides to a preset camera.

        Args:
            base: The preset scene's camera.

        Returns:
            A new camera with this config's aspect ratio and every
            non-None override applied.
        """
        overrides = {
            name: getattr(self, name)
            for name in ("lookfrom", "lookat", "vup", "vfov", "aperture", "focus_dist")
            if getattr(self, name) is not None
        }
        for name in ("lookfrom", "lookat", "vup"):
            if name in overrides:
                overrides[name] = tuple(float(c) for c in overrides[name])
        return dataclasses.replace(base, aspect_ratio=self.aspect_ratio, **overrides)
