"""Preview module for image output.

Components:
    export: 8-bit conversion, P3 pixmap and PNG writers

Example:
    >>> from pathtracer.preview import save_image
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(100)
    >>> save_image("output.png", renderer.get_image_numpy())
"""

from pathtracer.preview.export import (
    ImageWriteError,
    compute_rmse,
    format_ppm,
    save_image,
    save_png,
    save_ppm,
    to_rgb8,
)

__all__ = [
    "ImageWriteError",
    "compute_rmse",
    "format_ppm",
    "save_image",
    "save_png",
    "save_ppm",
    "to_rgb8",
]
