#!/usr/bin/env python3
"""Render a sphere scene.

Builds one of the preset scenes, sets up its thin-lens camera, renders with
progressive refinement and writes the image as a P3 pixmap or PNG.

Usage:
    python examples/render_spheres.py [options]

Options:
    --width WIDTH           Image width in pixels (default: 400)
    --aspect-ratio RATIO    Width / height (default: 16/9)
    --samples SAMPLES       Number of samples per pixel (default: 100)
    --max-depth DEPTH       Maximum scatters per path (default: 50)
    --scene NAME            random or three_spheres (default: random)
    --seed SEED             Seed for the random scene layout
    --output OUTPUT         Output file path, .ppm or .png (default: image.ppm)
    --batch-size SIZE       Samples per progress update (default: 10)
    --arch {cpu,gpu}        Taichi backend (default: GPU with CPU fallback)
    --lookfrom X Y Z        Camera position override
    --lookat X Y Z          Camera target override
    --vup X Y Z             Camera up direction override
    --vfov DEGREES          Vertical field of view override
    --aperture DIAMETER     Lens diameter override
    --focus-dist DISTANCE   Focus distance override
    --quiet                 Suppress progress output
    --verbose               Enable debug logging

Example:
    python examples/render_spheres.py --width 200 --samples 20 --seed 7 --output spheres.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

from pathtracer.config import ARCH_CHOICES, SCENE_CHOICES, RenderConfig


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene with the Monte Carlo path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=16.0 / 9.0,
        help="Image width divided by height (default: 16/9)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum number of scatters per path (default: 50)",
    )
    parser.add_argument(
        "--scene",
        choices=SCENE_CHOICES,
        default="random",
        help="Preset scene (default: random)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random scene layout",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="image.ppm",
        help="Output file path, .ppm or .png (default: image.ppm)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Samples per progress update (default: 10)",
    )
    parser.add_argument(
        "--arch",
        choices=ARCH_CHOICES,
        default=None,
        help="Taichi backend (default: GPU with CPU fallback)",
    )
    parser.add_argument(
        "--lookfrom",
        type=float,
        nargs=3,
        metavar=("X", "Y", "Z"),
        default=None,
        help="Camera position (default: the scene's camera)",
    )
    parser.add_argument(
        "--lookat",
        type=float,
        nargs=3,
        metavar=("X", "Y", "Z"),
        default=None,
        help="Camera target (default: the scene's camera)",
    )
    parser.add_argument(
        "--vup",
        type=float,
        nargs=3,
        metavar=("X", "Y", "Z"),
        default=None,
        help="Camera up direction (default: the scene's camera)",
    )
    parser.add_argument(
        "--vfov",
        type=float,
        default=None,
        help="Vertical field of view in degrees (default: the scene's camera)",
    )
    parser.add_argument(
        "--aperture",
        type=float,
        default=None,
        help="Lens diameter, 0 for a pinhole (default: the scene's camera)",
    )
    parser.add_argument(
        "--focus-dist",
        type=float,
        default=None,
        help="Distance to the plane in focus (default: the scene's camera)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def init_taichi(arch: str | None, seed: int | None, quiet: bool) -> None:
    """Initialize Taichi on the requested backend."""
    kwargs = {} if seed is None else {"random_seed": seed}
    if arch is not None:
        ti.init(arch=ti.gpu if arch == "gpu" else ti.cpu, **kwargs)
        return

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu, **kwargs)
        if not quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu, **kwargs)
        if not quiet:
            print("Using CPU backend")


def render_spheres(config: RenderConfig, quiet: bool = False) -> Path:
    """Render the configured scene and save it to file.

    Args:
        config: The render configuration.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.camera.thin_lens import setup_camera
    from pathtracer.core.progressive import ProgressiveRenderer
    from pathtracer.scene.presets import create_scene

    width, height = config.image_width, config.image_height

    if not quiet:
        print(f"Creating {config.scene} scene ({width}x{height})...")

    scene, camera = create_scene(config.scene, seed=config.seed, aspect_ratio=config.aspect_ratio)
    setup_camera(config.camera(camera))

    renderer = ProgressiveRenderer(width, height, max_depth=config.max_depth)

    if not quiet:
        print(
            f"Rendering {scene.get_sphere_count()} spheres at "
            f"{config.samples_per_pixel} samples per pixel..."
        )

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    renderer.render(
        num_samples=config.samples_per_pixel,
        batch_size=config.batch_size,
        callback=progress_callback,
    )

    if not quiet:
        print()  # Newline after progress

    renderer.save_image(config.output)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {config.output.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return config.output


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = RenderConfig(
            image_width=args.width,
            aspect_ratio=args.aspect_ratio,
            samples_per_pixel=args.samples,
            max_depth=args.max_depth,
            scene=args.scene,
            seed=args.seed,
            arch=args.arch,
            output=Path(args.output),
            batch_size=args.batch_size,
            lookfrom=tuple(args.lookfrom) if args.lookfrom else None,
            lookat=tuple(args.lookat) if args.lookat else None,
            vup=tuple(args.vup) if args.vup else None,
            vfov=args.vfov,
            aperture=args.aperture,
            focus_dist=args.focus_dist,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    init_taichi(config.arch, config.seed, args.quiet)

    try:
        render_spheres(config, quiet=args.quiet)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
