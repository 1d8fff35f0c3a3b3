"""Taichi-based Monte Carlo path tracer for sphere scenes.

This package renders scenes of spheres with diffuse, metal and glass
materials under a sky gradient, with support for:
- Recursive material scattering with a bounded path depth
- A positionable thin-lens camera with defocus blur
- Progressive per-pixel sample accumulation
- P3 pixmap and PNG output

Subpackages:
    core: Vector utilities, rays, the radiance estimator and rendering loop
    geometry: Sphere primitive and ray-sphere intersection
    materials: Lambertian, metal and dielectric scattering
    scene: Sphere table, scene manager and preset scenes
    camera: Thin-lens camera with ray generation
    preview: 8-bit conversion and image writers
"""

__version__ = "0.1.0"
