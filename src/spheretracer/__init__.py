"""Taichi-based Monte Carlo path tracer for sphere scenes.

This package renders still images of scenes built from spheres using
stochastic path tracing, with support for:
- Diffuse, metallic and dielectric (glass) materials
- Thin-lens camera with defocus blur
- Sky-gradient illumination
- Parallel sample accumulation in Taichi kernels

Subpackages:
    core: Ray and vector utilities, the light transport integrator, renderer
    geometry: Sphere primitive and ray-sphere intersection
    materials: Scattering models and material registries
    scene: World storage, scene manager and scene builders
    camera: Thin-lens camera with ray generation
    output: PPM and PNG image writers
"""

__version__ = "0.1.0"
