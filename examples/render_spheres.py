#!/usr/bin/env python3
"""Render a sphere scene.

This script renders one of the built-in sphere scenes end to end: it
builds the scene, sets up the thin-lens camera, accumulates samples in
batches and writes the image as PPM or PNG.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH             Image width in pixels (default: 512)
    --aspect-ratio RATIO      Width / height (default: 1.0)
    --samples SAMPLES         Number of samples per pixel (default: 100)
    --max-depth DEPTH         Bounce budget per path (default: 50)
    --seed SEED               Seed for the scene layout and the sampler
                              (default: fresh layout, Taichi's default
                              sampler seed)
    --scene {random,three}    Scene to render (default: random)
    --output OUTPUT           .ppm or .png path, "-" for PPM on stdout
                              (default: spheres.ppm)
    --batch-size SIZE         Samples per progress update (default: 10)
    --quiet                   Only log warnings and errors
    --cpu                     Force the CPU backend

Example:
    python -m examples.render_spheres --width 256 --samples 20 --output spheres.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

import taichi as ti

logger = logging.getLogger("render_spheres")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=512,
        help="Image width in pixels (default: 512)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=1.0,
        help="Image width divided by height (default: 1.0)",
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
        help="Bounce budget per path (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help=(
            "Seed for the scene layout and the sampler (default: fresh scene "
            "layout, Taichi's default sampler seed)"
        ),
    )
    parser.add_argument(
        "--scene",
        choices=["random", "three"],
        default="random",
        help="Scene to render (default: random)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.ppm",
        help='Output .ppm or .png path, "-" for PPM on stdout (default: spheres.ppm)',
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Samples per progress update (default: 10)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Force the CPU backend",
    )
    return parser.parse_args(argv)


def render_spheres(
    width: int = 512,
    aspect_ratio: float = 1.0,
    num_samples: int = 100,
    max_depth: int = 50,
    seed: int | None = None,
    scene_name: str = "random",
    output_path: str = "spheres.ppm",
    batch_size: int = 10,
) -> int:
    """Render a sphere scene and write the image.

    Args:
        width: Image width in pixels.
        aspect_ratio: Image width divided by height.
        num_samples: Number of samples per pixel.
        max_depth: Bounce budget per path.
        seed: Seed for the scene layout, None for a fresh layout.
        scene_name: "random" or "three".
        output_path: Output path (.ppm or .png), or "-" for PPM on stdout.
        batch_size: Number of samples to render between progress updates.

    Returns:
        The number of pixels that could not be written.
    """
    # Lazy imports to allow Taichi initialization first
    from src.spheretracer.camera.thin_lens import setup_camera
    from src.spheretracer.core.renderer import Renderer, RenderSettings
    from src.spheretracer.scene.weekend import create_random_scene, create_three_sphere_scene

    settings = RenderSettings(
        image_width=width,
        aspect_ratio=aspect_ratio,
        samples_per_pixel=num_samples,
        max_depth=max_depth,
    )

    if scene_name == "three":
        scene, camera = create_three_sphere_scene(aspect_ratio=aspect_ratio)
    else:
        scene, camera = create_random_scene(seed=seed, aspect_ratio=aspect_ratio)
    setup_camera(camera)

    renderer = Renderer(settings)

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        elapsed = time.time() - start_time
        progress_pct = (current / target) * 100 if target > 0 else 0
        samples_per_sec = current / elapsed if elapsed > 0 else 0
        logger.info(
            "Progress: %d/%d samples (%.1f%%) - %.1f spp/s",
            current,
            target,
            progress_pct,
            samples_per_sec,
        )

    renderer.render(batch_size=batch_size, callback=progress_callback)

    if output_path == "-":
        failures = renderer.write_ppm(sys.stdout)
        sys.stdout.flush()
    else:
        failures = renderer.save_image(output_path)

    logger.info("Total time: %.2fs", time.time() - start_time)
    return failures


def init_taichi(force_cpu: bool = False, seed: int | None = None) -> None:
    """Initialize Taichi, preferring the GPU backend."""
    init_kwargs = {}
    if seed is not None:
        init_kwargs["random_seed"] = seed

    # Use GPU if available, fall back to CPU
    if force_cpu:
        ti.init(arch=ti.cpu, **init_kwargs)
    else:
        try:
            ti.init(arch=ti.gpu, **init_kwargs)
            logger.info("Using GPU backend")
        except RuntimeError:
            ti.init(arch=ti.cpu, **init_kwargs)
            logger.info("Using CPU backend")


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        0 on success, 1 on an error or when any pixel could not be written.
    """
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    init_taichi(force_cpu=args.cpu, seed=args.seed)

    try:
        failures = render_spheres(
            width=args.width,
            aspect_ratio=args.aspect_ratio,
            num_samples=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            scene_name=args.scene,
            output_path=args.output,
            batch_size=args.batch_size,
        )
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("Error: %s", e)
        return 1

    if failures > 0:
        logger.error("%d pixels could not be written to %s", failures, args.output)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
