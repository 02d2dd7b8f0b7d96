#!/usr/bin/env python3
"""Render a sphere scene to ./renders/NAME.png.

By default the scene is a small sphere resting on a large ground sphere,
flanked by a glass and a metal sphere, lit only by the sky gradient. A
different scene can be loaded from a JSON file in the format produced by
SceneManager.to_dict().

Usage:
    python -m examples.render_spheres NAME [options]

Options:
    --width WIDTH           Image width in pixels (default: 1920)
    --height HEIGHT         Image height in pixels (default: 1080)
    --samples SAMPLES       Samples per pixel (default: 48)
    --max-bounces BOUNCES   Bounce budget per path (default: 8)
    --gamma GAMMA           Output gamma (default: 2.2)
    --seed SEED             Random seed (default: 0)
    --scene FILE            Load the scene from a JSON file
    --arch ARCH             Taichi backend: auto, cpu or gpu (default: auto)
    --verbose               Enable debug logging

Example:
    python -m examples.render_spheres spheres --width 640 --height 360 --samples 16
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import taichi as ti

from src.pathtracer.core.settings import RenderSettings

logger = logging.getLogger("render_spheres")

RENDERS_DIR = Path("./renders")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene with Monte Carlo path tracing.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "name",
        type=str,
        help="Output name; the image is written to ./renders/NAME.png",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1920,
        help="Image width in pixels (default: 1920)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=1080,
        help="Image height in pixels (default: 1080)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=48,
        help="Number of samples per pixel (default: 48)",
    )
    parser.add_argument(
        "--max-bounces",
        type=int,
        default=8,
        help="Bounce budget per path (default: 8)",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=2.2,
        help="Output gamma (default: 2.2)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed for Taichi's generator (default: 0)",
    )
    parser.add_argument(
        "--scene",
        type=Path,
        default=None,
        help="JSON scene file (default: built-in sphere scene)",
    )
    parser.add_argument(
        "--arch",
        choices=("auto", "cpu", "gpu"),
        default="auto",
        help="Taichi backend (default: auto)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def resolve_output_path(name: str) -> Path:
    """Map an output name to ./renders/NAME.png and create its directory."""
    output_path = (RENDERS_DIR / name).with_suffix(".png")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return output_path


def build_settings(args: argparse.Namespace) -> RenderSettings:
    """Validate the command line options as render settings."""
    return RenderSettings(
        width=args.width,
        height=args.height,
        samples_per_pixel=args.samples,
        max_bounces=args.max_bounces,
        gamma=args.gamma,
        seed=args.seed,
    )


def init_taichi(arch: str, seed: int) -> None:
    """Initialize Taichi on the requested backend."""
    if arch == "cpu":
        ti.init(arch=ti.cpu, random_seed=seed)
        return

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu, random_seed=seed)
        logger.info("Using GPU backend")
    except Exception:
        if arch == "gpu":
            raise
        ti.init(arch=ti.cpu, random_seed=seed)
        logger.info("Using CPU backend")


def render_spheres(args: argparse.Namespace, settings: RenderSettings | None = None) -> Path:
    """Build the scene, render it and save it.

    Args:
        args: Parsed command line options.
        settings: Settings already built from args, or None to build them here.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.pathtracer.camera.pinhole import default_camera
    from src.pathtracer.core.integrator import render_with_settings
    from src.pathtracer.output.export import save_png
    from src.pathtracer.scene.manager import SceneManager
    from src.pathtracer.scene.spheres import create_sphere_scene

    if settings is None:
        settings = build_settings(args)

    if args.scene is not None:
        logger.info("Loading scene from %s", args.scene)
        scene = SceneManager()
        scene.from_dict(json.loads(args.scene.read_text()))
        camera = default_camera(settings.aspect_ratio)
    else:
        scene, camera = create_sphere_scene(aspect_ratio=settings.aspect_ratio)

    output_path = resolve_output_path(args.name)

    image = render_with_settings(scene, camera, settings)
    save_png(image, output_path, gamma=settings.gamma)

    return output_path


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        settings = build_settings(args)
        init_taichi(args.arch, settings.seed)
        output_path = render_spheres(args, settings)
        logger.info("Saved to: %s", output_path.absolute())
        return 0
    except Exception as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
