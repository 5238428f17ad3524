"""
generate: text-to-image, one or more variants per run.
"""

import argparse
from pathlib import Path

from ..api.exceptions import IncompatibleOptionsError
from ..api.gemini_client import validate_aspect_ratio, validate_resolution
from ..api.prompt_builders import build_generate_prompt
from ..core.models import GenerationRequest
from ..presets import find_config
from ..processing.image_utils import build_output_path, save_image
from .common import (
    add_model_arguments,
    add_store_prompt_argument,
    exit_code,
    make_client,
    positive_int,
    print_model_info,
    run_batch,
    settings_from_args,
    store_prompt_metadata,
)

SLIDE_ASPECT_RATIO = "16:9"
SLIDE_RESOLUTION = "4K"

EXAMPLES = """\
Examples:
  imagemage generate "watercolor painting of a fox in snowy forest"
  imagemage generate "mountain landscape" --count=3 --output=./images
  imagemage generate "cyberpunk city" --style="neon, futuristic"
  imagemage generate "wide cinematic shot" --aspect-ratio="21:9"
  imagemage generate "concept art" --frugal
"""


def register(subparsers) -> None:
    parser = subparsers.add_parser(
        "generate",
        help="Generate images from text descriptions",
        description="Generate one or more images from a text prompt using Gemini image models.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("prompt", help="What to generate")
    parser.add_argument("-c", "--count", type=positive_int, default=1, help="Number of images to generate")
    parser.add_argument("-o", "--output", default=".", help="Output directory for generated images")
    parser.add_argument("-s", "--style", default="", help="Additional style guidance (e.g. 'watercolor')")
    add_model_arguments(parser)
    parser.add_argument(
        "--slide",
        action="store_true",
        help="Optimize for presentation slides (4K, 16:9, with theme from config)",
    )
    parser.add_argument("--config", default=None, help="Path to a preset config file (JSON or YAML)")
    add_store_prompt_argument(parser)
    parser.set_defaults(func=run)


def run(args: argparse.Namespace) -> int:
    prompt = args.prompt
    aspect_ratio = args.aspect_ratio
    resolution = args.resolution

    config = None
    if args.slide or args.config:
        config = find_config(args.config)

    if args.slide:
        if args.frugal:
            raise IncompatibleOptionsError(
                "--frugal mode is incompatible with --slide (which requires 4K resolution)"
            )
        aspect_ratio = aspect_ratio or SLIDE_ASPECT_RATIO
        resolution = resolution or SLIDE_RESOLUTION

    if config is not None:
        aspect_ratio = config.resolve_aspect_ratio(aspect_ratio)
        resolution = config.resolve_resolution(resolution)

    settings = settings_from_args(args)
    validate_aspect_ratio(aspect_ratio)
    validate_resolution(resolution, settings.tier)

    full_prompt = build_generate_prompt(prompt, args.style)
    if config is not None:
        full_prompt = config.apply_to_prompt(full_prompt)

    client = make_client(settings)
    request = GenerationRequest(full_prompt, aspect_ratio=aspect_ratio, resolution=resolution)

    print(f"Generating {args.count} image(s) for: {prompt}")
    if config is not None and config.source is not None:
        print(f"Config: {config.source} (theme applied to prompt)")
    if args.style:
        print(f"Style: {args.style}")
    print_model_info(settings, resolution, aspect_ratio)
    print()

    def produce(i: int) -> Path:
        image_data = client.generate_content(request)
        output_path = build_output_path(args.output, prompt, count=i if args.count > 1 else 0)
        save_image(image_data, output_path)
        stored = args.store_prompt and store_prompt_metadata(output_path, full_prompt)
        print(f"✓ Saved to: {output_path}")
        if stored:
            print("  (prompt stored in metadata)")
        return output_path

    success_count = run_batch(args.count, "image", produce)
    print(f"\nSuccessfully generated {success_count}/{args.count} images")
    return exit_code(success_count)
