"""
pattern: seamless tiles, textures and wallpapers.
"""

import argparse
from pathlib import Path

from ..api.gemini_client import validate_aspect_ratio, validate_resolution
from ..api.prompt_builders import build_pattern_prompt
from ..config import PATTERN_TYPES
from ..core.models import GenerationRequest
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


def register(subparsers) -> None:
    parser = subparsers.add_parser(
        "pattern",
        help="Generate seamless patterns, textures, and wallpapers",
        description="Generate repeating patterns, material textures, or wallpapers.",
    )
    parser.add_argument("description", help="What the pattern shows")
    parser.add_argument(
        "--type", dest="pattern_type", choices=PATTERN_TYPES, default="seamless", help="Pattern type"
    )
    parser.add_argument("-c", "--count", type=positive_int, default=1, help="Number of variants")
    parser.add_argument("-o", "--output", default=".", help="Output directory")
    add_model_arguments(parser, default_aspect_ratio="1:1")
    add_store_prompt_argument(parser)
    parser.set_defaults(func=run)


def run(args: argparse.Namespace) -> int:
    description = args.description

    settings = settings_from_args(args)
    validate_aspect_ratio(args.aspect_ratio)
    validate_resolution(args.resolution, settings.tier)

    prompt = build_pattern_prompt(description, args.pattern_type)
    client = make_client(settings)
    request = GenerationRequest(prompt, aspect_ratio=args.aspect_ratio, resolution=args.resolution)

    print(f"Generating {args.count} {args.pattern_type} pattern(s) for: {description}")
    print_model_info(settings, args.resolution, args.aspect_ratio)
    print()

    def produce(i: int) -> Path:
        image_data = client.generate_content(request)
        output_path = build_output_path(
            args.output, description, prefix=args.pattern_type, count=i if args.count > 1 else 0
        )
        save_image(image_data, output_path)
        if args.store_prompt:
            store_prompt_metadata(output_path, prompt)
        print(f"✓ Saved to: {output_path}")
        return output_path

    success_count = run_batch(args.count, "pattern", produce)
    print(f"\nSuccessfully generated {success_count}/{args.count} patterns")
    return exit_code(success_count)
