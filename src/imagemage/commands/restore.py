"""
restore: repair (and optionally colorize) an old or damaged photo.
"""

import argparse
from pathlib import Path

from ..api.exceptions import InputImageNotFoundError
from ..api.gemini_client import validate_aspect_ratio, validate_resolution
from ..api.prompt_builders import build_restore_prompt
from ..core.models import GenerationRequest
from ..processing.image_utils import (
    derived_output_path,
    ensure_unique_path,
    load_image_as_base64,
    save_image,
)
from .common import (
    add_model_arguments,
    add_store_prompt_argument,
    make_client,
    print_model_info,
    settings_from_args,
    store_prompt_metadata,
)


def register(subparsers) -> None:
    parser = subparsers.add_parser(
        "restore",
        help="Restore old or damaged photos",
        description="Remove scratches, stains and noise from an old photo, optionally colorizing it.",
    )
    parser.add_argument("photo", help="Photo to restore")
    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Output path (default: <photo>-restored.png). Never overwritten.",
    )
    parser.add_argument("--colorize", action="store_true", help="Colorize a black-and-white photo")
    parser.add_argument("--instructions", default="", help="Extra restoration instructions")
    add_model_arguments(parser)
    add_store_prompt_argument(parser)
    parser.set_defaults(func=run)


def run(args: argparse.Namespace) -> int:
    photo_path = Path(args.photo)
    if not photo_path.is_file():
        raise InputImageNotFoundError(photo_path, "photo")

    settings = settings_from_args(args)
    validate_aspect_ratio(args.aspect_ratio)
    validate_resolution(args.resolution, settings.tier)

    prompt = build_restore_prompt(colorize=args.colorize, instructions=args.instructions)

    print(f"Loading photo: {photo_path.name}")
    photo_b64 = load_image_as_base64(photo_path)
    client = make_client(settings)

    print(f"Colorize: {'yes' if args.colorize else 'no'}")
    print_model_info(settings, args.resolution, args.aspect_ratio)
    print("\nRestoring photo...")

    image_data = client.generate_content(
        GenerationRequest(
            prompt,
            reference_images=(photo_b64,),
            aspect_ratio=args.aspect_ratio,
            resolution=args.resolution,
        )
    )

    requested = Path(args.output) if args.output else derived_output_path(photo_path, "restored")
    output_path = ensure_unique_path(requested)
    save_image(image_data, output_path)

    stored = args.store_prompt and store_prompt_metadata(output_path, prompt)
    print(f"✓ Saved to: {output_path}")
    if stored:
        print("  (prompt stored in metadata)")
    return 0
