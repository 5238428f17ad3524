"""
icon: generate one square icon, then export it at several pixel sizes.

Always uses the frugal model: 1024px is plenty for icons and much cheaper.
"""

import argparse
from pathlib import Path
from typing import List

from ..api.exceptions import ImagemageError, ValidationError
from ..api.prompt_builders import build_icon_prompt
from ..config import DEFAULT_ICON_SIZES, ICON_TYPES
from ..core.models import GenerationRequest, ModelTier
from ..logging_utils import log_batch_complete, log_batch_start, log_error
from ..processing.image_utils import build_output_path, load_image_as_base64, resize_and_save_image
from .common import exit_code, make_client, settings_from_args

ICON_ASPECT_RATIO = "1:1"

EXAMPLES = """\
Examples:
  imagemage icon "coffee cup logo"
  imagemage icon "rocket ship" --sizes="64,128,256" --type="app-icon"
  imagemage icon "make this into a flat icon" -i logo.png
"""


def register(subparsers) -> None:
    parser = subparsers.add_parser(
        "icon",
        help="Generate app icons, favicons, and UI elements",
        description=(
            "Generate icons in multiple sizes. Optionally provide an input image "
            "to create an icon version of it."
        ),
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("description", help="What the icon shows")
    parser.add_argument("--sizes", default=DEFAULT_ICON_SIZES, help="Comma-separated list of icon sizes")
    parser.add_argument("--type", dest="icon_type", choices=ICON_TYPES, default="app-icon", help="Icon type")
    parser.add_argument("-o", "--output", default=".", help="Output directory for icons")
    parser.add_argument("-i", "--input", default=None, help="Input image to convert to an icon")
    parser.set_defaults(func=run)


def parse_sizes(value: str) -> List[int]:
    """
    Parse "64, 128,256" into [64, 128, 256].

    Raises:
        ValidationError: On a non-integer or non-positive entry.
    """
    sizes = []
    for item in value.split(","):
        item = item.strip()
        try:
            size = int(item)
        except ValueError:
            raise ValidationError(f"invalid size: {item}")
        if size <= 0:
            raise ValidationError(f"invalid size: {item}")
        sizes.append(size)
    return sizes


def run(args: argparse.Namespace) -> int:
    description = args.description
    sizes = parse_sizes(args.sizes)

    reference_images = ()
    if args.input:
        reference_images = (load_image_as_base64(args.input),)
        print(f"Input image: {args.input}")

    prompt = build_icon_prompt(description, args.icon_type)
    settings = settings_from_args(args, tier=ModelTier.FRUGAL)
    client = make_client(settings)

    print(f"Generating icon: {description}")
    print(f"Type: {args.icon_type}")
    print(f"Sizes: {sizes}")
    print(f"Model: {settings.model_name} (1024px base, then downscaled)")
    print("\nGenerating base icon...")

    image_data = client.generate_content(
        GenerationRequest(prompt, reference_images=reference_images, aspect_ratio=ICON_ASPECT_RATIO)
    )

    log_batch_start("icon size", len(sizes))
    success_count = 0
    for size in sizes:
        output_path: Path = build_output_path(args.output, description, prefix=f"icon_{size}x{size}")
        try:
            resize_and_save_image(image_data, size, output_path)
        except ImagemageError as e:
            log_error(f"{size}x{size} icon failed", str(e))
            print(f"Error saving {size}x{size} icon: {e}")
            continue
        print(f"✓ Saved {size}x{size} icon to: {output_path}")
        success_count += 1

    log_batch_complete("icon size", success_count, len(sizes))
    print(f"\nSuccessfully generated {success_count}/{len(sizes)} icon sizes")
    return exit_code(success_count)
