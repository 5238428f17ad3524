"""
edit: modify an image, or compose several images, from an instruction.

The base image is always sent first; additional inputs follow in the
order given on the command line.
"""

import argparse
from pathlib import Path

from ..api.exceptions import InputImageNotFoundError, OutputExistsError
from ..api.gemini_client import (
    check_reference_image_count,
    validate_aspect_ratio,
    validate_resolution,
)
from ..core.models import GenerationRequest
from ..logging_utils import log_info, log_warning
from ..processing.image_utils import derived_output_path, load_image_as_base64, save_image
from .common import (
    add_model_arguments,
    add_store_prompt_argument,
    make_client,
    print_model_info,
    settings_from_args,
    store_prompt_metadata,
)

EXAMPLES = """\
Examples:
  # Edit a single image
  imagemage edit photo.png "make it sunset lighting"

  # Compose multiple images
  imagemage edit background.png "add this person on the left" -i person.png
  imagemage edit office.png "add this person and this laptop" -i person.png -i laptop.png
"""


def register(subparsers) -> None:
    parser = subparsers.add_parser(
        "edit",
        help="Edit an image or compose multiple images",
        description=(
            "Edit an existing image or compose multiple images using natural language. "
            "Works best with up to 3 input images total (base + additional)."
        ),
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("base_image", help="Image to edit")
    parser.add_argument("instruction", help="What to change")
    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Output path for the edited image (default: <base-image>-edited.png)",
    )
    parser.add_argument(
        "-i", "--input",
        dest="inputs",
        action="append",
        default=[],
        help="Additional input image for composition (repeatable)",
    )
    add_model_arguments(parser)
    parser.add_argument("--force", action="store_true", help="Overwrite the output file if it exists")
    add_store_prompt_argument(parser)
    parser.set_defaults(func=run)


def run(args: argparse.Namespace) -> int:
    base_path = Path(args.base_image)
    input_paths = [Path(p) for p in args.inputs]

    if not base_path.is_file():
        raise InputImageNotFoundError(base_path, "base image")
    for input_path in input_paths:
        if not input_path.is_file():
            raise InputImageNotFoundError(input_path)

    total_images = 1 + len(input_paths)
    if check_reference_image_count(total_images):
        print(f"⚠️  Using {total_images} images. API works best with 3 or fewer images.")

    output_path = Path(args.output) if args.output else derived_output_path(base_path, "edited")
    if output_path.exists() and not args.force:
        raise OutputExistsError(output_path)

    settings = settings_from_args(args)
    validate_aspect_ratio(args.aspect_ratio)
    validate_resolution(args.resolution, settings.tier)

    if settings.is_frugal and total_images > 1:
        log_warning(f"Multi-image composition ({total_images} images) with frugal model")
        print(
            f"⚠️  Warning: Multi-image composition with --frugal mode may have limitations. "
            f"For best results with {total_images} images, consider the standard model "
            "(remove --frugal).\n"
        )

    print(f"Loading base image: {base_path.name}")
    images = [load_image_as_base64(base_path)]
    for i, input_path in enumerate(input_paths, start=1):
        print(f"Loading input {i}: {input_path.name}")
        images.append(load_image_as_base64(input_path))

    client = make_client(settings)

    print(f"\nEditing with {total_images} image(s)")
    print(f"Instruction: {args.instruction}")
    print_model_info(settings, args.resolution, args.aspect_ratio)
    print("\nGenerating edited image...")

    request = GenerationRequest(
        args.instruction,
        reference_images=images,
        aspect_ratio=args.aspect_ratio,
        resolution=args.resolution,
    )
    image_data = client.generate_content(request)

    if output_path.exists():
        log_info(f"Overwriting existing file (--force): {output_path}")
    save_image(image_data, output_path)

    stored = args.store_prompt and store_prompt_metadata(output_path, args.instruction)
    print(f"✓ Saved to: {output_path}")
    if stored:
        print("  (instruction stored in metadata)")
    return 0
