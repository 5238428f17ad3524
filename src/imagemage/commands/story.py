"""
story: a sequence of frames that tell a story.

Frames are generated one at a time. The most recent successful frame is
attached to the next request so characters and style stay consistent.
"""

import argparse
from pathlib import Path

from ..api.exceptions import ValidationError
from ..api.gemini_client import validate_aspect_ratio, validate_resolution
from ..api.prompt_builders import build_story_frame_prompt
from ..config import DEFAULT_STORY_FRAMES, MAX_REFERENCE_IMAGES
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
        "story",
        help="Generate a sequence of images that tell a story",
        description="Generate sequential story frames with consistent characters and style.",
    )
    parser.add_argument("description", help="The story to illustrate")
    parser.add_argument(
        "--frames",
        type=positive_int,
        default=DEFAULT_STORY_FRAMES,
        help=f"Number of frames (1-{MAX_REFERENCE_IMAGES})",
    )
    parser.add_argument("-s", "--style", default="", help="Visual style applied to every frame")
    parser.add_argument("-o", "--output", default=".", help="Output directory")
    add_model_arguments(parser)
    add_store_prompt_argument(parser)
    parser.set_defaults(func=run)


def run(args: argparse.Namespace) -> int:
    description = args.description
    frames = args.frames
    if frames > MAX_REFERENCE_IMAGES:
        raise ValidationError(f"too many frames ({frames}). Maximum is {MAX_REFERENCE_IMAGES}")

    settings = settings_from_args(args)
    validate_aspect_ratio(args.aspect_ratio)
    validate_resolution(args.resolution, settings.tier)

    client = make_client(settings)

    print(f"Generating {frames}-frame story: {description}")
    if args.style:
        print(f"Style: {args.style}")
    print_model_info(settings, args.resolution, args.aspect_ratio)
    print()

    previous = {"data": None}

    def produce(frame: int) -> Path:
        has_previous = previous["data"] is not None
        prompt = build_story_frame_prompt(
            description, frame, frames, style=args.style, has_previous=has_previous
        )
        request = GenerationRequest(
            prompt,
            reference_images=(previous["data"],) if has_previous else (),
            aspect_ratio=args.aspect_ratio,
            resolution=args.resolution,
        )
        image_data = client.generate_content(request)
        output_path = build_output_path(args.output, description, count=frame)
        save_image(image_data, output_path)
        previous["data"] = image_data
        if args.store_prompt:
            store_prompt_metadata(output_path, prompt)
        print(f"✓ Saved frame {frame} to: {output_path}")
        return output_path

    success_count = run_batch(frames, "frame", produce)
    print(f"\nSuccessfully generated {success_count}/{frames} frames")
    return exit_code(success_count)
