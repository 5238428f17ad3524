"""
diagram: flowcharts, architecture drawings and other technical diagrams.
"""

import argparse

from ..api.gemini_client import validate_aspect_ratio, validate_resolution
from ..api.prompt_builders import build_diagram_prompt
from ..config import DIAGRAM_TYPES
from ..core.models import GenerationRequest
from ..processing.image_utils import build_output_path, save_image
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
        "diagram",
        help="Generate technical diagrams",
        description="Generate flowcharts, architecture diagrams, sequence diagrams and more.",
    )
    parser.add_argument("description", help="What the diagram shows")
    parser.add_argument(
        "--type", dest="diagram_type", choices=DIAGRAM_TYPES, default="flowchart", help="Diagram type"
    )
    parser.add_argument("-s", "--style", default="", help="Visual style (e.g. 'hand-drawn')")
    parser.add_argument("-o", "--output", default=".", help="Output directory")
    add_model_arguments(parser, default_aspect_ratio="16:9")
    add_store_prompt_argument(parser)
    parser.set_defaults(func=run)


def run(args: argparse.Namespace) -> int:
    description = args.description

    settings = settings_from_args(args)
    validate_aspect_ratio(args.aspect_ratio)
    validate_resolution(args.resolution, settings.tier)

    prompt = build_diagram_prompt(description, args.diagram_type, style=args.style)
    client = make_client(settings)

    print(f"Generating {args.diagram_type} diagram: {description}")
    print_model_info(settings, args.resolution, args.aspect_ratio)
    print("\nGenerating diagram...")

    image_data = client.generate_content(
        GenerationRequest(prompt, aspect_ratio=args.aspect_ratio, resolution=args.resolution)
    )

    output_path = build_output_path(args.output, description, prefix=args.diagram_type)
    save_image(image_data, output_path)

    stored = args.store_prompt and store_prompt_metadata(output_path, prompt)
    print(f"✓ Saved to: {output_path}")
    if stored:
        print("  (prompt stored in metadata)")
    return 0
