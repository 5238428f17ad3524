"""
Processing module for output files.

Handles filename derivation, collision avoidance, saving,
resizing, and PNG prompt metadata.
"""

from .image_utils import (
    clean_prompt,
    generate_filename,
    ensure_unique_path,
    build_output_path,
    derived_output_path,
    decode_image_data,
    save_image,
    resize_and_save_image,
    load_image_as_base64,
)

from .metadata import (
    add_prompt_to_png,
    read_prompt_from_png,
)

__all__ = [
    # Filenames
    "clean_prompt",
    "generate_filename",
    "ensure_unique_path",
    "build_output_path",
    "derived_output_path",
    # Saving / loading
    "decode_image_data",
    "save_image",
    "resize_and_save_image",
    "load_image_as_base64",
    # Metadata
    "add_prompt_to_png",
    "read_prompt_from_png",
]
