"""
Image utility functions for naming, saving, loading, and resizing output images.
"""

import base64
import binascii
import re
from io import BytesIO
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError

from ..api.exceptions import (
    ImageResizeError,
    ImageSaveError,
    InputImageNotFoundError,
    ValidationError,
)
from ..config import IMAGE_EXTENSION, MAX_FILENAME_STEM_LENGTH

PathLike = Union[str, Path]

_UNSAFE_CHARS = re.compile(r"[^a-z0-9\s-]", re.ASCII)
_WHITESPACE_RUN = re.compile(r"\s+", re.ASCII)

# Used when a prompt has no filename-safe characters at all
FALLBACK_STEM = "image"


# =============================================================================
# Filenames
# =============================================================================

def clean_prompt(prompt: str) -> str:
    """
    Convert free-form text into a filename-safe stem.

    Lower-cases, drops everything but a-z, 0-9, whitespace and hyphens,
    turns whitespace runs into single underscores and trims underscores
    from both ends.

    >>> clean_prompt("Cyberpunk City!!")
    'cyberpunk_city'
    """
    s = prompt.lower()
    s = _UNSAFE_CHARS.sub("", s)
    s = _WHITESPACE_RUN.sub("_", s)
    return s.strip("_")


def generate_filename(prompt: str, prefix: str = "", count: int = 0) -> str:
    """
    Build a descriptive PNG filename from a prompt.

    The cleaned stem is cut to MAX_FILENAME_STEM_LENGTH characters, even
    mid-word.

    Args:
        prompt: Text to derive the name from.
        prefix: Optional label placed in front, e.g. "icon_64x64".
        count: 1-based variant number appended as a suffix; 0 for none.

    Returns:
        Filename such as "icon_64x64_coffee_cup_2.png".
    """
    cleaned = clean_prompt(prompt)[:MAX_FILENAME_STEM_LENGTH] or FALLBACK_STEM

    filename = f"{prefix}_{cleaned}" if prefix else cleaned
    if count > 0:
        filename = f"{filename}_{count}"
    return filename + IMAGE_EXTENSION


def ensure_unique_path(path: PathLike) -> Path:
    """
    Return path if nothing exists there, else the first free path_N variant.

    "out/fox.png" becomes "out/fox_1.png", then "out/fox_2.png", and so on.
    """
    path = Path(path)
    if not path.exists():
        return path

    counter = 1
    while True:
        candidate = path.with_name(f"{path.stem}_{counter}{path.suffix}")
        if not candidate.exists():
            return candidate
        counter += 1


def build_output_path(output_dir: PathLike, prompt: str, prefix: str = "", count: int = 0) -> Path:
    """Join output_dir with a generated filename and make it collision-free."""
    return ensure_unique_path(Path(output_dir) / generate_filename(prompt, prefix, count))


def derived_output_path(source: PathLike, suffix: str) -> Path:
    """
    Output path next to a source image: photo.jpg -> photo-edited.png.

    The model always returns PNG, so the extension is always .png.

    Args:
        source: The input image path.
        suffix: Tag inserted before the extension, e.g. "edited".
    """
    source = Path(source)
    return source.with_name(f"{source.stem}-{suffix}{IMAGE_EXTENSION}")


# =============================================================================
# Saving
# =============================================================================

def decode_image_data(image_data: str) -> bytes:
    """
    Decode a base64 image payload.

    Raises:
        ImageSaveError: If image_data is not valid base64.
    """
    try:
        return base64.b64decode(image_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageSaveError(f"failed to decode image data: {e}") from e


def save_image(image_data: str, output_path: PathLike) -> Path:
    """
    Decode base64 image data and write it to output_path.

    The payload is decoded before anything touches the disk, so a bad
    payload never leaves a file behind. Parent directories are created.

    Args:
        image_data: Base64-encoded image.
        output_path: Final destination (already collision-checked by the caller).

    Returns:
        The written path.

    Raises:
        ImageSaveError: On decode or I/O failure.
    """
    decoded = decode_image_data(image_data)
    output_path = Path(output_path)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ImageSaveError(f"failed to create directory: {e}") from e

    try:
        output_path.write_bytes(decoded)
    except OSError as e:
        raise ImageSaveError(f"failed to write image: {e}") from e

    return output_path


def resize_and_save_image(image_data: str, size: int, output_path: PathLike) -> Path:
    """
    Decode base64 image data, resize to a size x size square, save as PNG.

    Uses Lanczos resampling. Each call works from the original payload, so
    several sizes can be produced from one generated image.

    Args:
        image_data: Base64-encoded source image.
        size: Target edge length in pixels.
        output_path: Destination PNG path.

    Returns:
        The written path.

    Raises:
        ImageResizeError: If the size is invalid or the image can't be decoded or written.
    """
    if size <= 0:
        raise ImageResizeError(f"invalid icon size: {size}")

    try:
        raw = decode_image_data(image_data)
    except ImageSaveError as e:
        raise ImageResizeError(str(e)) from e

    try:
        with Image.open(BytesIO(raw)) as src:
            resized = src.convert("RGBA").resize((size, size), Image.Resampling.LANCZOS)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageResizeError(f"failed to decode image: {e}") from e

    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        resized.save(output_path, format="PNG")
    except OSError as e:
        raise ImageResizeError(f"failed to encode PNG: {e}") from e

    return output_path


# =============================================================================
# Loading
# =============================================================================

def load_image_as_base64(path: PathLike) -> str:
    """
    Load an image from disk and return it base64-encoded as PNG.

    PNG files are sent as-is; other formats are re-encoded to PNG so the
    declared image/png MIME type is accurate.

    Raises:
        InputImageNotFoundError: If the file doesn't exist.
        ValidationError: If the file can't be read as an image.
    """
    path = Path(path)
    if not path.is_file():
        raise InputImageNotFoundError(path)

    try:
        raw = path.read_bytes()
        with Image.open(BytesIO(raw)) as img:
            if img.format != "PNG":
                buffer = BytesIO()
                img.convert("RGBA").save(buffer, format="PNG")
                raw = buffer.getvalue()
    except (UnidentifiedImageError, OSError) as e:
        raise ValidationError(f"failed to load image {path}: {e}") from e

    return base64.b64encode(raw).decode("utf-8")
