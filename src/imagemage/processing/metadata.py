"""
PNG text metadata for generated images.

Stores the prompt that produced an image in a tEXt chunk so it can be
read back later with any PNG metadata viewer.
"""

from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError
from PIL.PngImagePlugin import PngInfo

from ..api.exceptions import MetadataError
from ..config import PROMPT_METADATA_KEY


def add_prompt_to_png(path: Union[str, Path], prompt: str, key: str = PROMPT_METADATA_KEY) -> None:
    """
    Rewrite the PNG at path with prompt stored under key.

    Existing text chunks are preserved.

    Raises:
        MetadataError: If the file isn't a readable PNG or can't be rewritten.
    """
    path = Path(path)
    try:
        # Read into memory first; the same path is rewritten below
        with Image.open(BytesIO(path.read_bytes())) as img:
            if img.format != "PNG":
                raise MetadataError(f"{path} is not a PNG (got {img.format})")
            img.load()
            info = PngInfo()
            for existing_key, value in img.text.items():
                if existing_key != key:
                    info.add_text(existing_key, value)
            info.add_text(key, prompt)
            img.save(path, format="PNG", pnginfo=info)
    except (UnidentifiedImageError, OSError) as e:
        raise MetadataError(f"failed to store prompt in {path}: {e}") from e


def read_prompt_from_png(path: Union[str, Path], key: str = PROMPT_METADATA_KEY) -> Optional[str]:
    """Return the stored prompt, or None if the PNG has none."""
    try:
        with Image.open(path) as img:
            img.load()
            return getattr(img, "text", {}).get(key)
    except (UnidentifiedImageError, OSError) as e:
        raise MetadataError(f"failed to read metadata from {path}: {e}") from e
