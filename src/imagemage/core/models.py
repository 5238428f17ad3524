"""
Data models for imagemage.

Contains the value objects passed between the command layer,
the Gemini client, and the output writer.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from ..config import (
    GEMINI_BASE_URL,
    GEMINI_FRUGAL_MODEL,
    GEMINI_STANDARD_MODEL,
    REQUEST_TIMEOUT,
)


class ModelTier(Enum):
    """Backing model choice. The value is the Gemini model identifier."""

    STANDARD = GEMINI_STANDARD_MODEL
    FRUGAL = GEMINI_FRUGAL_MODEL

    @property
    def model_name(self) -> str:
        return self.value

    @classmethod
    def from_flag(cls, frugal: bool) -> "ModelTier":
        return cls.FRUGAL if frugal else cls.STANDARD


def _debug_from_env() -> bool:
    return bool(os.environ.get("DEBUG"))


@dataclass(frozen=True)
class ClientSettings:
    """
    Immutable configuration for one GeminiClient.

    Built once by the command layer from parsed flags; the client
    never looks at command-line state directly.
    """
    tier: ModelTier = ModelTier.STANDARD
    base_url: str = GEMINI_BASE_URL
    timeout: float = REQUEST_TIMEOUT
    debug: bool = field(default_factory=_debug_from_env)

    @property
    def model_name(self) -> str:
        return self.tier.model_name

    @property
    def is_frugal(self) -> bool:
        return self.tier is ModelTier.FRUGAL


@dataclass(frozen=True)
class GenerationRequest:
    """
    One image generation or edit call.

    reference_images are base64-encoded image files. In an edit the first
    one is the image being modified; the rest are composition inputs.
    aspect_ratio and resolution of None mean "provider default".
    """
    instruction: str
    reference_images: Tuple[str, ...] = ()
    aspect_ratio: Optional[str] = None
    resolution: Optional[str] = None

    def __post_init__(self):
        # Accept any sequence from callers but store a tuple
        object.__setattr__(self, "reference_images", tuple(self.reference_images))
        # Empty strings from unset CLI flags mean "unset"
        if not self.aspect_ratio:
            object.__setattr__(self, "aspect_ratio", None)
        if not self.resolution:
            object.__setattr__(self, "resolution", None)


@dataclass(frozen=True)
class ImageExtraction:
    """
    Result of scanning a response for image data.

    Either found (data holds the base64 payload and source names the rule
    that matched: "inline_data" or "text") or not found.
    """
    data: Optional[str] = None
    source: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.data is not None

    @classmethod
    def from_inline_data(cls, data: str) -> "ImageExtraction":
        return cls(data=data, source="inline_data")

    @classmethod
    def from_text(cls, data: str) -> "ImageExtraction":
        return cls(data=data, source="text")

    @classmethod
    def not_found(cls) -> "ImageExtraction":
        return cls()
