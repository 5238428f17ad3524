"""
Core data models.

Value objects shared by the API client, the output writer,
and the command layer.
"""

from .models import ClientSettings, GenerationRequest, ImageExtraction, ModelTier

__all__ = [
    "ClientSettings",
    "GenerationRequest",
    "ImageExtraction",
    "ModelTier",
]
