"""
imagemage

Command-line image generation and editing with Google Gemini image models.

Package Structure:
    core/       - Data models (requests, settings, extraction results)
    api/        - Gemini API client, errors, prompt builders
    processing/ - Output naming, saving, resizing, PNG metadata
    commands/   - One module per CLI subcommand
"""

__version__ = "0.4.0"

# Lazy imports for heavy dependencies
def __getattr__(name):
    if name == "GeminiClient":
        from .api.gemini_client import GeminiClient
        return GeminiClient
    if name == "GenerationRequest":
        from .core.models import GenerationRequest
        return GenerationRequest
    if name == "ClientSettings":
        from .core.models import ClientSettings
        return ClientSettings
    if name == "ModelTier":
        from .core.models import ModelTier
        return ModelTier
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "__version__",
    "GeminiClient",
    "GenerationRequest",
    "ClientSettings",
    "ModelTier",
]
