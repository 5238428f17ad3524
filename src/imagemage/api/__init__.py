"""
API module for Gemini interactions.

Handles all communication with Google Gemini API including:
- Authentication
- Request validation and payload construction
- Error classification
- Prompt building
"""

from .gemini_client import (
    GeminiClient,
    get_api_key,
    validate_aspect_ratio,
    validate_resolution,
    effective_resolution,
    check_reference_image_count,
    extract_image_data,
)

from .exceptions import (
    ImagemageError,
    ConfigurationError,
    ValidationError,
    GeminiAPIError,
    GeminiSafetyError,
    OutputError,
    classify_api_error,
)

from .prompt_builders import (
    build_generate_prompt,
    build_icon_prompt,
    build_pattern_prompt,
    build_story_frame_prompt,
    build_diagram_prompt,
    build_restore_prompt,
)

__all__ = [
    # Client
    "GeminiClient",
    "get_api_key",
    "validate_aspect_ratio",
    "validate_resolution",
    "effective_resolution",
    "check_reference_image_count",
    "extract_image_data",
    # Errors
    "ImagemageError",
    "ConfigurationError",
    "ValidationError",
    "GeminiAPIError",
    "GeminiSafetyError",
    "OutputError",
    "classify_api_error",
    # Prompt builders
    "build_generate_prompt",
    "build_icon_prompt",
    "build_pattern_prompt",
    "build_story_frame_prompt",
    "build_diagram_prompt",
    "build_restore_prompt",
]
