#!/usr/bin/env python3
"""
config.py

All global paths, constants, and static tables for imagemage.
"""

import os
from pathlib import Path
from typing import Dict, List, Tuple

# ═══════════════════════════════════════════════════════════════════════════════
# APPLICATION INFO
# ═══════════════════════════════════════════════════════════════════════════════
APP_NAME = "imagemage"
APP_VERSION = "0.4.0"

# Per-user state (logs) lives here
APP_HOME_DIR = Path.home() / ".imagemage"


def get_log_dir() -> Path:
    """Log directory, overridable through IMAGEMAGE_LOG_DIR."""
    override = os.environ.get("IMAGEMAGE_LOG_DIR")
    if override:
        return Path(override)
    return APP_HOME_DIR / "logs"


# ═══════════════════════════════════════════════════════════════════════════════
# GEMINI API
# ═══════════════════════════════════════════════════════════════════════════════
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

GEMINI_STANDARD_MODEL = "gemini-3-pro-image-preview"
GEMINI_FRUGAL_MODEL = "gemini-2.5-flash-image"

# Checked in this order, first non-empty value wins
API_KEY_ENV_VARS: Tuple[str, ...] = (
    "NANOBANANA_GEMINI_API_KEY",
    "NANOBANANA_GOOGLE_API_KEY",
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
)

# Upper bound on a single generateContent round trip (seconds)
REQUEST_TIMEOUT = 5 * 60

SUPPORTED_ASPECT_RATIOS: Tuple[str, ...] = (
    "1:1",   # Square
    "16:9",  # Landscape
    "9:16",  # Portrait
    "4:3",   # Landscape
    "3:4",   # Portrait
    "3:2",   # Landscape
    "2:3",   # Portrait
    "21:9",  # Ultra-wide
    "5:4",   # Flexible
    "4:5",   # Flexible
)

SUPPORTED_RESOLUTIONS: Tuple[str, ...] = ("1K", "2K", "4K")
STANDARD_DEFAULT_RESOLUTION = "4K"
FRUGAL_RESOLUTION = "1K"

# Reference images per request: hard limit, and the count above which quality drops
MAX_REFERENCE_IMAGES = 14
RECOMMENDED_MAX_REFERENCE_IMAGES = 3

INLINE_IMAGE_MIME_TYPE = "image/png"

# Text parts longer than this with no spaces/newlines are treated as base64 image data
TEXT_IMAGE_MIN_LENGTH = 1000

# ═══════════════════════════════════════════════════════════════════════════════
# OUTPUT FILES
# ═══════════════════════════════════════════════════════════════════════════════
MAX_FILENAME_STEM_LENGTH = 50
IMAGE_EXTENSION = ".png"

# PNG tEXt key used when --store-prompt is given
PROMPT_METADATA_KEY = "prompt"

# ═══════════════════════════════════════════════════════════════════════════════
# THEME PRESETS
# ═══════════════════════════════════════════════════════════════════════════════
PRESET_FILE_CANDIDATES: List[Path] = [
    Path(".imagemage.json"),
    Path(".imagemage.yaml"),
    Path(".imagemage.yml"),
    Path.home() / ".config" / "imagemage" / "config.json",
    Path.home() / ".config" / "imagemage" / "config.yaml",
]

# ═══════════════════════════════════════════════════════════════════════════════
# COMMAND TABLES
# ═══════════════════════════════════════════════════════════════════════════════
ICON_TYPES: List[str] = ["app-icon", "favicon", "ui-element"]
DEFAULT_ICON_SIZES = "64,128,256"

PATTERN_TYPES: List[str] = ["seamless", "texture", "wallpaper"]

DIAGRAM_TYPES: List[str] = [
    "flowchart",
    "architecture",
    "sequence",
    "network",
    "mindmap",
    "infographic",
]

# Short guidance appended to diagram prompts, keyed by diagram type
DIAGRAM_GUIDANCE: Dict[str, str] = {
    "flowchart": "Use clear boxes for steps, diamonds for decisions, and arrows showing the flow direction.",
    "architecture": "Show components as labeled blocks grouped into layers, with connections between them.",
    "sequence": "Show participants as columns with time flowing downward and labeled messages between them.",
    "network": "Show nodes and devices with labeled links, grouping related nodes together.",
    "mindmap": "Place the central idea in the middle with branches radiating outward to related ideas.",
    "infographic": "Combine short labels, icons, and simple charts in a clean, readable layout.",
}

DEFAULT_STORY_FRAMES = 4
