"""
Style/theme presets.

A preset file (JSON or YAML) supplies a default style, color scheme,
extra context, aspect ratio and resolution. Values only fill in what the
user didn't pass on the command line.

Example .imagemage.json:

    {
      "style": "flat vector illustration",
      "colorScheme": "navy and orange",
      "additionalContext": "for a developer conference",
      "aspectRatio": "16:9",
      "resolution": "2K"
    }
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

import yaml

from .api.exceptions import ConfigurationError
from .config import PRESET_FILE_CANDIDATES
from .logging_utils import log_debug

# File key -> field name; snake_case keys are accepted as well
_KEY_ALIASES = {
    "style": "style",
    "colorScheme": "color_scheme",
    "color_scheme": "color_scheme",
    "additionalContext": "additional_context",
    "additional_context": "additional_context",
    "aspectRatio": "aspect_ratio",
    "aspect_ratio": "aspect_ratio",
    "resolution": "resolution",
}


@dataclass(frozen=True)
class ImageGenConfig:
    """Theme preset loaded from a config file."""
    style: str = ""
    color_scheme: str = ""
    additional_context: str = ""
    aspect_ratio: str = ""
    resolution: str = ""
    source: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: dict, source: Optional[Path] = None) -> "ImageGenConfig":
        values = {}
        for key, value in data.items():
            name = _KEY_ALIASES.get(key)
            if name is None:
                log_debug(f"Ignoring unknown preset key: {key}")
                continue
            if value is not None:
                values[name] = str(value).strip()
        return cls(source=source, **values)

    def apply_to_prompt(self, prompt: str) -> str:
        """Append the non-empty theme fields to prompt."""
        fragments = [prompt]
        if self.style:
            fragments.append(f"Style: {self.style}")
        if self.color_scheme:
            fragments.append(f"Color scheme: {self.color_scheme}")
        if self.additional_context:
            fragments.append(f"Context: {self.additional_context}")
        return ". ".join(fragments)

    def resolve_aspect_ratio(self, explicit: Optional[str]) -> Optional[str]:
        """The caller's value wins; the preset only fills a gap."""
        return explicit or self.aspect_ratio or None

    def resolve_resolution(self, explicit: Optional[str]) -> Optional[str]:
        return explicit or self.resolution or None


def load_config_file(path: Union[str, Path]) -> ImageGenConfig:
    """
    Parse a preset file. YAML for .yaml/.yml, JSON otherwise.

    Raises:
        ConfigurationError: If the file is unreadable or not a mapping.
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(f"failed to load config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"config {path} must contain a mapping at the top level")

    log_debug(f"Loaded preset config from {path}")
    return ImageGenConfig.from_dict(data, source=path)


def find_config(
    explicit_path: Optional[Union[str, Path]] = None,
    candidates: Sequence[Path] = PRESET_FILE_CANDIDATES,
) -> ImageGenConfig:
    """
    Locate and load the preset config.

    Args:
        explicit_path: A --config value. Must exist if given.
        candidates: Paths searched in order when no explicit path is given.

    Returns:
        The loaded config, or an empty ImageGenConfig when nothing is found.
    """
    if explicit_path:
        path = Path(explicit_path)
        if not path.is_file():
            raise ConfigurationError(f"config file not found: {path}")
        return load_config_file(path)

    for candidate in candidates:
        if candidate.is_file():
            return load_config_file(candidate)

    log_debug("No preset config found; using defaults")
    return ImageGenConfig()
