"""
Prompt builders for Gemini image requests.

Each command that wraps the user's text in a fixed template builds it here,
so the wording stays in one place.
"""

from typing import Optional

from ..config import DIAGRAM_GUIDANCE


def build_generate_prompt(prompt: str, style: Optional[str] = None) -> str:
    """Plain generation prompt with optional style guidance."""
    if style:
        return f"{prompt}, style: {style}"
    return prompt


def build_icon_prompt(description: str, icon_type: str) -> str:
    """Prompt for a square icon that survives downscaling."""
    return (
        f"Create a clean, professional {icon_type} icon: {description}. "
        "The icon should be simple, recognizable, and work well at small sizes. "
        "Use a square 1:1 aspect ratio. "
        "Center the icon on a transparent or solid background."
    )


def build_pattern_prompt(description: str, pattern_type: str) -> str:
    """
    Prompt for repeating patterns, textures and wallpapers.

    Seamless patterns must tile: the edges have to line up when the image
    is repeated in both directions.
    """
    if pattern_type == "seamless":
        return (
            f"Create a seamless, tileable pattern: {description}. "
            "The left edge must continue exactly into the right edge and the top "
            "edge into the bottom edge, so the image repeats with no visible seams. "
            "Keep detail evenly distributed with no single focal point."
        )
    if pattern_type == "texture":
        return (
            f"Create a high-detail surface texture: {description}. "
            "Use flat, even lighting with no perspective, shadows from a single "
            "direction, or objects in the foreground, suitable for use as a material."
        )
    return (
        f"Create a decorative wallpaper design: {description}. "
        "Use a balanced, repeating layout that works as a background behind text or icons."
    )


def build_story_frame_prompt(
    description: str,
    frame: int,
    total: int,
    style: Optional[str] = None,
    has_previous: bool = False,
) -> str:
    """
    Prompt for one frame of a sequential story.

    Args:
        description: The whole story, as given by the user.
        frame: 1-based frame number.
        total: Number of frames in the story.
        style: Optional visual style applied to every frame.
        has_previous: True when the previous frame is attached as a reference image.
    """
    lines = [
        f"This is frame {frame} of {total} in a visual story: {description}.",
        f"Illustrate step {frame} of the story, showing how it progresses from the "
        "previous frame toward the ending.",
    ]
    if frame == 1:
        lines.append("This is the opening frame: introduce the setting and characters.")
    elif frame == total:
        lines.append("This is the final frame: show the conclusion of the story.")
    if has_previous:
        lines.append(
            "The attached image is the previous frame. Keep characters, setting, "
            "colors and art style consistent with it."
        )
    if style:
        lines.append(f"Visual style: {style}.")
    return " ".join(lines)


def build_diagram_prompt(description: str, diagram_type: str, style: Optional[str] = None) -> str:
    """Prompt for a technical diagram with legible labels."""
    guidance = DIAGRAM_GUIDANCE.get(diagram_type, "")
    prompt = (
        f"Create a clear, professional {diagram_type} diagram: {description}. "
        f"{guidance} "
        "All text labels must be spelled correctly and easy to read. "
        "Use a clean white background and a consistent color palette."
    )
    if style:
        prompt += f" Style: {style}."
    return prompt


def build_restore_prompt(colorize: bool = False, instructions: Optional[str] = None) -> str:
    """Prompt for repairing an old or damaged photo supplied as the base image."""
    prompt = (
        "Restore this old photograph. Remove scratches, dust, tears, stains and "
        "noise, repair faded or missing areas, and sharpen details while keeping "
        "every face, expression and the original composition unchanged."
    )
    if colorize:
        prompt += " Colorize the photo with natural, historically plausible colors."
    else:
        prompt += " Keep the original color treatment of the photo."
    if instructions:
        prompt += f" Additional instructions: {instructions}"
    return prompt
