"""
Shared helpers for the subcommands: common flags, client construction,
batch loops, and prompt metadata.
"""

import argparse
import os
from pathlib import Path
from typing import Callable, Optional

from ..api.exceptions import ImagemageError
from ..api.gemini_client import GeminiClient, effective_resolution
from ..config import SUPPORTED_ASPECT_RATIOS, SUPPORTED_RESOLUTIONS
from ..core.models import ClientSettings, ModelTier
from ..logging_utils import log_batch_complete, log_batch_start, log_error, log_warning
from ..processing.metadata import add_prompt_to_png


# =============================================================================
# Argument helpers
# =============================================================================

def positive_int(value: str) -> int:
    """argparse type for counts: an integer >= 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid count: {value}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value}")
    return number


def add_model_arguments(
    parser: argparse.ArgumentParser,
    default_aspect_ratio: Optional[str] = None,
) -> None:
    """Add --aspect-ratio, --resolution and --frugal."""
    default_note = f" (default: {default_aspect_ratio})" if default_aspect_ratio else ""
    parser.add_argument(
        "-a", "--aspect-ratio",
        default=default_aspect_ratio,
        help=f"Aspect ratio ({', '.join(SUPPORTED_ASPECT_RATIOS)}){default_note}",
    )
    parser.add_argument(
        "-r", "--resolution",
        default=None,
        help=(
            f"Image resolution ({', '.join(SUPPORTED_RESOLUTIONS)}). "
            "Defaults to 4K for the standard model, 1K for --frugal"
        ),
    )
    parser.add_argument(
        "-f", "--frugal",
        action="store_true",
        help=f"Use the cheaper {ModelTier.FRUGAL.model_name} model",
    )


def add_store_prompt_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--store-prompt",
        action="store_true",
        help="Store the prompt in PNG metadata for reproducibility",
    )


# =============================================================================
# Client construction
# =============================================================================

def settings_from_args(args: argparse.Namespace, tier: Optional[ModelTier] = None) -> ClientSettings:
    """Freeze the parsed flags that matter to the client into ClientSettings."""
    if tier is None:
        tier = ModelTier.from_flag(getattr(args, "frugal", False))
    debug = bool(getattr(args, "debug", False) or os.environ.get("DEBUG"))
    return ClientSettings(tier=tier, debug=debug)


def make_client(settings: ClientSettings) -> GeminiClient:
    """Create the client; raises MissingAPIKeyError before any request."""
    return GeminiClient(settings)


def print_model_info(
    settings: ClientSettings,
    resolution: Optional[str],
    aspect_ratio: Optional[str] = None,
) -> None:
    """Print aspect ratio, effective resolution and model."""
    if aspect_ratio:
        print(f"Aspect Ratio: {aspect_ratio}")
    print(f"Resolution: {effective_resolution(resolution, settings.tier)}")
    if settings.is_frugal:
        print(f"Model: {settings.model_name} (frugal)")
    else:
        print(f"Model: {settings.model_name}")


# =============================================================================
# Output helpers
# =============================================================================

def store_prompt_metadata(path: Path, prompt: str) -> bool:
    """
    Embed prompt in the PNG at path.

    Failure only warns; the image itself is already saved.

    Returns:
        True if the prompt was stored.
    """
    try:
        add_prompt_to_png(path, prompt)
        return True
    except ImagemageError as e:
        log_warning(f"Failed to store prompt in {path}: {e}")
        print(f"⚠️  Warning: failed to store prompt in metadata: {e}")
        return False


def run_batch(count: int, label: str, produce: Callable[[int], Path]) -> int:
    """
    Run produce(1..count) one after another, isolating failures.

    A failed item is reported and skipped; the loop continues.

    Args:
        count: Number of items.
        label: Noun used in progress messages ("image", "frame").
        produce: Generates and saves item i, returning the saved path.

    Returns:
        Number of items that succeeded.
    """
    log_batch_start(label, count)
    success_count = 0

    for i in range(1, count + 1):
        if count > 1:
            print(f"[{i}/{count}] Generating {label}...")
        else:
            print(f"Generating {label}...")

        try:
            produce(i)
        except ImagemageError as e:
            log_error(f"{label} {i} failed", str(e))
            print(f"Error generating {label} {i}: {e}")
            continue
        success_count += 1

    log_batch_complete(label, success_count, count)
    return success_count


def exit_code(success_count: int) -> int:
    """0 when anything succeeded, 1 otherwise."""
    return 0 if success_count > 0 else 1
