"""
Gemini API client for image generation and editing.

Handles authentication, request validation, payload construction,
the HTTP call, response parsing and error classification.
"""

import copy
import json
import os
from typing import Mapping, Optional, Sequence

import requests

from ..config import (
    API_KEY_ENV_VARS,
    FRUGAL_RESOLUTION,
    INLINE_IMAGE_MIME_TYPE,
    MAX_REFERENCE_IMAGES,
    RECOMMENDED_MAX_REFERENCE_IMAGES,
    STANDARD_DEFAULT_RESOLUTION,
    SUPPORTED_ASPECT_RATIOS,
    SUPPORTED_RESOLUTIONS,
    TEXT_IMAGE_MIN_LENGTH,
)
from ..core.models import ClientSettings, GenerationRequest, ImageExtraction, ModelTier
from ..logging_utils import log_api_call, log_debug, log_warning
from .exceptions import (
    EmptyInstructionError,
    GeminiTransportError,
    IncompatibleOptionsError,
    MissingAPIKeyError,
    NoImageDataError,
    TooManyImagesError,
    UnsupportedAspectRatioError,
    UnsupportedResolutionError,
    classify_api_error,
)


# =============================================================================
# Authentication
# =============================================================================

def get_api_key(environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Return the Gemini API key from the environment.

    Variables are checked in API_KEY_ENV_VARS order and the first
    non-empty one wins.

    Args:
        environ: Mapping to read from (defaults to os.environ).

    Returns:
        The API key.

    Raises:
        MissingAPIKeyError: If none of the variables is set.
    """
    if environ is None:
        environ = os.environ
    for name in API_KEY_ENV_VARS:
        value = environ.get(name)
        if value:
            return value
    raise MissingAPIKeyError(API_KEY_ENV_VARS)


# =============================================================================
# Validation
# =============================================================================

def validate_aspect_ratio(aspect_ratio: Optional[str]) -> None:
    """Raise UnsupportedAspectRatioError unless aspect_ratio is unset or supported."""
    if not aspect_ratio:
        return  # Provider default
    if aspect_ratio not in SUPPORTED_ASPECT_RATIOS:
        raise UnsupportedAspectRatioError(aspect_ratio, SUPPORTED_ASPECT_RATIOS)


def validate_resolution(resolution: Optional[str], tier: ModelTier) -> None:
    """
    Check a resolution against the supported set and the tier's limits.

    The frugal model has a fixed 1024px output, so anything but 1K is a
    configuration error for it.
    """
    if not resolution:
        return
    if resolution not in SUPPORTED_RESOLUTIONS:
        raise UnsupportedResolutionError(resolution, SUPPORTED_RESOLUTIONS)
    if tier is ModelTier.FRUGAL and resolution != FRUGAL_RESOLUTION:
        raise IncompatibleOptionsError(
            f"--frugal mode only supports {FRUGAL_RESOLUTION} resolution, but {resolution} "
            f"was requested. {tier.model_name} only supports {FRUGAL_RESOLUTION} (1024px) "
            "resolution. Remove --frugal to use higher resolutions"
        )


def effective_resolution(resolution: Optional[str], tier: ModelTier) -> str:
    """Resolution the model will actually produce, for display."""
    if tier is ModelTier.FRUGAL:
        return FRUGAL_RESOLUTION
    return resolution or STANDARD_DEFAULT_RESOLUTION


def check_reference_image_count(count: int) -> bool:
    """
    Enforce the reference image limit.

    Returns:
        True if count is above the recommended maximum (allowed, but
        results degrade).

    Raises:
        TooManyImagesError: If count exceeds MAX_REFERENCE_IMAGES.
    """
    if count > MAX_REFERENCE_IMAGES:
        raise TooManyImagesError(count, MAX_REFERENCE_IMAGES)
    return count > RECOMMENDED_MAX_REFERENCE_IMAGES


# =============================================================================
# Response parsing
# =============================================================================

def _looks_like_base64_text(text: str) -> bool:
    # Best-effort: the API documents no such encoding, but some responses
    # carry the image as a bare base64 text part.
    return len(text) > TEXT_IMAGE_MIN_LENGTH and " " not in text and "\n" not in text


def extract_image_data(data: dict) -> ImageExtraction:
    """
    Find the image payload in a generateContent response.

    Only the first candidate is inspected. Inline data parts win; a long
    text part with no spaces or newlines is accepted as base64 image data
    only when no part carries inline data.

    Handles both 'inlineData' and 'inline_data' field naming.

    Args:
        data: Parsed JSON response from Gemini API.

    Returns:
        ImageExtraction, found or not found.
    """
    candidates = data.get("candidates") if isinstance(data, dict) else None
    if not candidates or not isinstance(candidates, list) or not isinstance(candidates[0], dict):
        return ImageExtraction.not_found()

    content = candidates[0].get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ImageExtraction.not_found()
    parts = [part for part in parts if isinstance(part, dict)]

    for part in parts:
        blob = part.get("inlineData") or part.get("inline_data")
        if isinstance(blob, dict) and blob.get("data"):
            return ImageExtraction.from_inline_data(blob["data"])

    for part in parts:
        text = part.get("text")
        if isinstance(text, str) and _looks_like_base64_text(text):
            return ImageExtraction.from_text(text)

    return ImageExtraction.not_found()


def _error_message_from_body(body: str) -> str:
    """Pull error.message out of a JSON error body, or return the raw body."""
    try:
        parsed = json.loads(body)
    except ValueError:
        return body
    if isinstance(parsed, dict) and isinstance(parsed.get("error"), dict):
        return parsed["error"].get("message") or body
    return body


def _redact_payload(payload: dict) -> dict:
    """Copy of payload with inline image data shortened for debug logs."""
    redacted = copy.deepcopy(payload)
    for content in redacted.get("contents", []):
        for part in content.get("parts", []):
            blob = part.get("inlineData")
            if blob and len(blob.get("data", "")) > 64:
                blob["data"] = f"{blob['data'][:32]}...<{len(blob['data'])} chars>"
    return redacted


# =============================================================================
# Client
# =============================================================================

class GeminiClient:
    """
    Client for the Gemini generateContent endpoint.

    One synchronous POST per request, no retries. The tier is fixed for
    the lifetime of the client.
    """

    def __init__(self, settings: Optional[ClientSettings] = None, api_key: Optional[str] = None):
        """
        Args:
            settings: Tier, base URL, timeout and debug flag.
            api_key: Explicit key; read from the environment if omitted.

        Raises:
            MissingAPIKeyError: If no key is given and none is in the environment.
        """
        self.settings = settings or ClientSettings()
        self._api_key = api_key or get_api_key()

    @property
    def tier(self) -> ModelTier:
        return self.settings.tier

    @property
    def model_name(self) -> str:
        return self.settings.model_name

    @property
    def endpoint(self) -> str:
        """Request URL without the credential."""
        return f"{self.settings.base_url}/{self.model_name}:generateContent"

    # -------------------------------------------------------------------------
    # Payload construction
    # -------------------------------------------------------------------------

    def validate_request(self, request: GenerationRequest) -> None:
        """Run every local check; raises before any network call."""
        if not request.instruction or not request.instruction.strip():
            raise EmptyInstructionError()
        validate_aspect_ratio(request.aspect_ratio)
        validate_resolution(request.resolution, self.tier)
        check_reference_image_count(len(request.reference_images))

    def build_payload(self, request: GenerationRequest) -> dict:
        """
        Build the generateContent JSON body for a request.

        The text part always comes first, followed by the reference images
        in caller order. The standard tier always sends imageSize (4K when
        unset); the frugal tier never sends it.
        """
        self.validate_request(request)

        parts = [{"text": request.instruction}]
        for image_b64 in request.reference_images:
            if image_b64:
                parts.append({
                    "inlineData": {"mimeType": INLINE_IMAGE_MIME_TYPE, "data": image_b64}
                })

        payload = {"contents": [{"role": "user", "parts": parts}]}

        image_config = {}
        if request.aspect_ratio:
            image_config["aspectRatio"] = request.aspect_ratio
        if self.tier is not ModelTier.FRUGAL:
            image_config["imageSize"] = request.resolution or STANDARD_DEFAULT_RESOLUTION

        if image_config:
            payload["generationConfig"] = {"imageConfig": image_config}
        return payload

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def _post(self, payload: dict) -> dict:
        """Send payload and return the parsed success body, or raise a typed error."""
        if self.settings.debug:
            log_debug(f"Request URL: {self.endpoint}?key=REDACTED")
            log_debug(f"Request body:\n{json.dumps(_redact_payload(payload), indent=2)}")

        try:
            response = requests.post(
                self.endpoint,
                params={"key": self._api_key},
                headers={"Content-Type": "application/json"},
                json=payload,
                timeout=self.settings.timeout,
            )
        except requests.RequestException as e:
            # The key travels in the query string, so it can appear in the message
            detail = str(e).replace(self._api_key, "REDACTED")
            log_api_call(self.model_name, False, f"transport error: {type(e).__name__}")
            raise GeminiTransportError(
                f"failed to send request: {type(e).__name__}: {detail}"
            ) from e

        body = response.text

        if self.settings.debug:
            log_debug(f"Response status: {response.status_code}")
            log_debug(f"Response body:\n{body[:2000]}")

        if not 200 <= response.status_code < 300:
            message = _error_message_from_body(body)
            log_api_call(self.model_name, False, f"HTTP {response.status_code}: {message[:200]}")
            raise classify_api_error(response.status_code, message)

        try:
            data = response.json()
        except ValueError as e:
            log_api_call(self.model_name, False, "unparseable response body")
            raise GeminiTransportError(
                f"failed to parse response: {e}", response.status_code, body[:500]
            ) from e

        if not isinstance(data, dict):
            log_api_call(self.model_name, False, "response body is not a JSON object")
            raise GeminiTransportError(
                "unexpected response body", response.status_code, body[:500]
            )

        # A 200 can still carry a logical error
        error = data.get("error")
        if error:
            if not isinstance(error, dict):
                error = {"message": str(error)}
            code = error.get("code") or response.status_code
            message = str(error.get("message") or "")
            log_api_call(self.model_name, False, f"embedded error {code}: {message[:200]}")
            raise classify_api_error(code, message)

        return data

    def generate_content(self, request: GenerationRequest) -> str:
        """
        Run one generation request.

        Args:
            request: The fully resolved request.

        Returns:
            Base64-encoded image data.

        Raises:
            ValidationError / IncompatibleOptionsError: Before dispatch.
            GeminiAPIError: On any remote failure or missing image data.
        """
        payload = self.build_payload(request)
        data = self._post(payload)

        extraction = extract_image_data(data)
        if not extraction.found:
            log_api_call(self.model_name, False, "No image data in response")
            raise NoImageDataError()

        if extraction.source == "text":
            log_warning("Image data arrived as a text part; treating it as base64")
        log_api_call(
            self.model_name, True,
            f"Image received ({len(extraction.data)} base64 chars, {extraction.source})",
        )
        return extraction.data

    # -------------------------------------------------------------------------
    # Convenience wrappers
    # -------------------------------------------------------------------------

    def generate(
        self,
        prompt: str,
        aspect_ratio: Optional[str] = None,
        resolution: Optional[str] = None,
    ) -> str:
        """Text-to-image generation."""
        return self.generate_content(
            GenerationRequest(prompt, aspect_ratio=aspect_ratio, resolution=resolution)
        )

    def edit(
        self,
        prompt: str,
        images_b64: Sequence[str],
        aspect_ratio: Optional[str] = None,
        resolution: Optional[str] = None,
    ) -> str:
        """Edit images_b64[0] (or compose several images) following prompt."""
        return self.generate_content(
            GenerationRequest(
                prompt,
                reference_images=tuple(images_b64),
                aspect_ratio=aspect_ratio,
                resolution=resolution,
            )
        )
