"""Custom exceptions for configuration, validation, Gemini API and output errors."""
from enum import Enum
from typing import Iterable, List, Optional


class ImagemageError(Exception):
    """Base exception for everything imagemage reports to the user."""
    pass


# =============================================================================
# Configuration errors (raised before any network activity)
# =============================================================================

class ConfigurationError(ImagemageError):
    """Bad configuration: missing credential, incompatible options, bad preset file."""
    pass


class MissingAPIKeyError(ConfigurationError):
    """None of the credential environment variables is set."""

    def __init__(self, env_vars: Iterable[str]):
        self.env_vars = list(env_vars)
        names = ", ".join(self.env_vars[:-1]) + f", or {self.env_vars[-1]}"
        super().__init__(f"API key not found. Please set one of: {names}")


class IncompatibleOptionsError(ConfigurationError):
    """Two options that cannot be combined, e.g. the frugal tier with 4K."""
    pass


# =============================================================================
# Local validation errors
# =============================================================================

class ValidationError(ImagemageError):
    """A request value failed local validation."""
    pass


class EmptyInstructionError(ValidationError):
    def __init__(self):
        super().__init__("instruction text must not be empty")


class UnsupportedAspectRatioError(ValidationError):
    """
    Raised for an aspect ratio outside the supported set.

    Attributes:
        value: The rejected aspect ratio.
        supported: The full supported set, in order.
    """
    def __init__(self, value: str, supported: Iterable[str]):
        self.value = value
        self.supported = list(supported)
        super().__init__(
            f"unsupported aspect ratio: {value}. Supported: {', '.join(self.supported)}"
        )


class UnsupportedResolutionError(ValidationError):
    def __init__(self, value: str, supported: Iterable[str]):
        self.value = value
        self.supported = list(supported)
        super().__init__(
            f"unsupported resolution: {value}. Supported: {', '.join(self.supported)}"
        )


class TooManyImagesError(ValidationError):
    def __init__(self, count: int, limit: int):
        self.count = count
        self.limit = limit
        super().__init__(
            f"too many input images ({count}). Maximum is {limit} (base + additional)"
        )


class InputImageNotFoundError(ValidationError):
    def __init__(self, path, label: str = "input image"):
        self.path = path
        super().__init__(f"{label} not found: {path}")


# =============================================================================
# Remote (Gemini API) errors
# =============================================================================

class ErrorCategory(Enum):
    MALFORMED_REQUEST = "malformed_request"
    SAFETY_REJECTED = "safety_rejected"
    INVALID_API_KEY = "invalid_api_key"
    QUOTA_EXCEEDED = "quota_exceeded"
    AUTH_FAILED = "auth_failed"
    SERVICE_ERROR = "service_error"
    UNCLASSIFIED = "unclassified"
    TRANSPORT = "transport"
    NO_IMAGE_DATA = "no_image_data"


class GeminiAPIError(ImagemageError, RuntimeError):
    """
    Base exception for Gemini API errors.

    Attributes:
        status_code: HTTP status (or embedded error code); None when the
            request never got a response.
        raw_message: The provider's message, unmodified.
        category: Which ErrorCategory this error belongs to.
    """
    category = ErrorCategory.UNCLASSIFIED

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        raw_message: str = "",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.raw_message = raw_message


class MalformedRequestError(GeminiAPIError):
    category = ErrorCategory.MALFORMED_REQUEST


class GeminiSafetyError(GeminiAPIError):
    """
    Raised when Gemini blocks content due to safety filters.

    Attributes:
        safety_ratings: List of safety rating dicts from the API response.
    """
    category = ErrorCategory.SAFETY_REJECTED

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        raw_message: str = "",
        safety_ratings: Optional[List[dict]] = None,
    ):
        super().__init__(message, status_code, raw_message)
        self.safety_ratings = safety_ratings or []


class InvalidAPIKeyError(GeminiAPIError):
    category = ErrorCategory.INVALID_API_KEY


class QuotaExceededError(GeminiAPIError):
    category = ErrorCategory.QUOTA_EXCEEDED


class AuthenticationError(GeminiAPIError):
    category = ErrorCategory.AUTH_FAILED


class ServiceError(GeminiAPIError):
    category = ErrorCategory.SERVICE_ERROR


class UnclassifiedAPIError(GeminiAPIError):
    category = ErrorCategory.UNCLASSIFIED


class GeminiTransportError(GeminiAPIError):
    """The request failed before a usable response arrived (connection, timeout, bad body)."""
    category = ErrorCategory.TRANSPORT


class NoImageDataError(GeminiAPIError):
    """A successful response carried no image. The service broke its contract."""
    category = ErrorCategory.NO_IMAGE_DATA

    def __init__(self, message: str = "no image data found in response"):
        super().__init__(message)


def classify_api_error(status_code: int, message: str) -> GeminiAPIError:
    """
    Turn an HTTP status and provider message into a typed error.

    Keyword checks ignore case, so "SAFETY" and "Safety" match like "safety".

    Args:
        status_code: HTTP status code, or the code of an embedded error object.
        message: The provider's error message (or raw body if unparseable).

    Returns:
        A GeminiAPIError subclass instance carrying status_code and raw_message.
    """
    lowered = message.lower()

    if status_code == 400:
        if "safety" in lowered:
            return GeminiSafetyError(
                "request rejected due to safety concerns", status_code, message
            )
        return MalformedRequestError(f"malformed request: {message}", status_code, message)

    if status_code == 403:
        if "api key not valid" in lowered:
            return InvalidAPIKeyError("invalid API key", status_code, message)
        if "quota" in lowered:
            return QuotaExceededError("API quota exceeded", status_code, message)
        return AuthenticationError(f"authentication failed: {message}", status_code, message)

    if status_code == 500:
        return ServiceError(f"service error: {message}", status_code, message)

    return UnclassifiedAPIError(f"HTTP {status_code}: {message}", status_code, message)


# =============================================================================
# Local output errors
# =============================================================================

class OutputError(ImagemageError):
    """Writing an output file failed."""
    pass


class OutputExistsError(OutputError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"output file already exists: {path} (use --force to overwrite)")


class ImageSaveError(OutputError):
    pass


class ImageResizeError(OutputError):
    pass


class MetadataError(OutputError):
    pass
