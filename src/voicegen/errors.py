"""Custom voicegen exceptions.

Fatal categories (configuration, manifest, packaging) abort the run.
Recovered categories (item generation, conversion, cache I/O) are logged
and the batch carries on.
"""


class VoicegenError(Exception):
    """Base exception for voicegen errors."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class ConfigurationError(VoicegenError):
    """Exception raised for invalid or incomplete run configuration.

    This typically occurs when:
    - Credentials for the synthesis provider are missing
    - The output root cannot be created
    - A config value is missing or out of range
    """

    pass


class ManifestError(VoicegenError):
    """Exception raised when the manifest is unreadable or malformed."""

    pass


class ItemGenerationError(VoicegenError):
    """Exception raised when synthesis fails for a single manifest item."""

    pass


class ConversionError(VoicegenError):
    """Exception raised when one derived format cannot be produced."""

    def __init__(
        self,
        message: str,
        fmt: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.fmt = fmt


class CacheIOError(VoicegenError):
    """Exception raised when the cache file cannot be read or written."""

    pass


class PackagingError(VoicegenError):
    """Exception raised when the downstream package build fails."""

    pass


class TTSAuthError(ConfigurationError):
    """Exception raised for synthesis provider authentication failures.

    This typically occurs when:
    - API key is missing or invalid
    - Account has insufficient credits
    - A required local TTS binary is not installed
    """

    pass


class TTSAPIError(ItemGenerationError):
    """Exception raised for synthesis API communication errors.

    This typically occurs when:
    - API server is unavailable (5xx errors)
    - Rate limits are exceeded (429 error)
    - Request format is invalid (4xx errors)
    - Network connectivity issues
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.status_code = status_code
