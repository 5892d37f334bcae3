"""Abstract base class for speech-synthesis providers.

This module defines the interface that all TTS providers must implement,
ensuring consistent behavior across different TTS backends.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from ..config import TTSConfig


class TTSProvider(ABC):
    """Abstract base class for speech-synthesis providers.

    All providers must inherit from this class and implement the required
    methods for verifying access, synthesizing speech and listing voices.

    Attributes:
        name: Registry name of the provider
        file_extension: Extension of the audio produced by synthesize()

    Voice Dictionary Structure:
        Each voice returned by list_voices() should follow this structure:
        {
            "id": str,       # Unique identifier for the voice
            "name": str,     # Human-readable name for the voice
            "provider": str  # Name of the provider (e.g., "elevenlabs", "system")
        }
    """

    name: ClassVar[str] = ""
    file_extension: ClassVar[str] = "mp3"

    @classmethod
    def from_config(cls, config: "TTSConfig", **kwargs: Any) -> "TTSProvider":
        """Build the provider from the [tts] config section.

        Providers with tunable options read them from config here.
        """
        return cls(**kwargs)

    @abstractmethod
    async def verify(self) -> None:
        """Check that the provider can be used before any item is processed.

        Raises:
            TTSAuthError: If credentials or required tools are missing
        """
        pass

    @abstractmethod
    async def synthesize(self, text: str, voice: str, language: str = "") -> bytes:
        """Convert text to audio bytes.

        Args:
            text: The text to convert to speech
            voice: Voice ID or name to use for synthesis
            language: Optional language code (e.g., "pt-BR")

        Returns:
            Audio data as bytes in the provider's file_extension format

        Raises:
            TTSAPIError: If synthesis fails
        """
        pass

    @abstractmethod
    async def list_voices(self) -> list[dict]:
        """Return available voices for this provider.

        Returns:
            List of voice dictionaries, each containing:
            - id: Unique voice identifier
            - name: Human-readable voice name
            - provider: Provider name

        Raises:
            Exception: If voice listing fails
        """
        pass
