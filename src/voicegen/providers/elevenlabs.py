"""ElevenLabs speech-synthesis provider implementation."""

import asyncio
import logging
import os
from typing import TYPE_CHECKING, Any

from elevenlabs.client import ElevenLabs

from ..errors import TTSAPIError, TTSAuthError
from .base import TTSProvider
from .models import VoiceSettings

if TYPE_CHECKING:
    from ..config import TTSConfig

logger = logging.getLogger(__name__)

DEFAULT_MODEL_ID = "eleven_multilingual_v2"
OUTPUT_FORMAT = "mp3_44100_128"

# Models that accept an explicit language_code; others infer it from the text
LANGUAGE_CODE_MODELS = frozenset({"eleven_turbo_v2_5", "eleven_flash_v2_5"})


def _classify_error(e: Exception, action: str) -> Exception:
    if "unauthorized" in str(e).lower() or "401" in str(e):
        return TTSAuthError(f"Authentication failed: {e}", e)
    elif "429" in str(e):
        return TTSAPIError(f"Rate limit exceeded: {e}", 429, e)
    elif "5" in str(e)[:1]:  # 5xx server errors
        return TTSAPIError(f"Server error: {e}", None, e)
    else:
        return TTSAPIError(f"{action} failed: {e}", None, e)


class ElevenLabsProvider(TTSProvider):
    """ElevenLabs TTS provider implementation.

    Provides methods to synthesize speech from text and manage voices
    using the ElevenLabs API.
    """

    name = "elevenlabs"
    file_extension = "mp3"

    @classmethod
    def from_config(cls, config: "TTSConfig", **kwargs: Any) -> "ElevenLabsProvider":
        """Build the provider with the configured model."""
        return cls(model_id=config.model, **kwargs)

    def __init__(
        self,
        api_key: str | None = None,
        model_id: str | None = None,
        voice_settings: VoiceSettings | None = None,
    ) -> None:
        """Initialize ElevenLabs provider.

        Args:
            api_key: ElevenLabs API key. If not provided, reads from
                    ELEVENLABS_API_KEY environment variable.
            model_id: ElevenLabs model ID (defaults to eleven_multilingual_v2)
            voice_settings: Voice tuning applied to every request

        Raises:
            TTSAuthError: If API key is not provided or invalid.
        """
        self._api_key = api_key or os.getenv("ELEVENLABS_API_KEY")
        if not self._api_key:
            raise TTSAuthError(
                "ElevenLabs API key not found. Set ELEVENLABS_API_KEY environment "
                "variable or provide api_key parameter."
            )

        try:
            self._client = ElevenLabs(api_key=self._api_key)
        except Exception as e:
            raise TTSAuthError(f"Failed to initialize ElevenLabs client: {e}", e) from e

        self.model_id = model_id or DEFAULT_MODEL_ID
        self.voice_settings = voice_settings or VoiceSettings()

        # Cache for voices to avoid repeated API calls
        self._voices_cache: list[dict] | None = None

    async def verify(self) -> None:
        """Check the API key by listing voices.

        Raises:
            TTSAuthError: If the API rejects the key or cannot be reached
        """
        try:
            voices = await self.list_voices()
        except TTSAPIError as e:
            raise TTSAuthError(f"Failed to verify ElevenLabs access: {e}", e) from e

        logger.debug(f"ElevenLabs access verified ({len(voices)} voices available)")

    async def synthesize(self, text: str, voice: str, language: str = "") -> bytes:
        """Convert text to speech audio bytes.

        Args:
            text: Text to convert to speech
            voice: Voice ID to use for synthesis
            language: Optional language code; only sent to models that accept it

        Returns:
            Audio data as bytes (MP3 format)

        Raises:
            TTSAPIError: If API call fails
            TTSAuthError: If authentication fails
            ValueError: If text is empty
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        # Use first available voice if not specified
        if not voice:
            voices = await self.list_voices()
            if not voices:
                raise TTSAPIError("No voices available")
            voice = voices[0]["id"]

        request = {
            "text": text.strip(),
            "voice_id": voice,
            "model_id": self.model_id,
            "output_format": OUTPUT_FORMAT,
            "voice_settings": self.voice_settings.to_dict(),
        }
        if language and self.model_id in LANGUAGE_CODE_MODELS:
            request["language_code"] = language.split("-")[0].lower()

        try:
            # Run synchronous ElevenLabs client in thread to avoid blocking event loop
            def _sync_convert() -> bytes:
                audio_generator = self._client.text_to_speech.convert(**request)
                # Collect all audio chunks
                return b"".join(audio_generator)

            audio_bytes = await asyncio.to_thread(_sync_convert)

        except Exception as e:
            raise _classify_error(e, "API call") from e

        if not audio_bytes:
            raise TTSAPIError("No audio data received from API")

        return audio_bytes

    async def list_voices(self) -> list[dict]:
        """Get list of available voices.

        Results are cached after first call to avoid repeated API requests.

        Returns:
            List of voice dictionaries with id, name, and provider fields

        Raises:
            TTSAPIError: If API call fails
            TTSAuthError: If authentication fails
        """
        if self._voices_cache is not None:
            return self._voices_cache

        try:
            # Run synchronous voice listing in thread
            def _sync_get_voices() -> list[dict]:
                response = self._client.voices.get_all()
                return [
                    {"id": voice.voice_id, "name": voice.name, "provider": self.name}
                    for voice in response.voices
                ]

            voices = await asyncio.to_thread(_sync_get_voices)

        except Exception as e:
            raise _classify_error(e, "Listing voices") from e

        self._voices_cache = voices
        return voices
