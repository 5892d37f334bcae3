"""Provider abstraction for speech-synthesis services.

This module provides a registry pattern for managing TTS providers,
allowing runtime selection of different synthesis backends.
"""

from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from ..config import TTSConfig
    from .base import TTSProvider

from .elevenlabs import ElevenLabsProvider
from .system import SystemTTSProvider

__all__ = ["ProviderRegistry"]


class ProviderRegistry:
    """Registry for managing TTS providers.

    This class maintains a registry of available TTS providers,
    allowing registration and retrieval by name.
    """

    _providers: ClassVar[dict[str, type["TTSProvider"]]] = {}

    @classmethod
    def register(cls, name: str, provider_class: type["TTSProvider"]) -> None:
        """Register a TTS provider.

        Args:
            name: Name to register the provider under
            provider_class: Provider class that implements TTSProvider
        """
        cls._providers[name] = provider_class

    @classmethod
    def get(cls, name: str) -> type["TTSProvider"]:
        """Get a provider class by name.

        Args:
            name: Name of the provider to retrieve

        Returns:
            Provider class

        Raises:
            KeyError: If provider name not found
        """
        if name not in cls._providers:
            available = ", ".join(cls._providers.keys()) if cls._providers else "none"
            raise KeyError(
                f"Provider '{name}' not found. Available providers: {available}"
            )
        return cls._providers[name]

    @classmethod
    def names(cls) -> list[str]:
        """Return registered provider names in registration order."""
        return list(cls._providers)

    @classmethod
    def create(
        cls, name: str, config: "TTSConfig | None" = None, **kwargs: Any
    ) -> "TTSProvider":
        """Instantiate a provider by name.

        Args:
            name: Name of the provider
            config: [tts] config section the provider reads its options from
            **kwargs: Constructor arguments for the provider class

        Raises:
            KeyError: If provider name not found
            TTSAuthError: If the provider cannot be initialized
        """
        provider_class = cls.get(name)
        if config is not None:
            return provider_class.from_config(config, **kwargs)
        return provider_class(**kwargs)


# Register providers
ProviderRegistry.register("elevenlabs", ElevenLabsProvider)
ProviderRegistry.register("system", SystemTTSProvider)
