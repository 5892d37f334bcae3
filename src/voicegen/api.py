"""High-level API for voicegen library usage."""

from dataclasses import replace
from pathlib import Path

from .config import VoicegenConfig, load_config, validate_formats
from .core import BuildResult, run_build
from .errors import ConfigurationError


def apply_overrides(
    config: VoicegenConfig,
    output: str | Path | None = None,
    provider: str | None = None,
    voice: str | None = None,
    language: str | None = None,
    formats: list[str] | tuple[str, ...] | None = None,
    max_requests_per_second: float | None = None,
) -> VoicegenConfig:
    """Return a copy of config with explicitly given values applied.

    Raises:
        ConfigurationError: If formats contains an unknown format
    """
    tts = replace(
        config.tts,
        provider=provider or config.tts.provider,
        voice=voice if voice is not None else config.tts.voice,
        language=language if language is not None else config.tts.language,
    )
    scheduler = config.scheduler
    if max_requests_per_second is not None:
        if max_requests_per_second <= 0:
            raise ConfigurationError(
                "max_requests_per_second must be positive, "
                f"got {max_requests_per_second!r}"
            )
        scheduler = replace(scheduler, max_requests_per_second=max_requests_per_second)

    output_config = config.output
    if output is not None:
        output_config = replace(output_config, root=Path(output))

    conversion = config.conversion
    if formats:
        conversion = replace(conversion, formats=validate_formats(formats))

    return replace(
        config,
        tts=tts,
        scheduler=scheduler,
        output=output_config,
        conversion=conversion,
    )


async def build(
    manifest: str | Path | None = None,
    output: str | Path | None = None,
    provider: str | None = None,
    voice: str | None = None,
    language: str | None = None,
    formats: list[str] | tuple[str, ...] | None = None,
    max_requests_per_second: float | None = None,
    package: bool = True,
    config: VoicegenConfig | None = None,
) -> BuildResult:
    """Generate every prompt in a manifest, regenerating only what changed.

    Args:
        manifest: Manifest JSON file (defaults to the configured manifest)
        output: Output root directory
        provider: TTS provider name
        voice: Voice ID/name (provider-specific)
        language: Prompt language, part of every fingerprint
        formats: Derived telephony formats to produce
        max_requests_per_second: Synthesis rate bound
        package: Whether to build a Debian package when artifacts changed
        config: Config to use instead of loading the config file

    Returns:
        BuildResult with the batch report and package path

    Raises:
        ConfigurationError: If configuration or credentials are invalid
        ManifestError: If the manifest cannot be loaded
        PackagingError: If building the package fails
    """
    config = apply_overrides(
        config or load_config(),
        output=output,
        provider=provider,
        voice=voice,
        language=language,
        formats=formats,
        max_requests_per_second=max_requests_per_second,
    )

    manifest_path = Path(manifest) if manifest else None
    return await run_build(config, manifest_path=manifest_path, package=package)
