"""Core functionality for voicegen - wires a full incremental build run."""

import logging
from dataclasses import dataclass
from pathlib import Path

from .cache import CacheStore
from .config import VoicegenConfig
from .conversion import ConversionEngine
from .errors import ConfigurationError, TTSAPIError, VoicegenError
from .manifest import load_manifest
from .packaging import DebianPackageBuilder, PackageSpec
from .pipeline import BatchCoordinator, BatchReport, GenerationOrchestrator
from .providers import ProviderRegistry
from .providers.base import TTSProvider
from .scheduler import RateLimitedScheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildResult:
    """Result of one build run.

    Attributes:
        report: Aggregated per-item outcomes of the batch
        package_path: Built .deb, or None when packaging did not run
    """

    report: BatchReport
    package_path: Path | None = None


def create_provider(config: VoicegenConfig) -> TTSProvider:
    """Instantiate the configured provider.

    Raises:
        ConfigurationError: If the provider is unknown or cannot be initialized
    """
    name = config.tts.provider
    try:
        ProviderRegistry.get(name)
    except KeyError as e:
        raise ConfigurationError(str(e.args[0])) from None

    return ProviderRegistry.create(name, config=config.tts)


async def list_available_voices(config: VoicegenConfig) -> list[dict[str, str]]:
    """List voices offered by the configured provider.

    Raises:
        ConfigurationError: If the provider cannot be initialized
        TTSAPIError: If the voice listing fails
    """
    provider = create_provider(config)
    try:
        return await provider.list_voices()
    except VoicegenError:
        raise
    except Exception as e:
        raise TTSAPIError(f"Failed to list voices: {e}", None, e) from e


async def run_build(
    config: VoicegenConfig,
    manifest_path: Path | None = None,
    package: bool = True,
    provider: TTSProvider | None = None,
    converter: ConversionEngine | None = None,
    package_dir: Path | None = None,
) -> BuildResult:
    """Run one incremental build over a manifest.

    Validates the output root and provider credentials before any item is
    processed, then generates, converts and persists the cache. A Debian
    package is built only when at least one artifact was regenerated.

    Args:
        config: Loaded configuration
        manifest_path: Manifest to build (defaults to config.manifest)
        package: Whether packaging may run at all
        provider: Provider instance to use instead of the configured one
        converter: Conversion engine to use instead of one built from config
        package_dir: Destination directory for the .deb (defaults to the
            parent of the output root)

    Returns:
        BuildResult with the batch report and the package path, if built

    Raises:
        ConfigurationError: If the output root, manifest path or provider
            credentials are missing
        ManifestError: If the manifest cannot be loaded
        PackagingError: If building the package fails
    """
    manifest_path = manifest_path or config.manifest
    if manifest_path is None:
        raise ConfigurationError(
            "No manifest given. Pass MANIFEST or set VOICEGEN_MANIFEST."
        )

    output_root = config.output.root
    if not output_root.is_dir():
        raise ConfigurationError(f"Output directory not found: {output_root}")

    if provider is None:
        provider = create_provider(config)
    await provider.verify()

    items = load_manifest(Path(manifest_path))

    cache_store = CacheStore(
        output_root, min_artifact_bytes=config.output.min_artifact_bytes
    )
    cache_store.load()

    scheduler = RateLimitedScheduler(
        max_requests_per_second=config.scheduler.max_requests_per_second,
        request_timeout=config.scheduler.request_timeout,
    )
    if converter is None:
        converter = ConversionEngine(
            ffmpeg=config.conversion.ffmpeg,
            asterisk=config.conversion.asterisk,
            timeout=config.conversion.timeout,
        )

    orchestrator = GenerationOrchestrator(
        provider=provider,
        scheduler=scheduler,
        cache_store=cache_store,
        output_root=output_root,
        voice=config.tts.voice,
        language=config.tts.language,
        converter=converter,
        formats=config.conversion.formats,
        embed_metadata=config.output.embed_metadata,
    )
    coordinator = BatchCoordinator(orchestrator, cache_store)

    try:
        report = await coordinator.run(items)
    finally:
        await scheduler.close()

    package_path = None
    if package and config.package.enabled and report.should_package:
        builder = DebianPackageBuilder(
            PackageSpec(
                name=config.package.name,
                version=config.package.version,
                maintainer=config.package.maintainer,
                description=config.package.description,
                install_dir=config.package.install_dir,
                owner=config.package.owner,
            )
        )
        package_path = await builder.build(
            output_root, package_dir or output_root.resolve().parent
        )

    return BuildResult(report=report, package_path=package_path)
