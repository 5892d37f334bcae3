"""Configuration management for voicegen.

Loads configuration from ~/.config/voicegen/config.toml (or the file named
by VOICEGEN_CONFIG). Priority chain: CLI flags > env vars > config file.
"""

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .conversion.presets import DEFAULT_FORMATS, PRESETS
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "voicegen"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_CONFIG = """\
# voicegen configuration

[tts]
# Provider: "elevenlabs" (cloud), "system" (espeak / macOS say)
provider = "elevenlabs"

# Voice ID for speech synthesis
# ElevenLabs: use `voicegen --list-voices`
voice = ""

# Language of the prompts; part of every item fingerprint
language = "en-US"

# ElevenLabs model ID
model = "eleven_multilingual_v2"

[scheduler]
# Upper bound on synthesis requests started per second
max_requests_per_second = 2

# Seconds before a single synthesis request is abandoned
request_timeout = 60

[output]
# Output root; relative paths resolve against the working directory
root = "generatedFiles"

# Artifacts at or below this size are treated as corrupt and regenerated
min_artifact_bytes = 1024

# Stamp MP3 artifacts with ID3 audit tags (path, fingerprint, timestamp)
embed_metadata = true

[conversion]
# Derived telephony formats: alaw, ulaw, sln, sln16, gsm, g729
formats = ["alaw", "ulaw", "sln16", "g729"]

# Seconds before a single codec tool invocation is killed
timeout = 120

ffmpeg = "ffmpeg"
asterisk = "asterisk"

[package]
# Build a Debian package when new artifacts were generated
enabled = true
name = "asterisk-core-sounds-custom"
version = "1.0"
maintainer = "Voice Prompts <prompts@example.com>"
description = "Custom audio prompts for Asterisk PBX"
install_dir = "var/lib/asterisk/sounds/en"
owner = "asterisk"

# API keys are read from environment variables, not this file:
#   ELEVENLABS_API_KEY  - ElevenLabs provider
"""


@dataclass(frozen=True)
class TTSConfig:
    """Speech synthesis configuration."""

    provider: str
    voice: str
    language: str
    model: str | None


@dataclass(frozen=True)
class SchedulerConfig:
    """Synthesis rate limiting configuration."""

    max_requests_per_second: float
    request_timeout: float


@dataclass(frozen=True)
class OutputConfig:
    """Output tree configuration."""

    root: Path
    min_artifact_bytes: int
    embed_metadata: bool


@dataclass(frozen=True)
class ConversionConfig:
    """Derived format conversion configuration."""

    formats: tuple[str, ...]
    timeout: float
    ffmpeg: str
    asterisk: str


@dataclass(frozen=True)
class PackageConfig:
    """Debian packaging configuration."""

    enabled: bool
    name: str
    version: str
    maintainer: str
    description: str
    install_dir: str
    owner: str


@dataclass(frozen=True)
class VoicegenConfig:
    """Top-level voicegen configuration."""

    tts: TTSConfig
    scheduler: SchedulerConfig
    output: OutputConfig
    conversion: ConversionConfig
    package: PackageConfig
    manifest: Path | None = None


def default_config_path() -> Path:
    """Config file location, honoring VOICEGEN_CONFIG."""
    override = os.getenv("VOICEGEN_CONFIG")
    return Path(override) if override else CONFIG_PATH


def generate_config(path: Path | None = None) -> Path:
    """Write the default config file and return its path."""
    path = path or default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG)
    return path


def validate_formats(formats: list[str] | tuple[str, ...]) -> tuple[str, ...]:
    """Check format names against the known presets.

    Raises:
        ConfigurationError: If a format is unknown
    """
    unknown = [fmt for fmt in formats if fmt not in PRESETS]
    if unknown:
        raise ConfigurationError(
            f"Unsupported formats: {', '.join(unknown)}. "
            f"Supported formats: {', '.join(PRESETS)}"
        )
    return tuple(dict.fromkeys(formats))


def _positive(name: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None
    if number <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value!r}")
    return number


def parse_config(
    data: Mapping[str, Any], env: Mapping[str, str] | None = None
) -> VoicegenConfig:
    """Build a validated config from parsed TOML data and env overrides.

    Args:
        data: Parsed config file contents
        env: Environment mapping (defaults to os.environ)

    Raises:
        ConfigurationError: If required values are missing or invalid
    """
    env = os.environ if env is None else env

    tts = data.get("tts", {})
    scheduler = data.get("scheduler", {})
    output = data.get("output", {})
    conversion = data.get("conversion", {})
    package = data.get("package", {})

    # Validate required fields
    missing = []
    if "provider" not in tts:
        missing.append("tts.provider")
    if "voice" not in tts:
        missing.append("tts.voice")
    if "language" not in tts:
        missing.append("tts.language")
    if "root" not in output:
        missing.append("output.root")

    if missing:
        raise ConfigurationError(
            f"Missing required config values: {', '.join(missing)}"
        )

    min_bytes = output.get("min_artifact_bytes", 1024)
    if not isinstance(min_bytes, int) or min_bytes < 0:
        raise ConfigurationError(
            f"output.min_artifact_bytes must be a non-negative integer, got {min_bytes!r}"
        )

    manifest = env.get("VOICEGEN_MANIFEST") or data.get("manifest")

    # Env vars override config file values
    return VoicegenConfig(
        tts=TTSConfig(
            provider=env.get("VOICEGEN_PROVIDER", tts["provider"]),
            voice=env.get("VOICEGEN_VOICE", tts["voice"]),
            language=env.get("VOICEGEN_LANGUAGE", tts["language"]),
            model=tts.get("model"),
        ),
        scheduler=SchedulerConfig(
            max_requests_per_second=_positive(
                "scheduler.max_requests_per_second",
                env.get(
                    "VOICEGEN_MAX_RPS", scheduler.get("max_requests_per_second", 2)
                ),
            ),
            request_timeout=_positive(
                "scheduler.request_timeout", scheduler.get("request_timeout", 60)
            ),
        ),
        output=OutputConfig(
            root=Path(env.get("VOICEGEN_OUTPUT_DIR", output["root"])),
            min_artifact_bytes=min_bytes,
            embed_metadata=bool(output.get("embed_metadata", True)),
        ),
        conversion=ConversionConfig(
            formats=validate_formats(conversion.get("formats", list(DEFAULT_FORMATS))),
            timeout=_positive("conversion.timeout", conversion.get("timeout", 120)),
            ffmpeg=conversion.get("ffmpeg", "ffmpeg"),
            asterisk=conversion.get("asterisk", "asterisk"),
        ),
        package=PackageConfig(
            enabled=bool(package.get("enabled", True)),
            name=package.get("name", "asterisk-core-sounds-custom"),
            version=str(package.get("version", "1.0")),
            maintainer=package.get(
                "maintainer", "Voice Prompts <prompts@example.com>"
            ),
            description=package.get(
                "description", "Custom audio prompts for Asterisk PBX"
            ),
            install_dir=package.get("install_dir", "var/lib/asterisk/sounds/en"),
            owner=package.get("owner", "asterisk"),
        ),
        manifest=Path(manifest) if manifest else None,
    )


def load_config(path: Path | None = None) -> VoicegenConfig:
    """Load configuration from config file with env var overrides.

    On first run, generates the config file and stops so the user
    can review it before proceeding.

    Returns:
        Loaded and validated VoicegenConfig.

    Raises:
        ConfigurationError: If config is missing (after generating) or invalid.
    """
    path = path or default_config_path()

    if not path.exists():
        generated = generate_config(path)
        raise ConfigurationError(
            f"No config found. Generated {generated} - review and run again."
        )

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Failed to read config {path}: {e}", e) from e

    logger.debug(f"Loading config from {path}")

    try:
        return parse_config(data)
    except ConfigurationError as e:
        raise ConfigurationError(f"{e} (edit {path} or delete it to regenerate)") from e
