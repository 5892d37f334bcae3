"""Typer CLI definition for voicegen."""

import asyncio
import logging
from pathlib import Path

import typer

from .api import apply_overrides
from .config import default_config_path, generate_config, load_config
from .conversion import PRESETS
from .core import list_available_voices, run_build
from .errors import ConfigurationError, VoicegenError

app = typer.Typer(help="Generate telephony voice prompts from a manifest")


@app.command()
def generate(
    manifest: Path | None = typer.Argument(
        None, help="Manifest JSON file (or VOICEGEN_MANIFEST)"
    ),
    output: Path | None = typer.Option(
        None, "-o", "--output", help="Output root directory (from config if omitted)"
    ),
    provider: str | None = typer.Option(
        None, "-p", "--provider", help="TTS provider (from config if omitted)"
    ),
    voice: str | None = typer.Option(
        None, "-v", "--voice", help="Voice ID (from config if omitted)"
    ),
    language: str | None = typer.Option(
        None, "-l", "--language", help="Prompt language, e.g. pt-BR"
    ),
    rate: float | None = typer.Option(
        None, "--rate", help="Maximum synthesis requests per second"
    ),
    formats: list[str] | None = typer.Option(
        None, "-f", "--format", help="Derived format (repeatable, e.g. -f alaw)"
    ),
    no_package: bool = typer.Option(
        False, "--no-package", help="Skip building the Debian package"
    ),
    config_path: Path | None = typer.Option(
        None, "--config", help="Config file (default ~/.config/voicegen/config.toml)"
    ),
    init_config: bool = typer.Option(
        False, "--init-config", help="Write the default config file and exit"
    ),
    list_voices: bool = typer.Option(
        False, "--list-voices", help="List available voices and exit"
    ),
    list_formats: bool = typer.Option(
        False, "--list-formats", help="List supported derived formats and exit"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Show verbose logging and error details"
    ),
) -> None:
    """Generate telephony voice prompts from a manifest."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if list_formats:
        for name, preset in PRESETS.items():
            typer.echo(
                f"{name}: {preset.codec} {preset.sample_rate} Hz ({preset.container})"
            )
        raise typer.Exit(0)

    if init_config:
        path = config_path or default_config_path()
        if path.exists():
            typer.echo(f"Error: Config already exists: {path}", err=True)
            raise typer.Exit(1)
        typer.echo(f"Config written to {generate_config(path)}")
        raise typer.Exit(0)

    try:
        config = apply_overrides(
            load_config(config_path),
            output=output,
            provider=provider,
            voice=voice,
            language=language,
            formats=formats,
            max_requests_per_second=rate,
        )
    except ConfigurationError as e:
        if debug:
            typer.echo(f"Debug - Configuration error: {e!r}", err=True)
        else:
            typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    if list_voices:
        try:
            voices = asyncio.run(list_available_voices(config))
        except Exception as e:
            if debug:
                typer.echo(f"Debug - Failed to list voices: {e!r}", err=True)
            else:
                typer.echo(f"Error: Failed to list voices: {e}", err=True)
            raise typer.Exit(1) from None
        for entry in voices:
            typer.echo(f"{entry['name']}: {entry['id']}")
        raise typer.Exit(0)

    try:
        result = asyncio.run(
            run_build(config, manifest_path=manifest, package=not no_package)
        )
    except VoicegenError as e:
        if debug:
            typer.echo(f"Debug - {type(e).__name__}: {e!r}", err=True)
        else:
            typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except Exception as e:
        if debug:
            typer.echo(f"Debug - Unexpected error: {e!r}", err=True)
        else:
            typer.echo("Error: An unexpected error occurred", err=True)
        raise typer.Exit(1) from None

    typer.echo(result.report.summary())
    if result.package_path:
        typer.echo(f"Package built: {result.package_path}")
