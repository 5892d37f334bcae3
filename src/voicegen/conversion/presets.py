"""Fixed encoding presets for telephony formats.

Each preset pins sample rate, channel count and codec so the same source
always yields byte-compatible prompts for the PBX.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FormatPreset:
    """Encoding parameters for one target format.

    Attributes:
        name: Format name, also used as the output file extension
        sample_rate: Output sample rate in Hz
        channels: Output channel count
        codec: ffmpeg audio encoder name
        container: ffmpeg output muxer name
    """

    name: str
    sample_rate: int
    channels: int
    codec: str
    container: str


PRESETS: dict[str, FormatPreset] = {
    "alaw": FormatPreset("alaw", 8000, 1, "pcm_alaw", "alaw"),
    "ulaw": FormatPreset("ulaw", 8000, 1, "pcm_mulaw", "mulaw"),
    "sln": FormatPreset("sln", 8000, 1, "pcm_s16le", "s16le"),
    "sln16": FormatPreset("sln16", 16000, 1, "pcm_s16le", "s16le"),
    "gsm": FormatPreset("gsm", 8000, 1, "libgsm", "gsm"),
    "g729": FormatPreset("g729", 8000, 1, "g729", "g729"),
}

# Signed linear WAV that asterisk can read for its own codec translators
INTERMEDIATE_WAV = FormatPreset("wav", 8000, 1, "pcm_s16le", "wav")

DEFAULT_FORMATS = ("alaw", "ulaw", "sln16", "g729")


def get_preset(fmt: str) -> FormatPreset:
    """Look up a preset by format name.

    Raises:
        KeyError: If the format is not supported
    """
    if fmt not in PRESETS:
        raise KeyError(
            f"Unsupported format '{fmt}'. Supported formats: {', '.join(PRESETS)}"
        )
    return PRESETS[fmt]


def ffmpeg_command(
    ffmpeg: str, source: Path, target: Path, preset: FormatPreset
) -> list[str]:
    """Build the ffmpeg argument list for a preset."""
    return [
        ffmpeg,
        "-hide_banner",
        "-loglevel",
        "error",
        "-y",
        "-i",
        str(source),
        "-vn",
        "-ar",
        str(preset.sample_rate),
        "-ac",
        str(preset.channels),
        "-acodec",
        preset.codec,
        "-f",
        preset.container,
        str(target),
    ]


def asterisk_command(asterisk: str, source: Path, target: Path) -> list[str]:
    """Build an asterisk CLI "file convert" invocation.

    The running asterisk server picks codecs from the file extensions and
    resolves paths itself, so both must be absolute. The CLI splits its
    command on whitespace, so both paths are double-quoted.
    """
    return [
        asterisk,
        "-rx",
        f'file convert "{Path(source).resolve()}" "{Path(target).resolve()}"',
    ]
