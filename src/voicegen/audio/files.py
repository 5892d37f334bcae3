"""Artifact file helpers."""

import asyncio
from pathlib import Path


def save_audio(audio_data: bytes, filepath: str | Path) -> Path:
    """Save audio bytes to a file.

    Args:
        audio_data: Audio data to save.
        filepath: Path where the audio file should be saved.

    Returns:
        Path of the written file.

    Raises:
        ValueError: If no audio data provided.
        OSError: If file cannot be written.
    """
    if not audio_data:
        raise ValueError("No audio data provided")

    filepath = Path(filepath)

    try:
        # Create parent directories if they don't exist
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_bytes(audio_data)
    except OSError as e:
        raise OSError(f"Failed to save audio to {filepath}: {e}") from e

    return filepath


async def save_audio_async(audio_data: bytes, filepath: str | Path) -> Path:
    """Save audio bytes to a file without blocking the event loop."""
    return await asyncio.to_thread(save_audio, audio_data, filepath)
