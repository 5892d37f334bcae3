"""System TTS provider using native OS text-to-speech commands.

This module provides offline speech synthesis using the built-in TTS
capabilities of the operating system (say on macOS, espeak on Linux).
Useful for drafts and for building prompt sets without API credentials.
"""

import asyncio
import logging
import platform
import shutil
import tempfile
from pathlib import Path

from ..errors import TTSAPIError, TTSAuthError
from .base import TTSProvider

logger = logging.getLogger(__name__)


async def _run(cmd: list[str]) -> bytes:
    """Run a command and return its stdout, raising TTSAPIError on failure."""
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE
        )
    except FileNotFoundError as e:
        raise TTSAPIError(f"Command not found: {cmd[0]}", None, e) from e

    try:
        stdout, stderr = await proc.communicate()
    except asyncio.CancelledError:
        # Scheduler timeouts cancel us; the child must not outlive the request
        proc.kill()
        await proc.wait()
        raise

    if proc.returncode != 0:
        raise TTSAPIError(
            f"{cmd[0]} failed with code {proc.returncode}: "
            f"{stderr.decode(errors='replace').strip()}"
        )
    return stdout


class SystemTTSProvider(TTSProvider):
    """System TTS provider using native OS commands.

    Note: Audio quality will be robotic compared to AI-powered voices.
    """

    name = "system"
    file_extension = "wav"

    def __init__(self) -> None:
        """Initialize system TTS provider and detect platform."""
        self.platform = platform.system()

        if self.platform not in ["Darwin", "Linux"]:
            raise TTSAuthError(f"Unsupported platform for system TTS: {self.platform}")

        self.espeak = shutil.which("espeak-ng") or shutil.which("espeak") or "espeak"

    def _required_tools(self) -> list[str]:
        if self.platform == "Darwin":
            return ["say", "afconvert"]
        return [self.espeak]

    async def verify(self) -> None:
        """Check that the platform TTS binaries are installed.

        Raises:
            TTSAuthError: If a required binary is not on PATH
        """
        missing = [tool for tool in self._required_tools() if shutil.which(tool) is None]
        if missing:
            raise TTSAuthError(
                f"System TTS tools not found: {', '.join(missing)}. "
                "Install espeak-ng (Linux) or use macOS."
            )

        logger.warning(
            "Using system TTS - quality will be robotic compared to AI voices. "
            "For production prompts, set ELEVENLABS_API_KEY and use --provider=elevenlabs"
        )

    async def synthesize(self, text: str, voice: str, language: str = "") -> bytes:
        """Convert text to speech using native OS commands.

        Args:
            text: Text to convert to speech
            voice: Voice name (platform-specific); "" or "default" uses language
            language: Language code, used as espeak voice when no voice is given

        Returns:
            Audio data as bytes in WAV format

        Raises:
            TTSAPIError: If a TTS command fails
            ValueError: If text is empty
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        if voice == "default":
            voice = ""

        with tempfile.TemporaryDirectory(prefix="voicegen-tts-") as tmp:
            output_path = Path(tmp) / "speech.wav"

            if self.platform == "Darwin":
                aiff_path = Path(tmp) / "speech.aiff"
                cmd = ["say", "-o", str(aiff_path)]
                if voice:
                    cmd.extend(["-v", voice])
                cmd.append(text.strip())
                await _run(cmd)

                # Convert AIFF to 16-bit little-endian WAV
                await _run(
                    ["afconvert", "-f", "WAVE", "-d", "LEI16", str(aiff_path), str(output_path)]
                )
            else:
                cmd = [self.espeak, "-w", str(output_path)]
                espeak_voice = voice or language.lower()
                if espeak_voice:
                    cmd.extend(["-v", espeak_voice])
                cmd.append(text.strip())
                await _run(cmd)

            try:
                return output_path.read_bytes()
            except OSError as e:
                raise TTSAPIError(f"System TTS produced no audio: {e}", None, e) from e

    async def list_voices(self) -> list[dict]:
        """List available system voices.

        Returns:
            List of voice dictionaries with id, name, and provider fields
        """
        voices = []

        try:
            if self.platform == "Darwin":
                output = await _run(["say", "-v", "?"])
                # Format: "Voice Name     Language  # Description"
                for line in output.decode(errors="replace").splitlines():
                    parts = line.split()
                    if parts and not line.startswith("#"):
                        voices.append(
                            {"id": parts[0], "name": parts[0], "provider": self.name}
                        )
            else:
                output = await _run([self.espeak, "--voices"])
                # Skip the header line; voice ID is in the second column
                for line in output.decode(errors="replace").splitlines()[1:]:
                    parts = line.split()
                    if len(parts) >= 2:
                        voices.append(
                            {"id": parts[1], "name": parts[1], "provider": self.name}
                        )
        except TTSAPIError as e:
            logger.warning(f"Failed to list system voices: {e}")

        # If no voices found, add a default
        if not voices:
            voices.append(
                {"id": "default", "name": "Default System Voice", "provider": self.name}
            )

        return voices
