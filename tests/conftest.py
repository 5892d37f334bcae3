"""Pytest configuration and fixtures for voicegen tests."""

import json
import shlex
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from voicegen.config import VoicegenConfig, parse_config
from voicegen.errors import ConversionError, TTSAPIError
from voicegen.providers.base import TTSProvider

# Comfortably above the default 1024-byte validity threshold
FAKE_AUDIO_SIZE = 4096


class FakeProvider(TTSProvider):
    """In-memory provider that records every synthesis call."""

    name = "fake"
    file_extension = "wav"

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.calls: list[tuple[str, str, str]] = []
        self.fail_on = fail_on or set()
        self.verified = False

    async def verify(self) -> None:
        self.verified = True

    async def synthesize(self, text: str, voice: str, language: str = "") -> bytes:
        self.calls.append((text, voice, language))
        if text in self.fail_on:
            raise TTSAPIError(f"Synthesis rejected: {text}", 500)
        return b"RIFF" + text.encode("utf-8").ljust(FAKE_AUDIO_SIZE, b"\0")

    async def list_voices(self) -> list[dict]:
        return [{"id": "fake-voice", "name": "Fake", "provider": self.name}]


class FakeToolRunner:
    """Stand-in for run_tool that writes the files ffmpeg/asterisk would.

    Formats listed in ``ffmpeg_fails`` make ffmpeg exit non-zero for that
    target; ``asterisk_fails`` does the same for asterisk.
    """

    def __init__(
        self, ffmpeg_fails: set[str] | None = None, asterisk_fails: set[str] | None = None
    ) -> None:
        self.ffmpeg_fails = ffmpeg_fails or set()
        self.asterisk_fails = asterisk_fails or set()
        self.commands: list[list[str]] = []

    async def __call__(self, cmd: list[str], timeout: float | None = None) -> None:
        self.commands.append(cmd)

        if cmd[0] == "asterisk":
            _, _, source, target = shlex.split(cmd[2])
            if Path(target).suffix.lstrip(".") in self.asterisk_fails:
                raise ConversionError("asterisk failed with code 1: no translator")
            Path(target).write_bytes(Path(source).read_bytes())
            return

        target = Path(cmd[-1])
        fmt = target.suffix.lstrip(".")
        if fmt in self.ffmpeg_fails:
            raise ConversionError(f"ffmpeg failed with code 1: Unknown encoder '{fmt}'")
        target.write_bytes(b"converted:" + fmt.encode() * 64)

    def targets(self, tool: str) -> list[str]:
        """Target file names written by one tool, in call order."""
        names = []
        for cmd in self.commands:
            if cmd[0] != tool:
                continue
            target = shlex.split(cmd[2])[-1] if tool == "asterisk" else cmd[-1]
            names.append(Path(target).name)
        return names


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's voicegen environment out of every test."""
    for name in (
        "VOICEGEN_PROVIDER",
        "VOICEGEN_VOICE",
        "VOICEGEN_LANGUAGE",
        "VOICEGEN_OUTPUT_DIR",
        "VOICEGEN_MANIFEST",
        "VOICEGEN_MAX_RPS",
        "VOICEGEN_CONFIG",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def fake_runner() -> FakeToolRunner:
    return FakeToolRunner()


@pytest.fixture
def output_root(tmp_path: Path) -> Path:
    root = tmp_path / "generatedFiles"
    root.mkdir()
    return root


@pytest.fixture
def make_config(output_root: Path) -> Callable[..., VoicegenConfig]:
    """Factory building a validated config rooted at the test output directory."""

    def _make(**sections: dict[str, Any]) -> VoicegenConfig:
        data: dict[str, Any] = {
            "tts": {"provider": "system", "voice": "Camila", "language": "pt-BR"},
            "scheduler": {"max_requests_per_second": 1000},
            "output": {"root": str(output_root)},
            "package": {"enabled": False},
        }
        for name, values in sections.items():
            data.setdefault(name, {}).update(values)
        return parse_config(data, env={})

    return _make


@pytest.fixture
def write_manifest(tmp_path: Path) -> Callable[[list[dict[str, Any]]], Path]:
    """Write a manifest JSON file and return its path."""

    def _write(entries: list[dict[str, Any]], name: str = "manifest.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(entries), encoding="utf-8")
        return path

    return _write
