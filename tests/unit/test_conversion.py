"""Unit tests for format presets, strategies and the conversion engine."""

import shlex
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from voicegen.conversion import ConversionEngine, GeneratedArtifact
from voicegen.conversion.presets import (
    PRESETS,
    asterisk_command,
    ffmpeg_command,
    get_preset,
)
from voicegen.conversion.strategies import (
    DirectTranscode,
    IntermediateTranscode,
    scoped_intermediate,
    strategies_for,
)


@pytest.fixture
def artifact(output_root: Path) -> GeneratedArtifact:
    primary = output_root / "ivr" / "welcome.mp3"
    primary.parent.mkdir(parents=True)
    primary.write_bytes(b"ID3" + b"\0" * 4096)
    return GeneratedArtifact(
        primary_path=primary, base_path=output_root / "ivr" / "welcome"
    )


class TestPresets:
    """Test preset lookup and command construction."""

    def test_known_formats(self) -> None:
        """Test that every telephony format has a preset."""
        assert set(PRESETS) == {"alaw", "ulaw", "sln", "sln16", "gsm", "g729"}

    def test_sln16_is_wideband(self) -> None:
        """Test that sln16 is 16 kHz while the others are narrowband."""
        assert get_preset("sln16").sample_rate == 16000
        assert get_preset("alaw").sample_rate == 8000

    def test_unknown_format_raises_key_error(self) -> None:
        """Test that unsupported formats are rejected."""
        with pytest.raises(KeyError, match="Unsupported format"):
            get_preset("opus")

    def test_ffmpeg_command(self) -> None:
        """Test the ffmpeg invocation for a direct transcode."""
        cmd = ffmpeg_command("ffmpeg", Path("a.mp3"), Path("a.ulaw"), get_preset("ulaw"))

        assert cmd[0] == "ffmpeg"
        assert cmd[cmd.index("-i") + 1] == "a.mp3"
        assert cmd[cmd.index("-ar") + 1] == "8000"
        assert cmd[cmd.index("-ac") + 1] == "1"
        assert cmd[cmd.index("-acodec") + 1] == "pcm_mulaw"
        assert cmd[cmd.index("-f") + 1] == "mulaw"
        assert cmd[-1] == "a.ulaw"
        assert "-y" in cmd

    def test_asterisk_command_uses_absolute_paths(self, tmp_path: Path) -> None:
        """Test that asterisk receives absolute paths in one -rx argument."""
        source = tmp_path / "in.wav"
        target = tmp_path / "out.g729"

        cmd = asterisk_command("asterisk", source, target)

        assert cmd == ["asterisk", "-rx", f'file convert "{source}" "{target}"']

    def test_asterisk_command_quotes_paths_with_spaces(self, tmp_path: Path) -> None:
        """Test that a directory name with a space stays one CLI argument."""
        source = tmp_path / "custom ivr" / ".welcome.g729.intermediate.wav"
        target = tmp_path / "custom ivr" / "welcome.g729"

        cmd = asterisk_command("asterisk", source, target)

        assert shlex.split(cmd[2]) == ["file", "convert", str(source), str(target)]


class TestStrategies:
    """Test ordered strategy selection."""

    def test_plain_format_has_single_strategy(self) -> None:
        """Test that ffmpeg-native formats only transcode directly."""
        strategies = strategies_for("alaw")

        assert len(strategies) == 1
        assert isinstance(strategies[0], DirectTranscode)

    def test_g729_falls_back_to_asterisk(self) -> None:
        """Test that g729 tries ffmpeg first, then ffmpeg plus asterisk."""
        strategies = strategies_for("g729")

        assert [s.name for s in strategies] == ["ffmpeg", "ffmpeg+asterisk"]
        assert isinstance(strategies[1], IntermediateTranscode)

    def test_scoped_intermediate_removed_on_error(self, tmp_path: Path) -> None:
        """Test that the scratch file is removed even when the body raises."""
        scratch = tmp_path / "scratch.wav"

        with pytest.raises(RuntimeError):
            with scoped_intermediate(scratch) as path:
                path.write_bytes(b"data")
                raise RuntimeError("asterisk crashed")

        assert not scratch.exists()


class TestConversionEngine:
    """Test concurrent per-format conversion."""

    @pytest.mark.asyncio
    async def test_all_formats_converted(self, artifact, fake_runner) -> None:
        """Test that every requested format gets a derived file."""
        engine = ConversionEngine(runner=fake_runner)

        outcomes = await engine.convert(artifact, ["alaw", "ulaw", "sln16"])

        assert [o.fmt for o in outcomes] == ["alaw", "ulaw", "sln16"]
        assert all(o.ok and o.strategy == "ffmpeg" for o in outcomes)
        for fmt in ("alaw", "ulaw", "sln16"):
            assert artifact.derived_path(fmt).stat().st_size > 0

    @pytest.mark.asyncio
    async def test_one_failing_format_isolated(self, artifact, fake_runner) -> None:
        """Test that a failing format does not affect its siblings."""
        fake_runner.ffmpeg_fails = {"ulaw"}
        engine = ConversionEngine(runner=fake_runner)

        results = await engine.convert(artifact, ["alaw", "ulaw", "gsm"])
        outcomes = {o.fmt: o for o in results}

        assert not outcomes["ulaw"].ok
        assert "Unknown encoder" in outcomes["ulaw"].error
        assert outcomes["alaw"].ok and outcomes["gsm"].ok
        assert not artifact.derived_path("ulaw").exists()

    @pytest.mark.asyncio
    async def test_g729_fallback_via_asterisk(self, artifact, fake_runner) -> None:
        """Test that g729 is produced by asterisk when ffmpeg cannot encode it."""
        fake_runner.ffmpeg_fails = {"g729"}
        engine = ConversionEngine(runner=fake_runner)

        [outcome] = await engine.convert(artifact, ["g729"])

        assert outcome.ok
        assert outcome.strategy == "ffmpeg+asterisk"
        assert artifact.derived_path("g729").stat().st_size > 0
        assert fake_runner.targets("asterisk") == ["welcome.g729"]
        # Scratch WAV is gone
        assert sorted(p.name for p in artifact.base_path.parent.iterdir()) == [
            "welcome.g729",
            "welcome.mp3",
        ]

    @pytest.mark.asyncio
    async def test_g729_fallback_in_directory_with_space(
        self, output_root, fake_runner
    ) -> None:
        """Test that the asterisk fallback handles paths containing spaces."""
        primary = output_root / "custom ivr" / "welcome.mp3"
        primary.parent.mkdir(parents=True)
        primary.write_bytes(b"ID3" + b"\0" * 4096)
        spaced = GeneratedArtifact(
            primary_path=primary, base_path=output_root / "custom ivr" / "welcome"
        )
        fake_runner.ffmpeg_fails = {"g729"}
        engine = ConversionEngine(runner=fake_runner)

        [outcome] = await engine.convert(spaced, ["g729"])

        assert outcome.ok
        assert spaced.derived_path("g729").stat().st_size > 0
        assert fake_runner.targets("asterisk") == ["welcome.g729"]

    @pytest.mark.asyncio
    async def test_g729_fails_when_all_strategies_fail(self, artifact, fake_runner) -> None:
        """Test that exhausting every strategy yields a failed outcome."""
        fake_runner.ffmpeg_fails = {"g729"}
        fake_runner.asterisk_fails = {"g729"}
        engine = ConversionEngine(runner=fake_runner)

        [outcome] = await engine.convert(artifact, ["g729"])

        assert not outcome.ok
        assert "All strategies failed" in outcome.error
        assert sorted(p.name for p in artifact.base_path.parent.iterdir()) == [
            "welcome.mp3"
        ]

    @pytest.mark.asyncio
    async def test_empty_output_counts_as_failure(self, artifact) -> None:
        """Test that a tool exiting 0 without writing output is a failure."""

        async def silent_runner(cmd: list[str], timeout: float | None = None) -> None:
            Path(cmd[-1]).touch()

        engine = ConversionEngine(runner=silent_runner)

        [outcome] = await engine.convert(artifact, ["alaw"])

        assert not outcome.ok
        assert not artifact.derived_path("alaw").exists()

    @pytest.mark.asyncio
    async def test_unknown_format_reported(self, artifact, fake_runner) -> None:
        """Test that an unsupported format fails without running any tool."""
        engine = ConversionEngine(runner=fake_runner)

        [outcome] = await engine.convert(artifact, ["opus"])

        assert not outcome.ok
        assert fake_runner.commands == []

    @pytest.mark.asyncio
    async def test_duplicate_formats_converted_once(self, artifact, fake_runner) -> None:
        """Test that repeated format names are deduplicated."""
        engine = ConversionEngine(runner=fake_runner)

        outcomes = await engine.convert(artifact, ["alaw", "alaw"])

        assert len(outcomes) == 1
        assert len(fake_runner.commands) == 1

    @pytest.mark.asyncio
    async def test_timeout_passed_to_runner(self, artifact) -> None:
        """Test that the configured timeout reaches every tool invocation."""
        seen: list[float | None] = []

        async def recording_runner(cmd: list[str], timeout: float | None = None) -> None:
            seen.append(timeout)
            Path(cmd[-1]).write_bytes(b"data")

        engine = ConversionEngine(timeout=7.5, runner=recording_runner)
        await engine.convert(artifact, ["alaw"])

        assert seen == [7.5]
