"""Integration tests for the codec tool runner using real subprocesses."""

import shutil
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from voicegen.conversion.tools import run_tool
from voicegen.errors import ConversionError

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("sh") is None, reason="requires a POSIX shell"),
]


class TestRunTool:
    """Test process execution, failure reporting and timeouts."""

    @pytest.mark.asyncio
    async def test_successful_command(self, tmp_path: Path) -> None:
        """Test that a zero exit completes without raising."""
        target = tmp_path / "out.txt"

        await run_tool(["sh", "-c", f"echo converted > {target}"], timeout=10)

        assert target.read_text().strip() == "converted"

    @pytest.mark.asyncio
    async def test_non_zero_exit_includes_stderr(self) -> None:
        """Test that a failing tool raises with its exit code and stderr."""
        with pytest.raises(ConversionError, match="code 3: Unknown encoder"):
            await run_tool(["sh", "-c", "echo 'Unknown encoder' >&2; exit 3"], timeout=10)

    @pytest.mark.asyncio
    async def test_missing_tool(self) -> None:
        """Test that a missing binary raises ConversionError."""
        with pytest.raises(ConversionError, match="Tool not found"):
            await run_tool(["voicegen-no-such-ffmpeg", "-version"], timeout=10)

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self) -> None:
        """Test that a hung tool is killed after the timeout."""
        with pytest.raises(ConversionError, match="timed out"):
            await run_tool(["sh", "-c", "sleep 10"], timeout=0.2)
