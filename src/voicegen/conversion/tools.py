"""Out-of-process codec tool runner."""

import asyncio
import logging

from ..errors import ConversionError

logger = logging.getLogger(__name__)

STDERR_TAIL = 500


async def run_tool(cmd: list[str], timeout: float | None = None) -> None:
    """Run an external codec tool to completion.

    Args:
        cmd: Program and arguments
        timeout: Seconds before the process is killed (None waits forever)

    Raises:
        ConversionError: If the tool is missing, exits non-zero or times out
    """
    logger.debug(f"Running: {' '.join(cmd)}")

    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE
        )
    except FileNotFoundError as e:
        raise ConversionError(f"Tool not found: {cmd[0]}", original_error=e) from e
    except OSError as e:
        raise ConversionError(
            f"Failed to start {cmd[0]}: {e}", original_error=e
        ) from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
    except TimeoutError as e:
        proc.kill()
        await proc.wait()
        raise ConversionError(
            f"{cmd[0]} timed out after {timeout}s", original_error=e
        ) from e

    if proc.returncode != 0:
        detail = stderr.decode(errors="replace").strip()[-STDERR_TAIL:]
        raise ConversionError(f"{cmd[0]} failed with code {proc.returncode}: {detail}")

    if stderr:
        logger.debug(f"{cmd[0]} stderr: {stderr.decode(errors='replace').strip()}")
