"""Run external media tools as child processes of the event loop."""

from __future__ import annotations

import asyncio
import typing as t

from tubely.core.provider import LoggingProvider


class ToolError(Exception):
    """An external tool could not be run, timed out, or exited non-zero."""

    def __init__(self, argv: t.Sequence[str], reason: str, returncode: int | None = None, stderr: str = ""):
        self.argv = tuple(argv)
        self.reason = reason
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"{self.argv[0]}: {reason}")


class ToolResult(t.NamedTuple):
    returncode: int
    stdout: bytes
    stderr: str


async def run_tool(argv: t.Sequence[str], timeout: float) -> ToolResult:
    """Run ``argv`` to completion and capture its output.

    The child is killed if it outlives ``timeout`` seconds.

    Raises:
        ToolError: the binary is missing, the timeout expired, or the exit
            status was non-zero
    """
    logger = LoggingProvider.get_logger()
    logger.debug("running tool", extra={"argv": list(argv), "timeout": timeout})

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ToolError(argv, f"could not start: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise ToolError(argv, f"timed out after {timeout}s") from None

    result = ToolResult(returncode=t.cast(int, proc.returncode), stdout=stdout, stderr=stderr.decode(errors="replace"))
    if result.returncode != 0:
        raise ToolError(argv, f"exited with status {result.returncode}", result.returncode, result.stderr)
    return result
