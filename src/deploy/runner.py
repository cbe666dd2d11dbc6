"""Run the deployment script and stream its output into the log.

The script runs under a shell with no arguments and the service's own
environment. Both output pipes are drained line by line while the process
runs, so a chatty script never blocks on a full pipe buffer.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

import structlog

from ..exceptions import ScriptStartError
from ..utils.constants import DEFAULT_SHELL, STDERR_PREFIX, STDOUT_PREFIX

logger = structlog.get_logger()

# Longest single output line the drains will buffer
STREAM_LIMIT = 1024 * 1024


@dataclass
class DeploymentResult:
    """Outcome of one deployment script run."""

    script_path: str
    returncode: int
    stdout_lines: int = 0
    stderr_lines: int = 0
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


class DeploymentRunner:
    """Launches the deployment script as a child process."""

    def __init__(self, script_path: str, shell: str = DEFAULT_SHELL):
        self.script_path = script_path
        self.shell = shell

    async def run(self) -> DeploymentResult:
        """Run the script to completion, logging every output line.

        Raises:
            ScriptStartError: the shell could not be started
        """
        loop = asyncio.get_running_loop()
        start_time = loop.time()

        logger.info("Executing deploy script", script_path=self.script_path)
        try:
            process = await asyncio.create_subprocess_exec(
                self.shell,
                self.script_path,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=STREAM_LIMIT,
            )
        except OSError as e:
            raise ScriptStartError(
                f"Could not start deploy script: {e}", script_path=self.script_path
            ) from e

        logger.debug("Waiting for output", pid=process.pid)
        stdout_lines, stderr_lines, returncode = await asyncio.gather(
            _drain(process.stdout, "stdout", STDOUT_PREFIX),
            _drain(process.stderr, "stderr", STDERR_PREFIX),
            process.wait(),
        )

        result = DeploymentResult(
            script_path=self.script_path,
            returncode=returncode,
            stdout_lines=stdout_lines,
            stderr_lines=stderr_lines,
            duration_seconds=loop.time() - start_time,
        )

        if result.succeeded:
            logger.info(
                "Deploy script finished",
                script_path=self.script_path,
                duration_seconds=round(result.duration_seconds, 2),
            )
        else:
            logger.error(
                "Deploy script failed",
                script_path=self.script_path,
                returncode=returncode,
                duration_seconds=round(result.duration_seconds, 2),
            )
        return result


async def _drain(
    stream: Optional[asyncio.StreamReader], name: str, prefix: str
) -> int:
    """Log each line of a process pipe until EOF, returning the line count."""
    if stream is None:
        return 0

    count = 0
    while True:
        try:
            line = await stream.readline()
        except ValueError:
            # readline already discarded the oversized chunk
            logger.warning("Skipping overlong output line", stream=name)
            continue
        if not line:
            break

        text = line.decode("utf-8", errors="replace").rstrip("\r\n")
        logger.info("Deploy script output", stream=name, prefix=prefix, line=text)
        count += 1
    return count
