"""Process management for FFmpeg execution."""

import asyncio
import copy
import logging
import re
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from ..config import get_config
from .command import FFmpegCommand

logger = logging.getLogger("ffchain")


@dataclass
class ProcessResult:
    """Result of an FFmpeg process execution."""
    success: bool
    return_code: int
    stdout: str
    stderr: str
    command: str
    output_path: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def output_size(self) -> Optional[int]:
        """Get output file size if available."""
        if self.output_path and Path(self.output_path).exists():
            return Path(self.output_path).stat().st_size
        return None


@dataclass
class ProgressInfo:
    """Progress information during FFmpeg execution."""
    frame: int = 0
    fps: float = 0.0
    time: float = 0.0
    bitrate: str = ""
    speed: str = ""
    size: int = 0
    progress_percent: float = 0.0


class ProcessManager:
    """Runs FFmpeg commands, optionally with progress tracking."""

    def __init__(self, ffmpeg_path: Optional[str] = None):
        """Initialize process manager.

        Args:
            ffmpeg_path: Path to ffmpeg executable. Defaults to
                ``ffmpeg.path`` from the configuration, then PATH.
        """
        self.ffmpeg_path = ffmpeg_path or get_config().ffmpeg.path or shutil.which("ffmpeg")
        if not self.ffmpeg_path:
            raise RuntimeError("ffmpeg not found in PATH")

    def _prepare(
        self, command: FFmpegCommand | list[str]
    ) -> tuple[list[str], str, Optional[str]]:
        if isinstance(command, FFmpegCommand):
            args = command.to_args()
            cmd_string = command.to_string()
            output_path = command.outputs[0] if command.outputs else None
        else:
            args = list(command)
            cmd_string = " ".join(args)
            output_path = None

        # Replace 'ffmpeg' with actual path
        if args and args[0] == "ffmpeg":
            args[0] = self.ffmpeg_path
        return args, cmd_string, output_path

    def execute(
        self,
        command: FFmpegCommand | list[str],
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        """Execute an FFmpeg command synchronously.

        Args:
            command: FFmpegCommand object or list of arguments.
            timeout: Maximum execution time in seconds. Defaults to
                ``ffmpeg.timeout`` from the configuration.

        Returns:
            ProcessResult with execution details.
        """
        args, cmd_string, output_path = self._prepare(command)
        if timeout is None:
            timeout = get_config().ffmpeg.timeout

        logger.debug("Running %s", cmd_string)
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("FFmpeg timed out after %ss: %s", timeout, cmd_string)
            return ProcessResult(
                success=False,
                return_code=-1,
                stdout="",
                stderr="Process timed out",
                command=cmd_string,
                error_message="Execution timed out",
            )
        except OSError as e:
            return ProcessResult(
                success=False,
                return_code=-1,
                stdout="",
                stderr=str(e),
                command=cmd_string,
                error_message=str(e),
            )

        success = result.returncode == 0
        error_message = None if success else self._parse_error(result.stderr)
        if not success:
            logger.warning("FFmpeg failed (%d): %s", result.returncode, error_message)

        return ProcessResult(
            success=success,
            return_code=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            command=cmd_string,
            output_path=output_path,
            error_message=error_message,
        )

    async def execute_async(
        self,
        command: FFmpegCommand | list[str],
        progress_callback: Optional[Callable[[ProgressInfo], None]] = None,
        total_duration: Optional[float] = None,
    ) -> ProcessResult:
        """Execute an FFmpeg command asynchronously with progress.

        Args:
            command: FFmpegCommand object or list of arguments.
            progress_callback: Callback for progress updates.
            total_duration: Total media duration for percentage calculation.

        Returns:
            ProcessResult with execution details.
        """
        args, cmd_string, output_path = self._prepare(command)

        # Add progress reporting
        args = [args[0], "-progress", "pipe:1", "-nostats"] + args[1:]

        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return ProcessResult(
                success=False,
                return_code=-1,
                stdout="",
                stderr=str(e),
                command=cmd_string,
                error_message=str(e),
            )

        stdout_data: list[str] = []
        stderr_data: list[str] = []

        async def read_stderr():
            while True:
                line = await process.stderr.readline()
                if not line:
                    break
                stderr_data.append(line.decode(errors="replace"))

        async def read_stdout():
            progress = ProgressInfo()
            while True:
                line = await process.stdout.readline()
                if not line:
                    break

                line_str = line.decode(errors="replace").strip()
                stdout_data.append(line_str)
                if "=" not in line_str:
                    continue

                key, value = line_str.split("=", 1)
                if key == "frame":
                    progress.frame = int(value)
                elif key == "fps":
                    progress.fps = float(value) if value else 0.0
                elif key == "out_time_ms" and value.isdigit():
                    progress.time = int(value) / 1_000_000
                    if total_duration and total_duration > 0:
                        progress.progress_percent = min(
                            100, (progress.time / total_duration) * 100
                        )
                elif key == "bitrate":
                    progress.bitrate = value
                elif key == "speed":
                    progress.speed = value
                elif key == "total_size":
                    progress.size = int(value) if value.isdigit() else 0
                elif key == "progress":
                    if value == "end":
                        progress.progress_percent = 100
                    if progress_callback:
                        progress_callback(progress)

        # Run both readers concurrently
        await asyncio.gather(read_stdout(), read_stderr())
        await process.wait()

        success = process.returncode == 0
        stderr_str = "".join(stderr_data)

        return ProcessResult(
            success=success,
            return_code=process.returncode,
            stdout="\n".join(stdout_data),
            stderr=stderr_str,
            command=cmd_string,
            output_path=output_path,
            error_message=None if success else self._parse_error(stderr_str),
        )

    def _parse_error(self, stderr: str) -> str:
        """Extract meaningful error message from ffmpeg stderr."""
        lines = stderr.strip().split("\n")

        error_patterns = [
            r"Error.*",
            r"Invalid.*",
            r"No such (file|filter|option).*",
            r".*not found.*",
            r"Option .* not found.*",
            r"Permission denied.*",
        ]

        for line in reversed(lines):
            for pattern in error_patterns:
                if re.search(pattern, line, re.IGNORECASE):
                    return line.strip()

        # Return last non-empty line if no pattern matched
        for line in reversed(lines):
            if line.strip():
                return line.strip()

        return "Unknown error"

    def dry_run(
        self,
        command: FFmpegCommand,
        timeout: float = 30,
    ) -> ProcessResult:
        """Validate an FFmpeg command without producing output.

        Runs the command with ``-f null -`` as output, so FFmpeg parses the
        filter graph and opens the inputs without writing files.

        Args:
            command: FFmpegCommand to validate.
            timeout: Maximum time for the dry run.

        Returns:
            ProcessResult; success=True means filters and inputs are valid.
        """
        dry_cmd = copy.copy(command)
        dry_cmd.outputs = ["-"]
        dry_cmd.output_opts = list(command.output_opts) + ["-f", "null"]

        return self.execute(dry_cmd, timeout=timeout)

    def filter_help(self, name: str) -> str:
        """Return the output of ``ffmpeg -h filter=NAME``.

        Returns an empty string if FFmpeg does not know the filter.
        """
        result = self.execute(["ffmpeg", "-hide_banner", "-h", f"filter={name}"])
        if not result.success:
            return ""
        return result.stdout
