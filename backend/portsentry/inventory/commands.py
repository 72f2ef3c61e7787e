"""
Command execution gateway.

Runs external tools with a bounded timeout and output size, and gates privileged
commands behind an effective-uid check.
"""

import logging
import os
import selectors
import shlex
import shutil
import subprocess
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .exceptions import ExecutionError, PrivilegeRequiredError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_OUTPUT_LIMIT = 10 * 1024 * 1024
READ_CHUNK_SIZE = 64 * 1024


@dataclass
class CommandResult:
    """Trimmed output of a successful command."""

    stdout: str
    stderr: str


class CommandRunner:
    """Execute external commands and normalize their outcome."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        output_limit: int = DEFAULT_OUTPUT_LIMIT,
    ):
        """
        Initialize command runner.

        Args:
            timeout: Default per-command timeout in seconds
            output_limit: Maximum bytes captured from each of stdout and stderr
        """
        self.timeout = timeout
        self.output_limit = output_limit

    def execute(self, command: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        """
        Run a command and return its trimmed output.

        Output is read from pipes while the command runs. A command that writes more
        than ``output_limit`` bytes to either stream is killed at once, so a runaway
        process cannot grow memory past the cap.

        Args:
            command: Program and arguments (never passed through a shell)
            timeout: Seconds before the command is killed; defaults to the runner's

        Returns:
            CommandResult with stdout and stderr

        Raises:
            ExecutionError: On non-zero exit, spawn failure, timeout or output overflow
        """
        argv: List[str] = [str(arg) for arg in command]
        cmd_str = shlex.join(argv)
        timeout = self.timeout if timeout is None else timeout
        logger.debug(f"Executing: {cmd_str}")

        try:
            process = subprocess.Popen(
                argv, stdin=subprocess.DEVNULL, stdout=subprocess.PIPE, stderr=subprocess.PIPE
            )
        except FileNotFoundError as e:
            missing = e.filename or argv[0]
            raise self._failure(cmd_str, "unknown", f"Command not found: {missing}")
        except OSError as e:
            raise self._failure(cmd_str, "unknown", str(e))

        try:
            stdout, stderr = self._collect_output(process, cmd_str, timeout)
        finally:
            if process.poll() is None:
                process.kill()
                process.wait()
            process.stdout.close()
            process.stderr.close()

        if process.returncode != 0:
            message = stderr or f"exited with status {process.returncode}"
            raise self._failure(cmd_str, process.returncode, message)

        return CommandResult(stdout=stdout, stderr=stderr)

    def command_exists(self, name: str) -> bool:
        """Check whether an executable can be resolved on PATH. Never raises."""
        try:
            return shutil.which(name) is not None
        except (OSError, ValueError):
            return False

    def has_elevated_privileges(self) -> bool:
        """Check whether this process runs as root. Evaluated on every call."""
        geteuid = getattr(os, "geteuid", None)
        if geteuid is None:
            return False
        return geteuid() == 0

    def execute_elevated(
        self, command: Sequence[str], timeout: Optional[float] = None
    ) -> CommandResult:
        """
        Run a command that requires root.

        Raises:
            PrivilegeRequiredError: Before running anything, if not root
            ExecutionError: If the command itself fails
        """
        if not self.has_elevated_privileges():
            raise PrivilegeRequiredError()
        return self.execute(command, timeout=timeout)

    def _collect_output(self, process: subprocess.Popen, cmd_str: str, timeout: float):
        """Drain both pipes until EOF, enforcing the deadline and the output cap."""
        deadline = time.monotonic() + timeout
        buffers = {process.stdout: bytearray(), process.stderr: bytearray()}
        streams = {process.stdout: "stdout", process.stderr: "stderr"}

        with selectors.DefaultSelector() as selector:
            for pipe in buffers:
                selector.register(pipe, selectors.EVENT_READ)

            while selector.get_map():
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise self._timed_out(cmd_str, timeout)
                for key, _ in selector.select(remaining):
                    chunk = os.read(key.fd, READ_CHUNK_SIZE)
                    if not chunk:
                        selector.unregister(key.fileobj)
                        continue
                    buffer = buffers[key.fileobj]
                    buffer.extend(chunk)
                    if len(buffer) > self.output_limit:
                        stream = streams[key.fileobj]
                        raise self._failure(
                            cmd_str, "unknown", f"{stream} exceeded {self.output_limit} bytes"
                        )

        try:
            process.wait(timeout=max(deadline - time.monotonic(), 0))
        except subprocess.TimeoutExpired:
            raise self._timed_out(cmd_str, timeout)

        return (
            buffers[process.stdout].decode("utf-8", errors="replace").strip(),
            buffers[process.stderr].decode("utf-8", errors="replace").strip(),
        )

    def _timed_out(self, cmd_str: str, timeout: float) -> ExecutionError:
        return self._failure(cmd_str, "unknown", f"Command timed out after {timeout}s")

    @staticmethod
    def _failure(cmd_str: str, exit_code, message: str) -> ExecutionError:
        logger.warning(f"Command failed ({exit_code}): {cmd_str}: {message}")
        return ExecutionError(cmd_str, exit_code, message)
