"""Host evaluators: run source text in a separate interpreter process."""

from __future__ import annotations

import asyncio
import logging
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from webide.core.errors import EvaluationFault

logger = logging.getLogger(__name__)

Emit = Callable[[str], None]

# Lines like "ValueError: boom", "Error: boom", "Uncaught TypeError: x is not a function"
_EXCEPTION_LINE = re.compile(r"^(?:Uncaught\s+)?[A-Za-z_$][\w$.]*(?:Error|Exception|Interrupt)\b(?::.*)?$")

_CHUNK_SIZE = 1 << 16


class HostEvaluator(ABC):
    """Evaluates source text, emitting every printed line in order.

    Raises EvaluationFault when the evaluated code fails; lines emitted
    before the failure stay emitted.
    """

    language: str = "script"

    @abstractmethod
    async def evaluate(self, source: str, emit: Emit) -> None:
        raise NotImplementedError


def extract_error(stderr: str, returncode: Optional[int]) -> str:
    """Pick the exception line out of an interpreter's stderr."""
    lines = [line.strip() for line in stderr.splitlines() if line.strip()]
    matches = [line for line in lines if _EXCEPTION_LINE.match(line)]
    if matches:
        return matches[-1]
    if lines:
        return lines[-1]
    return f"Process exited with status {returncode}"


async def _emit_lines(stream: asyncio.StreamReader, emit: Emit) -> None:
    """Emit every line of ``stream``; lines are not bounded in length."""
    pending = bytearray()
    while True:
        chunk = await stream.read(_CHUNK_SIZE)
        if not chunk:
            break
        pending.extend(chunk)
        start = 0
        while True:
            end = pending.find(b"\n", start)
            if end < 0:
                break
            emit(_decode_line(pending[start:end]))
            start = end + 1
        del pending[:start]
    if pending:
        emit(_decode_line(pending))


def _decode_line(raw: bytes | bytearray) -> str:
    return raw.decode("utf-8", errors="replace").rstrip("\r")


class SubprocessEvaluator(HostEvaluator):
    """
    Runs the source in its own interpreter process.

    The source is written to ``main<suffix>`` inside a fresh temporary
    directory, which is also the working directory; stdin is closed. stdout
    lines are emitted as they arrive, stderr is kept for the error message.
    The process is killed when ``timeout`` elapses or reading its output fails.
    """

    def __init__(
        self,
        command: Sequence[str],
        *,
        language: str,
        suffix: str,
        timeout: Optional[float] = 10.0,
        env: Optional[Dict[str, str]] = None,
    ):
        if not command:
            raise ValueError("command must not be empty")
        self.command: List[str] = list(command)
        self.language = language
        self.suffix = suffix
        self.timeout = timeout
        self.env = env

    def __repr__(self) -> str:
        return f"SubprocessEvaluator(command={self.command!r}, language={self.language!r})"

    async def evaluate(self, source: str, emit: Emit) -> None:
        with tempfile.TemporaryDirectory(prefix="webide-run-") as workdir:
            script = Path(workdir) / f"main{self.suffix}"
            script.write_text(source, encoding="utf-8")
            try:
                process = await asyncio.create_subprocess_exec(
                    *self.command,
                    str(script),
                    cwd=workdir,
                    env=self.env,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except OSError as exc:
                raise EvaluationFault(f"Cannot start {self.command[0]}: {exc.strerror or exc}") from exc

            logger.debug("Started %s (pid %s)", self.command[0], process.pid)
            try:
                stderr = await asyncio.wait_for(self._communicate(process, emit), timeout=self.timeout)
            except asyncio.TimeoutError:
                raise EvaluationFault(f"Execution timed out after {self.timeout:g}s") from None
            finally:
                if process.returncode is None:
                    await self._kill(process)

        if process.returncode != 0:
            message = extract_error(stderr.decode("utf-8", errors="replace"), process.returncode)
            raise EvaluationFault(message)

    @staticmethod
    async def _communicate(process: asyncio.subprocess.Process, emit: Emit) -> bytes:
        stdout, stderr = process.stdout, process.stderr
        if stdout is None or stderr is None:
            raise EvaluationFault("Process output is not captured")
        stderr_task = asyncio.ensure_future(stderr.read())
        try:
            await _emit_lines(stdout, emit)
            await process.wait()
            return await stderr_task
        finally:
            if not stderr_task.done():
                stderr_task.cancel()

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()


__all__ = ["HostEvaluator", "SubprocessEvaluator", "Emit", "extract_error"]
