"""Subprocess wrapper around an external candidate program."""

from __future__ import annotations

import logging
import queue
import shlex
import subprocess
import threading
import time
from typing import IO, List, Optional, Sequence, Union

from .errors import CandidateError, EvaluationTimeout
from .model import PuzzleInstance
from .protocol import format_request, read_response

_logger = logging.getLogger(__name__)

_EOF = object()


def _pump_lines(stream: IO[str], sink: "queue.Queue[object]") -> None:
    try:
        for line in stream:
            sink.put(line)
    except ValueError:
        # Stream closed while reading during shutdown.
        pass
    finally:
        sink.put(_EOF)


def _forward_stderr(stream: IO[str], name: str) -> None:
    try:
        for line in stream:
            _logger.info("[%s] %s", name, line.rstrip("\n"))
    except ValueError:
        pass


class CandidateProcess:
    """Launches a candidate and exchanges one request/response with it.

    Every read is bounded by a deadline so a silent or hung candidate raises
    :class:`EvaluationTimeout` instead of blocking the evaluator.
    """

    def __init__(self, command: Union[str, Sequence[str]], *, timeout: float = 10.0):
        self.command: List[str] = shlex.split(command) if isinstance(command, str) else list(command)
        if not self.command:
            raise CandidateError("Empty candidate command.")
        if not timeout > 0:
            raise ValueError(f"Candidate timeout must be positive, got {timeout!r}")
        self.timeout = timeout
        self._proc: Optional[subprocess.Popen] = None
        self._lines: "queue.Queue[object]" = queue.Queue()
        self._deadline: Optional[float] = None

    def start(self) -> None:
        if self._proc is not None:
            return
        _logger.info("Starting candidate: %s", self.command)
        try:
            self._proc = subprocess.Popen(
                self.command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                bufsize=1,
            )
        except OSError as exc:
            raise CandidateError(f"Failed to start {self.command[0]}: {exc}") from exc
        threading.Thread(
            target=_pump_lines, args=(self._proc.stdout, self._lines), daemon=True
        ).start()
        threading.Thread(
            target=_forward_stderr, args=(self._proc.stderr, self.command[0]), daemon=True
        ).start()

    def _readline(self) -> Optional[str]:
        remaining = None
        if self._deadline is not None:
            remaining = max(0.0, self._deadline - time.monotonic())
        try:
            line = self._lines.get(timeout=remaining)
        except queue.Empty:
            raise EvaluationTimeout(
                f"Candidate did not answer within {self.timeout} seconds."
            ) from None
        if line is _EOF:
            return None
        return line  # type: ignore[return-value]

    def request(self, instance: PuzzleInstance) -> List[str]:
        """Send ``instance`` and return the raw item lines of the reply."""

        self.start()
        assert self._proc is not None and self._proc.stdin is not None
        try:
            self._proc.stdin.write(format_request(instance))
            self._proc.stdin.flush()
        except OSError as exc:
            raise CandidateError(f"Failed to send the request: {exc}") from exc
        self._deadline = time.monotonic() + self.timeout
        try:
            return read_response(self._readline, instance.height * instance.width)
        finally:
            self._deadline = None

    def close(self) -> None:
        if self._proc is None:
            return
        proc = self._proc
        self._proc = None
        if proc.stdin is not None:
            try:
                proc.stdin.close()
            except OSError:
                pass
        if proc.poll() is None:
            _logger.info("Terminating candidate PID=%s", proc.pid)
            proc.terminate()
            try:
                proc.wait(timeout=1.0)
            except subprocess.TimeoutExpired:
                _logger.warning("Candidate PID=%s ignored terminate, killing", proc.pid)
                proc.kill()
                proc.wait()

    def __enter__(self) -> "CandidateProcess":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["CandidateProcess"]
