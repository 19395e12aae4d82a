"""
Command runner -- every gpg and git invocation goes through here.

Two modes:

    run_async()     queue a job, get a job id back immediately.
                    One worker thread drains the queue in FIFO order and
                    publishes a JobResult on the completion channel.
    run_blocking()  run in the caller's thread and return the result.

Exit codes are reported, never raised. Callers decide what a non-zero
exit means; most of them treat it as advisory.

Text is UTF-8 with surrogateescape, so a binary secret decrypted here
is fed back to gpg byte for byte.
"""

from __future__ import annotations

import itertools
import logging
import queue
import subprocess
import threading
import time
from pathlib import Path
from typing import Optional

from .models import CommandJob, CommandResult, JobKind, JobResult

logger = logging.getLogger("skpass.runner")

EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = 124
EXIT_FAILED = 1


class CommandRunner:
    """Runs external programs for a password store.

    Args:
        workdir: Working directory for spawned processes (the store root).
        timeout: Optional per-process timeout in seconds.
    """

    def __init__(self, workdir: Optional[Path] = None, timeout: Optional[float] = None):
        self.workdir = workdir
        self.timeout = timeout
        self._ids = itertools.count(1)
        self._submissions: queue.Queue[Optional[CommandJob]] = queue.Queue()
        self._completions: queue.Queue[JobResult] = queue.Queue()
        self._pending: dict[int, JobResult] = {}
        self._lock = threading.Lock()
        self._worker: Optional[threading.Thread] = None

    def run_async(
        self,
        kind: JobKind,
        executable: str,
        args: list[str],
        input: Optional[str] = None,
        read_stdout: bool = True,
        read_stderr: bool = True,
    ) -> int:
        """Queue a command without waiting for it.

        Args:
            kind: Job category carried on the completion.
            executable: Program to run.
            args: Argument vector (without the program).
            input: Text fed on standard input.
            read_stdout: Keep captured stdout on the completion.
            read_stderr: Keep captured stderr on the completion.

        Returns:
            The job id that identifies the completion.
        """
        job = CommandJob(
            job_id=next(self._ids),
            kind=kind,
            executable=executable,
            args=list(args),
            input=input,
            read_stdout=read_stdout,
            read_stderr=read_stderr,
        )
        logger.debug("queue #%d %s %s", job.job_id, executable, " ".join(args))
        self._ensure_worker()
        self._submissions.put(job)
        return job.job_id

    def run_blocking(
        self, executable: str, args: list[str], input: Optional[str] = None
    ) -> CommandResult:
        """Run a command and wait for it to exit."""
        logger.debug("run %s %s", executable, " ".join(args))
        return self._execute(executable, list(args), input)

    def wait(self, job_id: int, timeout: Optional[float] = None) -> JobResult:
        """Block until the completion for ``job_id`` arrives.

        Completions for other jobs received meanwhile are kept for
        later ``wait()`` or ``next_completion()`` calls.

        Raises:
            queue.Empty: If the timeout elapses first.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                if job_id in self._pending:
                    return self._pending.pop(job_id)
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            result = self._completions.get(timeout=remaining)
            if result.job_id == job_id:
                return result
            with self._lock:
                self._pending[result.job_id] = result

    def next_completion(self, timeout: Optional[float] = None) -> Optional[JobResult]:
        """Return the oldest undelivered completion, or None on timeout."""
        with self._lock:
            if self._pending:
                first = min(self._pending)
                return self._pending.pop(first)
        try:
            return self._completions.get(timeout=timeout)
        except queue.Empty:
            return None

    def join(self) -> list[JobResult]:
        """Wait for every queued job and return all undelivered completions."""
        self._submissions.join()
        results = []
        while True:
            result = self.next_completion(timeout=0)
            if result is None:
                return sorted(results, key=lambda r: r.job_id)
            results.append(result)

    def shutdown(self) -> None:
        """Stop the worker after it finishes the jobs already queued."""
        with self._lock:
            worker = self._worker
        if worker is None or not worker.is_alive():
            return
        self._submissions.put(None)
        worker.join(timeout=5)

    def _ensure_worker(self) -> None:
        with self._lock:
            if self._worker is not None and self._worker.is_alive():
                return
            self._worker = threading.Thread(
                target=self._drain, name="skpass-runner", daemon=True
            )
            self._worker.start()

    def _drain(self) -> None:
        while True:
            job = self._submissions.get()
            try:
                if job is None:
                    return
                try:
                    result = self._execute(job.executable, job.args, job.input)
                except Exception as exc:
                    logger.exception("job #%d %s failed", job.job_id, job.executable)
                    result = CommandResult(exit_code=EXIT_FAILED, stderr=str(exc))
                self._completions.put(
                    JobResult(
                        job_id=job.job_id,
                        kind=job.kind,
                        exit_code=result.exit_code,
                        stdout=result.stdout if job.read_stdout else "",
                        stderr=result.stderr if job.read_stderr else "",
                    )
                )
            finally:
                self._submissions.task_done()

    def _execute(
        self, executable: str, args: list[str], input: Optional[str]
    ) -> CommandResult:
        cwd = str(self.workdir) if self.workdir and self.workdir.is_dir() else None
        try:
            proc = subprocess.run(
                [executable, *args],
                input=input,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="surrogateescape",
                check=False,
                cwd=cwd,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.error("%s timed out after %ss", executable, self.timeout)
            return CommandResult(exit_code=EXIT_TIMEOUT, stderr=f"{executable}: timed out")
        except OSError as exc:
            logger.error("Could not run %s: %s", executable, exc)
            return CommandResult(exit_code=EXIT_NOT_FOUND, stderr=str(exc))

        if proc.returncode != 0:
            logger.debug(
                "%s exited %d: %s", executable, proc.returncode, (proc.stderr or "").strip()
            )
        return CommandResult(
            exit_code=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )
