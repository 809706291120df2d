"""Cancellable deadlines and bounded subprocess execution.

A ``Deadline`` combines a monotonic expiry with a cancellation flag. Checks
derive a child deadline per tool invocation; cancelling the run-level
deadline is observed by every child, and ``run_command`` kills the process
group of any subprocess whose deadline expires or is cancelled.
"""

import os
import signal
import subprocess
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path

POLL_INTERVAL_SECONDS = 0.1


class Deadline:
    """A point in time after which work must stop, plus a cancel switch.

    Example:
        run_deadline = Deadline(timeout=300)
        check_deadline = run_deadline.child(30)
        result = run_command(["make", "lint"], cwd=root, deadline=check_deadline)
        if result.timed_out:
            ...
    """

    def __init__(
        self,
        timeout: float | None = None,
        parent: "Deadline | None" = None,
    ):
        """Initialize the deadline.

        Args:
            timeout: Seconds from now until expiry; None for no expiry of
                its own (a parent's expiry still applies).
            parent: Deadline whose expiry and cancellation this one inherits.
        """
        self.timeout = timeout
        self._parent = parent
        self._cancelled = threading.Event()

        expires_at = time.monotonic() + timeout if timeout is not None else None
        if parent is not None and parent.expires_at is not None:
            expires_at = (
                parent.expires_at
                if expires_at is None
                else min(expires_at, parent.expires_at)
            )
        self.expires_at: float | None = expires_at

    def child(self, timeout: float | None) -> "Deadline":
        """Derive a deadline that expires no later than this one."""
        return Deadline(timeout=timeout, parent=self)

    def cancel(self) -> None:
        """Cancel this deadline and every deadline derived from it."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    def remaining(self) -> float | None:
        """Seconds left, 0.0 once expired, None when unbounded."""
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0.0

    @property
    def done(self) -> bool:
        """True once the deadline has expired or was cancelled."""
        return self.cancelled or self.expired


@dataclass
class CommandResult:
    """Outcome of a bounded subprocess invocation."""

    args: list[str]
    returncode: int | None
    output: str = ""
    timed_out: bool = False
    cancelled: bool = False
    duration: float = 0.0
    cwd: Path | None = field(default=None, repr=False)

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out and not self.cancelled

    @property
    def command(self) -> str:
        return " ".join(self.args)


def _poll_timeout(deadline: Deadline) -> float:
    remaining = deadline.remaining()
    if remaining is None:
        return POLL_INTERVAL_SECONDS
    return min(POLL_INTERVAL_SECONDS, remaining)


def _kill(process: subprocess.Popen) -> None:
    """Kill the process and anything it spawned (make runs child tools)."""
    if os.name == "posix":
        try:
            os.killpg(process.pid, signal.SIGKILL)
            return
        except (ProcessLookupError, PermissionError):
            pass
    process.kill()


def run_command(
    args: list[str],
    cwd: Path | str,
    deadline: Deadline,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """Run a command until it exits or ``deadline`` is done.

    Standard output and standard error are captured together as one text
    blob. Never blocks past the deadline: on expiry or cancellation the
    process group is killed and the partial output returned.

    Raises:
        FileNotFoundError: The executable does not exist.
    """
    start = time.monotonic()

    if deadline.done:
        return CommandResult(
            args=list(args),
            returncode=None,
            timed_out=not deadline.cancelled,
            cancelled=deadline.cancelled,
            cwd=Path(cwd),
        )

    process = subprocess.Popen(
        args,
        cwd=cwd,
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        stdin=subprocess.DEVNULL,
        text=True,
        errors="replace",
        start_new_session=os.name == "posix",
    )

    timed_out = False
    cancelled = False
    while True:
        try:
            output, _ = process.communicate(timeout=_poll_timeout(deadline))
            break
        except subprocess.TimeoutExpired:
            if deadline.cancelled:
                cancelled = True
            elif deadline.expired:
                timed_out = True
            else:
                continue
            _kill(process)
            output, _ = process.communicate()
            break

    return CommandResult(
        args=list(args),
        returncode=process.returncode,
        output=output or "",
        timed_out=timed_out,
        cancelled=cancelled,
        duration=time.monotonic() - start,
        cwd=Path(cwd),
    )
