"""Pipeline locks for build and release mutual exclusion.

At most one run of a pipeline executes at a time. The lock is a JSON file
created with O_CREAT | O_EXCL, so two invocations can never both create it.
Every acquisition gets its own token: a second invocation fails even inside
the same process.

Locks left by dead processes, with an expired heartbeat, or left unreadable
by a writer that died are cleared. Clearing, releasing and heartbeats happen
under an flock on a sibling guard file and re-read the lock file first, so an
invocation acting on an outdated view never removes a lock someone else just
took.
"""

import contextlib
import fcntl
import logging
import os
import time
import uuid
from collections.abc import Iterator
from datetime import datetime, timedelta
from pathlib import Path

from pydantic import ValidationError

from ..errors import ConcurrencyViolation
from ..models import Lock

logger = logging.getLogger(__name__)

STALE_TIMEOUT_SECONDS = 3600  # 1 hour
UNREADABLE_GRACE_SECONDS = 10  # Time a writer gets to fill a fresh lock file
MAX_LOCK_RETRIES = 3  # Max retries when clearing stale locks


def lock_path(state_dir: Path, pipeline_id: str) -> Path:
    return state_dir / f"{pipeline_id}.lock"


def _is_pid_running(pid: int) -> bool:
    """Check if a process with given PID is running."""
    try:
        os.kill(pid, 0)  # Signal 0 only checks
        return True
    except OSError:
        return False


@contextlib.contextmanager
def _guard(state_dir: Path, pipeline_id: str) -> Iterator[None]:
    """Exclusive flock serializing changes to an existing lock file."""
    guard_path = state_dir / f"{pipeline_id}.lock.guard"
    with open(guard_path, "a") as f:
        fcntl.flock(f, fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(f, fcntl.LOCK_UN)


def _read_lock(path: Path) -> Lock | None:
    try:
        return Lock.model_validate_json(path.read_text())
    except FileNotFoundError:
        return None
    except (ValidationError, OSError) as e:
        logger.warning("Ignoring unreadable lock file %s: %s", path, e)
        return None


def get_current_lock(state_dir: Path, pipeline_id: str) -> Lock | None:
    """Get the current lock, or None if absent or unreadable."""
    return _read_lock(lock_path(state_dir, pipeline_id))


def is_stale_lock(lock: Lock, timeout_seconds: int = STALE_TIMEOUT_SECONDS) -> bool:
    """Check if lock is stale (PID dead or heartbeat too old)."""
    if not _is_pid_running(lock.pid):
        return True
    age = datetime.now() - lock.last_heartbeat
    return age > timedelta(seconds=timeout_seconds)


def is_locked(state_dir: Path, pipeline_id: str) -> bool:
    """True while a live run holds the pipeline lock."""
    lock = get_current_lock(state_dir, pipeline_id)
    return lock is not None and not is_stale_lock(lock)


def _is_abandoned(path: Path, grace_seconds: int = UNREADABLE_GRACE_SECONDS) -> bool:
    """An unreadable lock file older than the grace period."""
    try:
        age = time.time() - path.stat().st_mtime
    except FileNotFoundError:
        return False
    return age > grace_seconds


def _clear_stale(state_dir: Path, pipeline_id: str, seen: Lock | None) -> bool:
    """Remove the lock file if it is still the stale lock we saw.

    Args:
        state_dir: Path to .nupipe directory
        pipeline_id: Pipeline whose lock to clear
        seen: The stale lock as read earlier, or None if it was unreadable

    Returns:
        True if the file was removed
    """
    path = lock_path(state_dir, pipeline_id)
    with _guard(state_dir, pipeline_id):
        current = _read_lock(path)
        if seen is None:
            if current is not None or not _is_abandoned(path):
                return False
        elif current is None or current.token != seen.token:
            return False
        path.unlink(missing_ok=True)
        return True


def _try_atomic_create(path: Path, lock: Lock) -> bool:
    """Create the lock file; False if it already exists."""
    try:
        fd = os.open(str(path), os.O_CREAT | os.O_EXCL | os.O_WRONLY)
    except FileExistsError:
        return False
    try:
        os.write(fd, lock.model_dump_json(indent=2).encode())
    finally:
        os.close(fd)
    return True


def acquire_lock(state_dir: Path, pipeline_id: str, run_id: str) -> Lock:
    """Acquire the pipeline lock.

    Args:
        state_dir: Path to .nupipe directory
        pipeline_id: Pipeline to lock
        run_id: Run taking the lock

    Returns:
        The acquired lock; pass it to release_lock

    Raises:
        ConcurrencyViolation: If another invocation holds an active lock
    """
    state_dir.mkdir(parents=True, exist_ok=True)
    path = lock_path(state_dir, pipeline_id)
    lock = Lock(
        pid=os.getpid(),
        token=uuid.uuid4().hex,
        pipeline_id=pipeline_id,
        run_id=run_id,
    )

    for _ in range(MAX_LOCK_RETRIES):
        if _try_atomic_create(path, lock):
            logger.debug("Acquired %s lock for run %s", pipeline_id, run_id)
            return lock

        existing = get_current_lock(state_dir, pipeline_id)
        if existing is None:
            if _clear_stale(state_dir, pipeline_id, None):
                logger.warning("Cleared abandoned %s lock file", pipeline_id)
            continue

        if is_stale_lock(existing):
            if _clear_stale(state_dir, pipeline_id, existing):
                logger.warning(
                    "Cleared stale %s lock (PID %d, run %s)",
                    pipeline_id,
                    existing.pid,
                    existing.run_id,
                )
            continue

        raise ConcurrencyViolation(
            f"{pipeline_id} already running (PID {existing.pid}, run {existing.run_id})"
        )

    raise ConcurrencyViolation(f"Failed to acquire {pipeline_id} lock after multiple attempts")


def release_lock(state_dir: Path, lock: Lock) -> None:
    """Release the lock if it is still the one we acquired."""
    path = lock_path(state_dir, lock.pipeline_id)
    with _guard(state_dir, lock.pipeline_id):
        existing = _read_lock(path)
        if existing and existing.token == lock.token:
            path.unlink(missing_ok=True)


def update_heartbeat(state_dir: Path, lock: Lock) -> None:
    """Refresh the heartbeat of a lock we hold."""
    path = lock_path(state_dir, lock.pipeline_id)
    with _guard(state_dir, lock.pipeline_id):
        existing = _read_lock(path)
        if existing and existing.token == lock.token:
            existing.last_heartbeat = datetime.now()
            path.write_text(existing.model_dump_json(indent=2))


@contextlib.contextmanager
def pipeline_lock(state_dir: Path, pipeline_id: str, run_id: str) -> Iterator[Lock]:
    """Hold the pipeline lock for the duration of a with-block."""
    lock = acquire_lock(state_dir, pipeline_id, run_id)
    try:
        yield lock
    finally:
        release_lock(state_dir, lock)
