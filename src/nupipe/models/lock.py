"""Release lock model.

Written to .nupipe/<pipeline>.lock while a release is running so that only
one release executes at a time.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class Lock(BaseModel):
    """Active pipeline lock.

    Attributes:
        pid: Process ID of the lock holder.
        token: Unique token of the holding invocation.
        pipeline_id: Pipeline the lock guards.
        run_id: Run holding the lock.
        started_at: When the lock was acquired.
        last_heartbeat: Last heartbeat update (for stale detection).
    """

    pid: int = Field(description="Process ID holding the lock")
    token: str = Field(description="Token of the holding invocation")
    pipeline_id: str = Field(description="Pipeline guarded by the lock")
    run_id: str = Field(description="Run holding the lock")
    started_at: datetime = Field(default_factory=datetime.now)
    last_heartbeat: datetime = Field(default_factory=datetime.now)
