"""Pydantic models for the job lifecycle."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict

from mineru_convert.transport.models import ExtractProgress, ExtractResult


class JobState(str, Enum):
    """The six states a remote batch job reports. DONE and FAILED are terminal."""

    WAITING = "waiting-file"
    PENDING = "pending"
    RUNNING = "running"
    CONVERTING = "converting"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.DONE, JobState.FAILED)


class JobStatus(BaseModel):
    """One observation of a job's state.

    result_locator is only meaningful for DONE, error_message only for FAILED.
    """

    model_config = ConfigDict(frozen=True)

    state: JobState
    result_locator: str | None = None
    error_message: str | None = None
    progress: ExtractProgress | None = None

    @classmethod
    def from_extract_result(cls, entry: ExtractResult) -> JobStatus:
        """Build a status from the wire entry. Raises ValueError on an unknown state."""
        state = JobState(entry.state)
        return cls(
            state=state,
            result_locator=entry.full_zip_url if state is JobState.DONE else None,
            error_message=entry.err_msg if state is JobState.FAILED else None,
            progress=entry.extract_progress,
        )


class ConversionJob(BaseModel):
    """A submitted job. Lives only for the duration of one conversion."""

    model_config = ConfigDict(frozen=True)

    batch_id: str
    file_name: str
    submitted_at: datetime
