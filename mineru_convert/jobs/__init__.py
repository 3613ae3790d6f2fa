"""Job lifecycle: submit, poll, terminal outcome."""

from mineru_convert.jobs.controller import JobController
from mineru_convert.jobs.models import ConversionJob, JobState, JobStatus

__all__ = [
    "ConversionJob",
    "JobController",
    "JobState",
    "JobStatus",
]
