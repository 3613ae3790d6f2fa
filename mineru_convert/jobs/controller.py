"""JobController — drives one remote conversion job from submit to a terminal state."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone

import httpx

from mineru_convert.config.models import PollingConfig
from mineru_convert.errors import (
    JobCancelled,
    MissingLocator,
    RemoteProcessingFailed,
    ServiceUnavailable,
    Timeout,
    TransferFailed,
    TransportError,
    UploadRejected,
)
from mineru_convert.jobs.models import ConversionJob, JobState, JobStatus
from mineru_convert.transport.base import TransportClient
from mineru_convert.transport.models import UploadLocation

logger = logging.getLogger(__name__)


class JobController:
    """Submits documents and polls their batch job until it finishes.

    Holds no per-job state: everything about a job in flight lives in the
    arguments and locals of ``await_completion``, so one controller can
    serve concurrent conversions.
    """

    def __init__(
        self,
        transport: TransportClient,
        polling: PollingConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.transport = transport
        self.polling = polling or PollingConfig()
        self._clock = clock

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit(self, file_bytes: bytes, file_name: str) -> ConversionJob:
        """Request an upload location and PUT the document bytes there."""
        if not self.transport.is_enabled():
            raise ServiceUnavailable(
                "MinerU service is not enabled or not configured properly"
            )

        location = await self._request_upload_location(file_name)

        try:
            await self.transport.upload_bytes(location.upload_url, file_bytes)
        except httpx.HTTPStatusError as e:
            raise TransferFailed(
                f"File upload failed: {e.response.reason_phrase}",
                batch_id=location.batch_id,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"File upload failed: {e}", batch_id=location.batch_id
            ) from e

        job = ConversionJob(
            batch_id=location.batch_id,
            file_name=file_name,
            submitted_at=datetime.now(timezone.utc),
        )
        logger.info("submitted %s as batch %s", file_name, job.batch_id)
        return job

    async def _request_upload_location(self, file_name: str) -> UploadLocation:
        try:
            resp = await self.transport.request_upload_location(file_name)
        except httpx.HTTPStatusError as e:
            raise UploadRejected(
                f"Upload URL request failed: {e.response.reason_phrase}",
                status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            # ValueError covers undecodable JSON and pydantic ValidationError
            raise TransportError(f"Upload URL request failed: {e}") from e

        if resp.code != 0:
            raise UploadRejected(
                f"Upload URL request failed: {resp.msg} (trace_id={resp.trace_id})",
                remote_message=resp.msg,
            )
        if resp.data is None or not resp.data.file_urls:
            raise UploadRejected(
                "No upload URL returned from MinerU",
                batch_id=resp.data.batch_id if resp.data else None,
            )
        return UploadLocation(
            batch_id=resp.data.batch_id, upload_url=resp.data.file_urls[0]
        )

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    async def status(self, batch_id: str) -> JobStatus:
        """Query the current status of a batch once."""
        try:
            resp = await self.transport.query_status(batch_id)
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Batch result query failed: {e.response.reason_phrase}",
                batch_id=batch_id,
                status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise TransportError(
                f"Batch result query failed: {e}", batch_id=batch_id
            ) from e

        if resp.code != 0:
            raise TransportError(
                f"Batch result query failed: {resp.msg}",
                batch_id=batch_id,
                remote_message=resp.msg,
            )
        if resp.data is None or not resp.data.extract_result:
            raise TransportError("No extraction results found", batch_id=batch_id)

        entry = resp.data.extract_result[0]
        try:
            return JobStatus.from_extract_result(entry)
        except ValueError as e:
            raise TransportError(
                f"Unknown job state {entry.state!r}", batch_id=batch_id
            ) from e

    async def await_completion(
        self,
        job: ConversionJob,
        max_wait: float | None = None,
        poll_interval: float | None = None,
        *,
        cancel: asyncio.Event | None = None,
        deadline: float | None = None,
    ) -> str:
        """Poll until the job is done and return its result locator.

        The wait budget starts at the first poll and is ``max_wait`` seconds,
        cut short by ``deadline`` (a value of this controller's clock) when
        given. Setting ``cancel`` aborts at the next poll boundary or during
        a sleep, without issuing further status queries.
        """
        max_wait = self.polling.max_wait if max_wait is None else max_wait
        poll_interval = (
            self.polling.poll_interval if poll_interval is None else poll_interval
        )
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")
        if max_wait < 0:
            raise ValueError(f"max_wait must not be negative, got {max_wait}")

        start = self._clock()
        budget_end = start + max_wait
        if deadline is not None:
            budget_end = min(budget_end, deadline)

        polls = 0
        last_state: JobState | None = None
        while True:
            if cancel is not None and cancel.is_set():
                raise JobCancelled(
                    f"Polling cancelled after {polls} polls", batch_id=job.batch_id
                )
            now = self._clock()
            if now >= budget_end:
                state = last_state.value if last_state else "unknown"
                raise Timeout(
                    f"Task timeout: processing took too long "
                    f"({now - start:.1f}s, {polls} polls, last state {state})",
                    batch_id=job.batch_id,
                )

            status = await self.status(job.batch_id)
            polls += 1
            last_state = status.state

            if status.state is JobState.DONE:
                if not status.result_locator:
                    raise MissingLocator(
                        "Task completed but no download URL provided",
                        batch_id=job.batch_id,
                    )
                logger.info("batch %s done after %d polls", job.batch_id, polls)
                return status.result_locator

            if status.state is JobState.FAILED:
                message = status.error_message or "Unknown error"
                raise RemoteProcessingFailed(
                    f"Task failed: {message}",
                    batch_id=job.batch_id,
                    remote_message=message,
                )

            # waiting-file, pending, running, converting
            if status.progress is not None:
                logger.debug(
                    "batch %s %s (%d/%d pages)",
                    job.batch_id,
                    status.state.value,
                    status.progress.extracted_pages,
                    status.progress.total_pages,
                )
            else:
                logger.debug("batch %s %s", job.batch_id, status.state.value)

            remaining = budget_end - self._clock()
            await self._pause(max(0.0, min(poll_interval, remaining)), cancel)

    async def _pause(self, seconds: float, cancel: asyncio.Event | None) -> None:
        """Sleep between polls, waking early if cancel is set."""
        if cancel is None:
            await asyncio.sleep(seconds)
            return
        try:
            await asyncio.wait_for(cancel.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            # Normal case: the interval elapsed without cancellation
            return
