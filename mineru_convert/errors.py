"""Error taxonomy for the conversion pipeline."""

from __future__ import annotations


class ConversionError(Exception):
    """Base for every failure surfaced by the conversion pipeline.

    Carries whatever context was available at the failure site so callers
    can diagnose without retrying blindly.
    """

    def __init__(
        self,
        message: str,
        *,
        batch_id: str | None = None,
        status_code: int | None = None,
        remote_message: str | None = None,
    ) -> None:
        self.batch_id = batch_id
        self.status_code = status_code
        self.remote_message = remote_message
        super().__init__(self._with_context(message))

    def _with_context(self, message: str) -> str:
        parts = []
        if self.batch_id:
            parts.append(f"batch_id={self.batch_id}")
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if not parts:
            return message
        return f"{message} ({', '.join(parts)})"


class ServiceUnavailable(ConversionError):
    """The remote service is disabled or missing its endpoint/credential."""


class UploadRejected(ConversionError):
    """The upload-location request was refused or returned no location."""


class TransferFailed(ConversionError):
    """PUT of the document bytes to the upload location failed."""


class MissingLocator(ConversionError):
    """Job finished but the remote service gave no result URL."""


class RemoteProcessingFailed(ConversionError):
    """The remote job reached the failed state."""


class Timeout(ConversionError):
    """Wait budget exhausted before the job reached a terminal state."""


class JobCancelled(ConversionError):
    """Polling was aborted through the caller's cancel signal."""


class DownloadFailed(ConversionError):
    """The result container could not be downloaded."""


class MalformedContainer(ConversionError):
    """The result container could not be opened as an archive."""


class TransportError(ConversionError):
    """Catch-all for unclassified transport faults (network, malformed bodies)."""


__all__ = [
    "ConversionError",
    "DownloadFailed",
    "JobCancelled",
    "MalformedContainer",
    "MissingLocator",
    "RemoteProcessingFailed",
    "ServiceUnavailable",
    "Timeout",
    "TransferFailed",
    "TransportError",
    "UploadRejected",
]
