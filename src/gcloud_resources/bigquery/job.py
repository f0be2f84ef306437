"""BigQuery jobs (copy, extract and load)."""

from datetime import datetime
from typing import Any

from tenacity import Retrying, retry_if_result, stop_after_delay, stop_never, wait_exponential

from gcloud_resources.bigquery.connection import BigqueryConnection
from gcloud_resources.connection import ApiResponse
from gcloud_resources.errors import InvalidArgument
from gcloud_resources.logging import get_logger
from gcloud_resources.resource import Resource, from_millis

logger = get_logger(__name__)

# Polling interval bounds for wait_until_done, in seconds
POLL_INITIAL = 1.0
POLL_MAX = 60.0


class Job(Resource):
    """A BigQuery job.

    Jobs are created by Table.copy, Table.extract and Table.load; their state
    is refreshed with reload() or wait_until_done().
    """

    connection: BigqueryConnection

    def __repr__(self) -> str:
        return f"Job({self.job_id!r})"

    @property
    def job_ref(self) -> dict[str, str]:
        return self._gapi.get("jobReference") or {}

    @property
    def job_id(self) -> str:
        return self.job_ref.get("jobId", "")

    @property
    def project_id(self) -> str:
        return self.job_ref.get("projectId", "")

    @property
    def status(self) -> dict[str, Any]:
        return self._gapi.get("status") or {}

    @property
    def state(self) -> str | None:
        """PENDING, RUNNING or DONE as last seen (call reload() to refresh)."""
        return self.status.get("state")

    @property
    def is_pending(self) -> bool:
        return self.state == "PENDING"

    @property
    def is_running(self) -> bool:
        return self.state == "RUNNING"

    @property
    def is_done(self) -> bool:
        return self.state == "DONE"

    @property
    def error(self) -> dict[str, Any] | None:
        """The error that made the job fail, if any."""
        return self.status.get("errorResult")

    @property
    def errors(self) -> list[dict[str, Any]]:
        """All errors encountered while the job ran (they need not be fatal)."""
        return self.status.get("errors") or []

    @property
    def is_failed(self) -> bool:
        return self.is_done and self.error is not None

    @property
    def configuration(self) -> dict[str, Any]:
        return self._gapi.get("configuration") or {}

    @property
    def statistics(self) -> dict[str, Any]:
        return self._gapi.get("statistics") or {}

    @property
    def created_at(self) -> datetime | None:
        return from_millis(self.statistics.get("creationTime"))

    @property
    def started_at(self) -> datetime | None:
        return from_millis(self.statistics.get("startTime"))

    @property
    def ended_at(self) -> datetime | None:
        return from_millis(self.statistics.get("endTime"))

    def _fetch(self) -> ApiResponse:
        return self.connection.get_job(self.job_id)

    def _send_patch(self, patch: dict[str, Any]) -> ApiResponse:
        raise InvalidArgument("jobs cannot be patched")

    def wait_until_done(self, timeout: float | None = None) -> "Job":
        """Reload the job until it reaches the DONE state.

        Args:
            timeout: Maximum seconds to wait (wait forever when None).

        Returns:
            The job itself; check is_failed for the outcome. If the timeout
            expires first the job is returned in its last seen state.
        """
        if self.is_done:
            return self
        retrying = Retrying(
            stop=stop_after_delay(timeout) if timeout is not None else stop_never,
            wait=wait_exponential(multiplier=POLL_INITIAL, max=POLL_MAX),
            retry=retry_if_result(lambda job: not job.is_done),
            retry_error_callback=lambda state: state.outcome.result(),
        )
        job: Job = retrying(self.reload)
        logger.debug("job_polled", job_id=self.job_id, state=job.state)
        return job
