"""Entry point for BigQuery resources in one project."""

from gcloud_resources.bigquery.connection import BigqueryConnection
from gcloud_resources.bigquery.dataset import Dataset
from gcloud_resources.bigquery.job import Job
from gcloud_resources.bigquery.models import (
    CreateDatasetOptions,
    DatasetListOptions,
    JobListOptions,
)
from gcloud_resources.errors import InvalidArgument
from gcloud_resources.logging import get_logger
from gcloud_resources.models import build_options
from gcloud_resources.page import Page, parse_total

logger = get_logger(__name__)


class Project:
    """BigQuery datasets and jobs of a project.

    Example:
        bigquery = gcloud_resources.connect_bigquery()
        dataset = bigquery.dataset("my_dataset")
        table = dataset.table("my_table")
    """

    def __init__(self, project_id: str, connection: BigqueryConnection) -> None:
        """Initialize the project.

        Raises:
            InvalidArgument: If the project ID is empty.
        """
        project_id = str(project_id or "")
        if not project_id:
            raise InvalidArgument("project is missing")
        self.project_id = project_id
        self.connection = connection

    def __repr__(self) -> str:
        return f"Project({self.project_id!r})"

    def dataset(self, dataset_id: str) -> Dataset | None:
        """Look up a dataset by ID, or None if it does not exist."""
        response = self.connection.get_dataset(dataset_id)
        if response.is_not_found:
            return None
        response.raise_for_error()
        return Dataset.from_gapi(response.body or {}, self.connection, complete=True)

    def create_dataset(
        self,
        dataset_id: str,
        name: str | None = None,
        description: str | None = None,
        expiration: int | None = None,
        location: str | None = None,
    ) -> Dataset:
        """Create a dataset.

        Args:
            dataset_id: ID of the new dataset (letters, numbers, underscores).
            name: Friendly name.
            description: Dataset description.
            expiration: Default lifetime of new tables in milliseconds.
            location: Geographic location ("US" or "EU").

        Returns:
            The new dataset (partial representation).

        Raises:
            InvalidArgument: If the dataset ID is empty or an option is invalid.
            ApiError: If the server rejects the request.
        """
        if not dataset_id:
            raise InvalidArgument("dataset_id is missing")
        options = build_options(
            CreateDatasetOptions,
            name=name,
            description=description,
            expiration=expiration,
            location=location,
        )
        response = self.connection.insert_dataset(dataset_id, options).raise_for_error()
        logger.info("dataset_created", project=self.project_id, dataset=dataset_id)
        return Dataset.from_gapi(response.body or {}, self.connection)

    def datasets(
        self,
        include_hidden: bool = False,
        page_token: str | None = None,
        max_results: int | None = None,
    ) -> Page[Dataset]:
        """List one page of datasets.

        Args:
            include_hidden: Include hidden datasets.
            page_token: Continuation token from a previous page.
            max_results: Maximum datasets per page.
        """
        options = build_options(
            DatasetListOptions,
            include_hidden=include_hidden,
            page_token=page_token,
            max_results=max_results,
        )
        body = self.connection.list_datasets(options).raise_for_error().body or {}
        return Page(
            items=[
                Dataset.from_gapi(gapi, self.connection) for gapi in body.get("datasets") or []
            ],
            next_token=body.get("nextPageToken"),
            total=parse_total(body.get("totalItems")),
        )

    def job(self, job_id: str) -> Job | None:
        """Look up a job by ID, or None if it does not exist."""
        response = self.connection.get_job(job_id)
        if response.is_not_found:
            return None
        response.raise_for_error()
        return Job.from_gapi(response.body or {}, self.connection, complete=True)

    def jobs(
        self,
        all_users: bool = False,
        state: str | None = None,
        page_token: str | None = None,
        max_results: int | None = None,
    ) -> Page[Job]:
        """List one page of jobs.

        Args:
            all_users: Include jobs owned by every user in the project.
            state: Only jobs in this state ("done", "pending" or "running").
            page_token: Continuation token from a previous page.
            max_results: Maximum jobs per page.
        """
        options = build_options(
            JobListOptions,
            all_users=all_users,
            state=state,
            page_token=page_token,
            max_results=max_results,
        )
        body = self.connection.list_jobs(options).raise_for_error().body or {}
        return Page(
            items=[Job.from_gapi(gapi, self.connection) for gapi in body.get("jobs") or []],
            next_token=body.get("nextPageToken"),
            total=parse_total(body.get("totalItems")),
        )
