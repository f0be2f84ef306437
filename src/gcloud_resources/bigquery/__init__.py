"""BigQuery datasets, tables, views and jobs."""

from gcloud_resources.bigquery.connection import BigqueryConnection
from gcloud_resources.bigquery.data import InsertResponse, TableData
from gcloud_resources.bigquery.dataset import Dataset
from gcloud_resources.bigquery.job import Job
from gcloud_resources.bigquery.project import Project
from gcloud_resources.bigquery.schema import SchemaBuilder
from gcloud_resources.bigquery.table import BaseTable, Table, View, table_from_gapi

__all__ = [
    "BaseTable",
    "BigqueryConnection",
    "Dataset",
    "InsertResponse",
    "Job",
    "Project",
    "SchemaBuilder",
    "Table",
    "TableData",
    "View",
    "table_from_gapi",
]
