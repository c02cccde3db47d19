"""Client library for the job-scheduling service HTTP API."""

from .client import Client
from .config import ClientConfig
from .errors import JobschedError, NotFoundError, RequestError, ValidationError
from .jobs import Jobs
from .models import (
    Allocation,
    Constraint,
    Evaluation,
    Job,
    JobSummary,
    JobType,
    QueryMeta,
    QueryOptions,
    WriteMeta,
    WriteOptions,
    hard_constraint,
    new_batch_job,
    new_service_job,
    soft_constraint,
)

__all__ = [
    "Allocation",
    "Client",
    "ClientConfig",
    "Constraint",
    "Evaluation",
    "hard_constraint",
    "Job",
    "JobSummary",
    "JobType",
    "Jobs",
    "JobschedError",
    "new_batch_job",
    "new_service_job",
    "NotFoundError",
    "QueryMeta",
    "QueryOptions",
    "RequestError",
    "soft_constraint",
    "ValidationError",
    "WriteMeta",
    "WriteOptions",
]
