from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar
from urllib.parse import quote

from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from .errors import ValidationError
from .models import (
    Allocation,
    Evaluation,
    Job,
    JobSummary,
    QueryMeta,
    QueryOptions,
    WriteMeta,
    WriteOptions,
)

if TYPE_CHECKING:
    from .client import Client

ModelT = TypeVar("ModelT", bound=BaseModel)


class Jobs:
    """Job endpoints of the scheduler API."""

    def __init__(self, client: "Client") -> None:
        self.client = client

    def list(self, options: QueryOptions | None = None) -> tuple[list[JobSummary], QueryMeta]:
        path = "/v1/jobs"
        payload, meta = self.client.query(path, options)
        return _decode_items(JobSummary, payload, path), meta

    def register(self, job: Job, options: WriteOptions | None = None) -> tuple[str, WriteMeta]:
        """Submit a job; registering an existing ID updates it. Returns the evaluation ID."""
        path = "/v1/jobs"
        payload, meta = self.client.write(path, {"Job": job.to_wire()}, options)
        return _eval_id(payload, path), meta

    def info(self, job_id: str, options: QueryOptions | None = None) -> tuple[Job, QueryMeta]:
        path = _job_path(job_id)
        payload, meta = self.client.query(path, options)
        return _decode(Job, payload, path), meta

    def allocations(
        self,
        job_id: str,
        options: QueryOptions | None = None,
    ) -> tuple[list[Allocation], QueryMeta]:
        # Unknown job IDs yield an empty list rather than an error.
        path = f"{_job_path(job_id)}/allocations"
        payload, meta = self.client.query(path, options)
        return _decode_items(Allocation, payload, path), meta

    def evaluations(
        self,
        job_id: str,
        options: QueryOptions | None = None,
    ) -> tuple[list[Evaluation], QueryMeta]:
        path = f"{_job_path(job_id)}/evaluations"
        payload, meta = self.client.query(path, options)
        return _decode_items(Evaluation, payload, path), meta

    def delete(self, job_id: str, options: WriteOptions | None = None) -> WriteMeta:
        _payload, meta = self.client.delete(_job_path(job_id), options)
        return meta

    def force_evaluate(
        self,
        job_id: str,
        options: WriteOptions | None = None,
    ) -> tuple[str, WriteMeta]:
        path = f"{_job_path(job_id)}/evaluate"
        payload, meta = self.client.write(path, None, options)
        return _eval_id(payload, path), meta


def _job_path(job_id: str) -> str:
    return f"/v1/job/{quote(job_id, safe='')}"


def _decode(model: type[ModelT], payload: Any, path: str) -> ModelT:
    try:
        return model.model_validate(payload)
    except ModelValidationError as exc:
        raise ValidationError(f"{path} returned an invalid {model.__name__}: {exc}") from exc


def _decode_items(model: type[ModelT], payload: Any, path: str) -> list[ModelT]:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValidationError(
            f"{path} returned {type(payload).__name__}, expected a list of {model.__name__}"
        )
    return [_decode(model, item, path) for item in payload]


def _eval_id(payload: Any, path: str) -> str:
    eval_id = payload.get("EvalID") if isinstance(payload, dict) else None
    if not isinstance(eval_id, str) or not eval_id:
        raise ValidationError(f"{path} response is missing an evaluation ID: {payload!r}")
    return eval_id
