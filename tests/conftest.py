from collections.abc import Iterator
from pathlib import Path
import sys
import threading
import uuid
from typing import Any

import pytest
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from jobsched.client import Client
from jobsched.config import ClientConfig
from jobsched.hooks.observability import EventLogger

AGENT_ADDRESS = "http://127.0.0.1:4646"
VALID_JOB_TYPES = {"batch", "service"}


class FakeAgent:
    """In-memory stand-in for a scheduler agent: just enough state to exercise the HTTP contract."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.index = 0
        self.jobs_index = 0
        self.evals_index = 0
        self.jobs: dict[str, dict[str, Any]] = {}
        self.evals: list[dict[str, Any]] = []
        self.requests: list[dict[str, Any]] = []

    def register(self, job: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            self.index += 1
            existing = self.jobs.get(job["ID"])
            stored = dict(job)
            stored["Status"] = "pending"
            stored["CreateIndex"] = existing["CreateIndex"] if existing else self.index
            stored["ModifyIndex"] = self.index
            self.jobs[job["ID"]] = stored
            self.jobs_index = self.index
            eval_id = self._create_eval(stored, triggered_by="job-register")
            return {"EvalID": eval_id, "EvalCreateIndex": self.index, "JobModifyIndex": self.index}

    def deregister(self, job_id: str) -> dict[str, Any]:
        with self._lock:
            self.index += 1
            job = self.jobs.pop(job_id, None)
            self.jobs_index = self.index
            eval_id = ""
            if job is not None:
                eval_id = self._create_eval(job, triggered_by="job-deregister")
            return {"EvalID": eval_id, "JobModifyIndex": self.index}

    def evaluate(self, job_id: str) -> dict[str, Any] | None:
        with self._lock:
            job = self.jobs.get(job_id)
            if job is None:
                return None
            self.index += 1
            eval_id = self._create_eval(job, triggered_by="job-register")
            return {"EvalID": eval_id, "EvalCreateIndex": self.index, "JobModifyIndex": job["ModifyIndex"]}

    def _create_eval(self, job: dict[str, Any], *, triggered_by: str) -> str:
        eval_id = str(uuid.uuid4())
        self.evals.append(
            {
                "ID": eval_id,
                "Priority": job.get("Priority", 0),
                "Type": job.get("Type"),
                "TriggeredBy": triggered_by,
                "JobID": job["ID"],
                "JobModifyIndex": job["ModifyIndex"],
                "Status": "pending",
                "CreateIndex": self.index,
                "ModifyIndex": self.index,
            }
        )
        self.evals_index = self.index
        return eval_id


def _validate_job(job: Any) -> str | None:
    if not isinstance(job, dict):
        return "missing job"
    if not job.get("ID"):
        return "missing job ID"
    if not job.get("Name"):
        return "missing job name"
    if job.get("Type") not in VALID_JOB_TYPES:
        return f"invalid job type: {job.get('Type')!r}"
    priority = job.get("Priority")
    if not isinstance(priority, int) or not 1 <= priority <= 100:
        return f"job priority must be between 1 and 100, got: {priority!r}"
    return None


def create_fake_agent_app(agent: FakeAgent) -> FastAPI:
    app = FastAPI(title="Fake Scheduler Agent")

    def _meta_headers(index: int) -> dict[str, str]:
        return {
            "X-Nomad-Index": str(index),
            "X-Nomad-LastContact": "0",
            "X-Nomad-KnownLeader": "true",
        }

    @app.middleware("http")
    async def record_request(request: Request, call_next):
        agent.requests.append(
            {
                "method": request.method,
                "path": request.url.path,
                "params": dict(request.query_params),
            }
        )
        return await call_next(request)

    @app.get("/v1/jobs")
    async def list_jobs(response: Response) -> list[dict]:
        response.headers.update(_meta_headers(agent.jobs_index))
        return [
            {
                key: job.get(key)
                for key in (
                    "ID",
                    "Name",
                    "Type",
                    "Priority",
                    "Status",
                    "StatusDescription",
                    "CreateIndex",
                    "ModifyIndex",
                )
            }
            for job in agent.jobs.values()
        ]

    @app.put("/v1/jobs")
    async def register_job(request: Request) -> Response:
        try:
            body = await request.json()
        except ValueError as exc:
            return PlainTextResponse(f"failed to decode request body: {exc}", status_code=400)
        job = body.get("Job") if isinstance(body, dict) else None
        problem = _validate_job(job)
        if problem:
            return PlainTextResponse(problem, status_code=400)
        result = agent.register(job)
        return JSONResponse(result, headers=_meta_headers(agent.index))

    @app.get("/v1/job/{job_id}")
    async def job_info(job_id: str) -> Response:
        job = agent.jobs.get(job_id)
        if job is None:
            return PlainTextResponse("job not found", status_code=404)
        return JSONResponse(job, headers=_meta_headers(agent.jobs_index))

    @app.delete("/v1/job/{job_id}")
    async def deregister_job(job_id: str) -> Response:
        result = agent.deregister(job_id)
        return JSONResponse(result, headers=_meta_headers(agent.index))

    @app.get("/v1/job/{job_id}/allocations")
    async def job_allocations(job_id: str, response: Response) -> list[dict]:
        response.headers.update(_meta_headers(0))
        return []

    @app.get("/v1/job/{job_id}/evaluations")
    async def job_evaluations(job_id: str, response: Response) -> list[dict]:
        response.headers.update(_meta_headers(agent.evals_index))
        return [evaluation for evaluation in agent.evals if evaluation["JobID"] == job_id]

    @app.put("/v1/job/{job_id}/evaluate")
    async def evaluate_job(job_id: str) -> Response:
        result = agent.evaluate(job_id)
        if result is None:
            return PlainTextResponse("job not found", status_code=404)
        return JSONResponse(result, headers=_meta_headers(agent.index))

    return app


@pytest.fixture
def agent() -> FakeAgent:
    return FakeAgent()


@pytest.fixture
def agent_http(agent: FakeAgent) -> Iterator[TestClient]:
    with TestClient(create_fake_agent_app(agent), base_url=AGENT_ADDRESS) as http_client:
        yield http_client


@pytest.fixture
def event_logger() -> EventLogger:
    return EventLogger()


@pytest.fixture
def client(agent_http: TestClient, event_logger: EventLogger) -> Client:
    return Client(
        ClientConfig(address=AGENT_ADDRESS),
        http_client=agent_http,
        logger=event_logger,
    )
