from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import httpx
from pydantic import BaseModel

from jobsched.client import Client
from jobsched.config import ClientConfig
from jobsched.errors import JobschedError
from jobsched.models import Job, QueryOptions, WriteOptions


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, dict):
        return {key: _dump(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_dump(item) for item in value]
    return value


def _print_json(payload: dict[str, Any]) -> None:
    print(json.dumps(_dump(payload), ensure_ascii=True, indent=2))


def _load_job(path: str) -> Job:
    raw = json.loads(Path(path).expanduser().read_text(encoding="utf-8"))
    if isinstance(raw, dict) and isinstance(raw.get("Job"), dict):
        raw = raw["Job"]
    return Job.model_validate(raw)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Inspect and manage jobs on the scheduling service.",
    )
    parser.add_argument("--address", default=None, help="Scheduler HTTP address (default: JOBSCHED_ADDR).")
    parser.add_argument("--region", default=None, help="Target region (default: JOBSCHED_REGION).")
    parser.add_argument(
        "--timeout-seconds",
        type=float,
        default=None,
        help="Per-request timeout in seconds.",
    )
    parser.add_argument("--stale", action="store_true", help="Allow stale reads from any server.")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("list", help="List registered jobs.")
    info = commands.add_parser("info", help="Show a single job.")
    info.add_argument("job_id")
    register = commands.add_parser("register", help="Register a job from a JSON file.")
    register.add_argument("path", help="JSON job document, bare or wrapped as {\"Job\": ...}.")
    delete = commands.add_parser("delete", help="Deregister a job.")
    delete.add_argument("job_id")
    evaluate = commands.add_parser("evaluate", help="Force a new evaluation of a job.")
    evaluate.add_argument("job_id")
    evaluations = commands.add_parser("evaluations", help="List evaluations of a job.")
    evaluations.add_argument("job_id")
    allocations = commands.add_parser("allocations", help="List allocations of a job.")
    allocations.add_argument("job_id")
    return parser


def _build_config(args: argparse.Namespace) -> ClientConfig:
    config = ClientConfig.from_env()
    overrides: dict[str, Any] = {}
    if args.address:
        overrides["address"] = args.address
    if args.region:
        overrides["region"] = args.region
    if args.timeout_seconds is not None:
        overrides["request_timeout_seconds"] = args.timeout_seconds
    if not overrides:
        return config
    return ClientConfig.model_validate({**config.model_dump(), **overrides})


def run(argv: list[str] | None = None, *, http_client: httpx.Client | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        jobs = Client(_build_config(args), http_client=http_client).jobs()
        query = QueryOptions(allow_stale=args.stale)
        write = WriteOptions()
        if args.command == "list":
            summaries, meta = jobs.list(query)
            _print_json({"jobs": summaries, "index": meta.last_index})
        elif args.command == "info":
            job, meta = jobs.info(args.job_id, query)
            _print_json({"job": job, "index": meta.last_index})
        elif args.command == "register":
            job = _load_job(args.path)
            eval_id, wmeta = jobs.register(job, write)
            _print_json({"eval_id": eval_id, "index": wmeta.last_index})
        elif args.command == "delete":
            wmeta = jobs.delete(args.job_id, write)
            _print_json({"job_id": args.job_id, "index": wmeta.last_index})
        elif args.command == "evaluate":
            eval_id, wmeta = jobs.force_evaluate(args.job_id, write)
            _print_json({"eval_id": eval_id, "index": wmeta.last_index})
        elif args.command == "evaluations":
            evals, meta = jobs.evaluations(args.job_id, query)
            _print_json({"evaluations": evals, "index": meta.last_index})
        elif args.command == "allocations":
            allocs, meta = jobs.allocations(args.job_id, query)
            _print_json({"allocations": allocs, "index": meta.last_index})
    except (JobschedError, ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
