from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class JobType(str, Enum):
    BATCH = "batch"
    SERVICE = "service"


class _WireModel(BaseModel):
    """Base for documents exchanged with the scheduler (PascalCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Constraint(_WireModel):
    hard: bool = Field(default=False, alias="Hard")
    l_target: str = Field(default="", alias="LTarget")
    r_target: str = Field(default="", alias="RTarget")
    operand: str = Field(default="", alias="Operand")
    weight: int = Field(default=0, alias="Weight")


class Job(_WireModel):
    id: str = Field(default="", alias="ID")
    name: str = Field(default="", alias="Name")
    type: JobType | None = Field(default=None, alias="Type")
    priority: int = Field(default=0, alias="Priority")
    meta: dict[str, str] | None = Field(default=None, alias="Meta")
    constraints: list[Constraint] | None = Field(default=None, alias="Constraints")

    # Filled in by the scheduler.
    status: str | None = Field(default=None, alias="Status")
    status_description: str | None = Field(default=None, alias="StatusDescription")
    create_index: int | None = Field(default=None, alias="CreateIndex")
    modify_index: int | None = Field(default=None, alias="ModifyIndex")

    def set_meta(self, key: str, value: str) -> "Job":
        if self.meta is None:
            self.meta = {}
        self.meta[key] = value
        return self

    def constrain(self, constraint: Constraint) -> "Job":
        if self.constraints is None:
            self.constraints = []
        self.constraints.append(constraint)
        return self


class JobSummary(_WireModel):
    id: str = Field(alias="ID")
    name: str = Field(default="", alias="Name")
    type: JobType | None = Field(default=None, alias="Type")
    priority: int = Field(default=0, alias="Priority")
    status: str | None = Field(default=None, alias="Status")
    status_description: str | None = Field(default=None, alias="StatusDescription")
    create_index: int = Field(default=0, alias="CreateIndex")
    modify_index: int = Field(default=0, alias="ModifyIndex")


class Evaluation(_WireModel):
    id: str = Field(alias="ID")
    priority: int = Field(default=0, alias="Priority")
    type: str | None = Field(default=None, alias="Type")
    triggered_by: str | None = Field(default=None, alias="TriggeredBy")
    job_id: str | None = Field(default=None, alias="JobID")
    job_modify_index: int = Field(default=0, alias="JobModifyIndex")
    status: str | None = Field(default=None, alias="Status")
    status_description: str | None = Field(default=None, alias="StatusDescription")
    create_index: int = Field(default=0, alias="CreateIndex")
    modify_index: int = Field(default=0, alias="ModifyIndex")


class Allocation(_WireModel):
    id: str = Field(alias="ID")
    eval_id: str | None = Field(default=None, alias="EvalID")
    name: str | None = Field(default=None, alias="Name")
    node_id: str | None = Field(default=None, alias="NodeID")
    job_id: str | None = Field(default=None, alias="JobID")
    task_group: str | None = Field(default=None, alias="TaskGroup")
    desired_status: str | None = Field(default=None, alias="DesiredStatus")
    desired_description: str | None = Field(default=None, alias="DesiredDescription")
    client_status: str | None = Field(default=None, alias="ClientStatus")
    client_description: str | None = Field(default=None, alias="ClientDescription")
    create_index: int = Field(default=0, alias="CreateIndex")
    modify_index: int = Field(default=0, alias="ModifyIndex")


class QueryOptions(BaseModel):
    region: str | None = None
    allow_stale: bool = False
    wait_index: int = 0
    wait_time: float | None = None
    timeout: float | None = None

    @model_validator(mode="after")
    def validate_options(self) -> "QueryOptions":
        if self.wait_index < 0:
            raise ValueError("wait_index must be >= 0")
        if self.wait_time is not None and self.wait_time < 0:
            raise ValueError("wait_time must be >= 0")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive")
        return self


class WriteOptions(BaseModel):
    region: str | None = None
    timeout: float | None = None

    @model_validator(mode="after")
    def validate_options(self) -> "WriteOptions":
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive")
        return self


class QueryMeta(BaseModel):
    last_index: int = 0
    last_contact: float = 0.0
    known_leader: bool = False
    request_time: float = 0.0


class WriteMeta(BaseModel):
    last_index: int = 0
    request_time: float = 0.0


def new_batch_job(id: str, name: str, priority: int) -> Job:
    return Job(id=id, name=name, type=JobType.BATCH, priority=priority)


def new_service_job(id: str, name: str, priority: int) -> Job:
    return Job(id=id, name=name, type=JobType.SERVICE, priority=priority)


def hard_constraint(l_target: str, operand: str, r_target: str) -> Constraint:
    return Constraint(hard=True, l_target=l_target, r_target=r_target, operand=operand, weight=0)


def soft_constraint(l_target: str, operand: str, r_target: str, weight: int) -> Constraint:
    return Constraint(
        hard=False,
        l_target=l_target,
        r_target=r_target,
        operand=operand,
        weight=weight,
    )
