from typing import List, Optional

from pydantic import field_validator

from .base import CamelModel, Timestamp, blank_to_none


# ---------- ENGINEERS ----------
class EngineerBase(CamelModel):
    name: str
    email: Optional[str] = None
    role: Optional[str] = None

    @field_validator("email", "role", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        return blank_to_none(v)


class EngineerCreate(EngineerBase):
    id: Optional[str] = None


class EngineerUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None


class EngineerResponse(EngineerBase):
    id: str
    created_at: Timestamp


# ---------- PROJECTS ----------
class ProjectBase(CamelModel):
    project_name: str
    order_number: Optional[str] = None
    sales_name: Optional[str] = None
    status: Optional[str] = None

    @field_validator("order_number", "sales_name", "status", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        return blank_to_none(v)


class ProjectCreate(ProjectBase):
    id: Optional[str] = None


class ProjectUpdate(CamelModel):
    project_name: Optional[str] = None
    order_number: Optional[str] = None
    sales_name: Optional[str] = None
    status: Optional[str] = None

    @field_validator("order_number", "sales_name", "status", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        return blank_to_none(v)


class ProjectResponse(ProjectBase):
    id: str
    created_at: Timestamp
    updated_at: Timestamp


# ---------- TASKS ----------
class TaskBase(CamelModel):
    name: str
    project_id: Optional[str] = None
    assigned_to: List[str] = []
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    completed_date: Optional[str] = None
    stakeholder: Optional[str] = None
    status: Optional[str] = "pending"
    task_type: Optional[str] = "project"
    priority: Optional[str] = None

    @field_validator("project_id", "start_date", "end_date", "completed_date", "stakeholder", "priority", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        return blank_to_none(v)

    @field_validator("assigned_to", mode="before")
    @classmethod
    def none_to_list(cls, v):
        return v or []


class TaskCreate(TaskBase):
    id: Optional[str] = None


class TaskUpdate(CamelModel):
    name: Optional[str] = None
    project_id: Optional[str] = None
    assigned_to: Optional[List[str]] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    completed_date: Optional[str] = None
    stakeholder: Optional[str] = None
    status: Optional[str] = None
    task_type: Optional[str] = None
    priority: Optional[str] = None

    @field_validator("project_id", "start_date", "end_date", "completed_date", "stakeholder", "priority", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        return blank_to_none(v)


class TaskResponse(TaskBase):
    id: str
    created_at: Timestamp
    updated_at: Timestamp


# ---------- LABOR COSTS ----------
class LaborCostBase(CamelModel):
    task_id: Optional[str] = None
    project_id: Optional[str] = None
    asset_id: Optional[str] = None
    engineer_id: Optional[str] = None
    engineer_name: Optional[str] = None
    work_description: Optional[str] = None
    role: Optional[str] = None
    hours: float = 0
    hourly_rate: float = 0
    work_date: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("task_id", "project_id", "asset_id", "engineer_id", "work_date", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        return blank_to_none(v)


class LaborCostCreate(LaborCostBase):
    pass


class LaborCostUpdate(CamelModel):
    task_id: Optional[str] = None
    project_id: Optional[str] = None
    asset_id: Optional[str] = None
    engineer_id: Optional[str] = None
    engineer_name: Optional[str] = None
    work_description: Optional[str] = None
    role: Optional[str] = None
    hours: Optional[float] = None
    hourly_rate: Optional[float] = None
    work_date: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("task_id", "project_id", "asset_id", "engineer_id", "work_date", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        return blank_to_none(v)


class LaborCostResponse(LaborCostBase):
    id: str
    total_cost: float
    created_at: Timestamp
    updated_at: Timestamp


# ---------- STAKEHOLDERS ----------
class StakeholderResponse(CamelModel):
    id: str
    name: str
    type: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    notes: Optional[str] = None
    created_at: Timestamp
    updated_at: Timestamp
