from typing import List, Optional

from pydantic import field_validator

from .base import CamelModel, blank_to_none


class PersonReportRequest(CamelModel):
    person_name: str = ""
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        return blank_to_none(v)


class EngineerReportRequest(CamelModel):
    engineer_id: str = ""
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        return blank_to_none(v)


# ---------- PERSON REPORT ----------
class EngineerHours(CamelModel):
    engineer_id: str
    engineer_name: str
    total_hours: float
    task_count: int
    project_count: int


class RelatedProject(CamelModel):
    id: str
    order_number: Optional[str] = None
    project_name: Optional[str] = None
    sales_name: Optional[str] = None
    created_at: Optional[str] = None
    task_count: int = 0


class RelatedTask(CamelModel):
    id: str
    name: str
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    stakeholder: Optional[str] = None
    assigned_to: List[str] = []
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    status: Optional[str] = None
    task_type: Optional[str] = None
    priority: Optional[str] = None


class PersonReport(CamelModel):
    person_name: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    engineer_hours: List[EngineerHours] = []
    related_projects: List[RelatedProject] = []
    related_tasks: List[RelatedTask] = []


# ---------- ENGINEER REPORT ----------
class EngineerTask(CamelModel):
    id: str
    name: str
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    stakeholder: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    status: Optional[str] = None
    task_type: Optional[str] = None
    priority: Optional[str] = None
    completed_date: Optional[str] = None
    hours: float = 0.0


class EngineerAsset(CamelModel):
    id: str
    name: str
    type: Optional[str] = None
    maturity: Optional[str] = None
    owner_name: Optional[str] = None
    description: Optional[str] = None
    reuse_count: int = 0
    created_at: Optional[str] = None


class EngineerProjectStats(CamelModel):
    project_id: str
    project_name: Optional[str] = None
    task_count: int
    completed_task_count: int
    total_hours: float


class LaborCostRow(CamelModel):
    id: str
    task_id: Optional[str] = None
    project_id: Optional[str] = None
    work_date: Optional[str] = None
    hours: float
    work_description: Optional[str] = None


class EngineerReport(CamelModel):
    engineer_id: str
    engineer_name: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    total_tasks: int
    completed_tasks: int
    total_projects: int
    total_hours: float
    total_assets: int
    stakeholders: List[str] = []
    tasks: List[EngineerTask] = []
    assets: List[EngineerAsset] = []
    projects: List[EngineerProjectStats] = []
    labor_costs: List[LaborCostRow] = []
