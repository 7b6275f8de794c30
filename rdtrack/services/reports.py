"""
Person and engineer reports.
Reconciles tasks, labor records, projects and assets over an optional date
range. Labor records are preferred over task-date estimates whenever they exist.
"""
from typing import Dict, List, Optional

import structlog

from ..models.models import LaborCost, Project, Task
from ..schemas.reports import (
    EngineerAsset,
    EngineerHours,
    EngineerProjectStats,
    EngineerReport,
    EngineerTask,
    LaborCostRow,
    PersonReport,
    RelatedProject,
    RelatedTask,
)
from .date_rules import (
    derived_task_hours,
    format_timestamp,
    parse_loose_datetime,
    parse_report_range,
    task_in_range,
    within_bounds,
)
from .errors import EngineerNotFoundError, InvalidReportRequest
from .repository import Repository


logger = structlog.get_logger(__name__)

COMPLETED_STATUS = "completed"


def _assignees(task: Task) -> List[str]:
    value = task.assigned_to
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None]


def _unique(values) -> list:
    return list(dict.fromkeys(values))


def _hours(labor: List[LaborCost], tasks: List[Task]) -> float:
    """Labor hours when any labor record applies, else the task-date estimate."""
    if labor:
        return sum(float(lc.hours or 0) for lc in labor)
    return sum(derived_task_hours(t.start_date, t.end_date) for t in tasks)


def _labor_in_range(labor: List[LaborCost], start, end) -> List[LaborCost]:
    return [lc for lc in labor if within_bounds(parse_loose_datetime(lc.work_date), start, end)]


def _project_name(projects: Dict[str, Project], project_id: Optional[str]) -> Optional[str]:
    project = projects.get(project_id) if project_id else None
    return project.project_name if project else None


def build_person_report(
    repo: Repository,
    person_name: str,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> PersonReport:
    """
    Report for a person identified by free-text name.

    Tasks match when the name is a substring of the stakeholder, or of an
    assignee's id or resolved display name. Projects match on sales name.
    """
    person_name = (person_name or "").strip()
    if not person_name:
        raise InvalidReportRequest("Person name is required")
    start, end = parse_report_range(start_date, end_date)

    names = repo.engineer_names()

    def _assignee_matches(engineer_id: str) -> bool:
        if person_name in engineer_id:
            return True
        return person_name in (names.get(engineer_id) or "")

    tasks = [
        t
        for t in repo.list_tasks()
        if (t.stakeholder and person_name in t.stakeholder)
        or any(_assignee_matches(e) for e in _assignees(t))
    ]
    stakeholder_projects = [p for p in repo.list_projects() if p.sales_name and person_name in p.sales_name]

    if start is not None or end is not None:
        tasks = [t for t in tasks if task_in_range(t.start_date, t.end_date, start, end)]
        stakeholder_projects = [p for p in stakeholder_projects if within_bounds(p.created_at, start, end)]

    task_project_ids = _unique(t.project_id for t in tasks if t.project_id)
    all_project_ids = _unique(task_project_ids + [p.id for p in stakeholder_projects])
    projects = repo.list_projects(all_project_ids)
    projects_by_id = {p.id: p for p in projects}

    labor = repo.list_labor_costs(task_ids=[t.id for t in tasks], project_ids=all_project_ids)
    labor = _labor_in_range(labor, start, end)

    engineer_ids = _unique(e for t in tasks for e in _assignees(t))
    engineer_rows = []
    for engineer_id in engineer_ids:
        assigned = [t for t in tasks if engineer_id in _assignees(t)]
        engineer_labor = [lc for lc in labor if lc.engineer_id == engineer_id]
        engineer_rows.append(
            EngineerHours(
                engineer_id=engineer_id,
                engineer_name=names.get(engineer_id) or engineer_id,
                total_hours=round(_hours(engineer_labor, assigned), 2),
                task_count=len(assigned),
                project_count=len(_unique(t.project_id for t in assigned if t.project_id)),
            )
        )
    engineer_rows.sort(key=lambda r: (r.total_hours, r.task_count), reverse=True)

    report = PersonReport(
        person_name=person_name,
        start_date=start_date,
        end_date=end_date,
        engineer_hours=engineer_rows,
        related_projects=[
            RelatedProject(
                id=p.id,
                order_number=p.order_number,
                project_name=p.project_name,
                sales_name=p.sales_name,
                created_at=format_timestamp(p.created_at),
                task_count=sum(1 for t in tasks if t.project_id == p.id),
            )
            for p in projects
        ],
        related_tasks=[
            RelatedTask(
                id=t.id,
                name=t.name,
                project_id=t.project_id,
                project_name=_project_name(projects_by_id, t.project_id),
                stakeholder=t.stakeholder,
                assigned_to=_assignees(t),
                start_date=t.start_date,
                end_date=t.end_date,
                status=t.status,
                task_type=t.task_type,
                priority=t.priority,
            )
            for t in tasks
        ],
    )
    logger.info(
        "report_built",
        kind="person",
        tasks=len(report.related_tasks),
        projects=len(report.related_projects),
        engineers=len(engineer_rows),
    )
    return report


def build_engineer_report(
    repo: Repository,
    engineer_id: str,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> EngineerReport:
    """
    Report for one engineer, matched exactly against task assignees.

    Hours prefer labor records at every level (total, per project, per task)
    and fall back to task-date estimates where none exist.
    """
    engineer_id = (engineer_id or "").strip()
    if not engineer_id:
        raise InvalidReportRequest("Engineer id is required")
    engineer = repo.get_engineer(engineer_id)
    if engineer is None:
        raise EngineerNotFoundError(engineer_id)
    start, end = parse_report_range(start_date, end_date)

    tasks = [t for t in repo.list_tasks() if engineer_id in _assignees(t)]
    if start is not None or end is not None:
        tasks = [t for t in tasks if task_in_range(t.start_date, t.end_date, start, end)]

    project_ids = _unique(t.project_id for t in tasks if t.project_id)
    projects = repo.list_projects(project_ids)
    projects_by_id = {p.id: p for p in projects}

    labor = _labor_in_range(repo.list_labor_costs(engineer_id=engineer_id), start, end)
    total_hours = _hours(labor, tasks)

    assets = repo.list_assets_owned_by(engineer_id, engineer.name, start, end)

    stakeholders = _unique(
        [t.stakeholder for t in tasks if t.stakeholder]
        + [p.sales_name for p in projects if p.sales_name]
    )

    project_stats = []
    for project_id in project_ids:
        project_tasks = [t for t in tasks if t.project_id == project_id]
        project_labor = [lc for lc in labor if lc.project_id == project_id]
        project_stats.append(
            EngineerProjectStats(
                project_id=project_id,
                project_name=_project_name(projects_by_id, project_id),
                task_count=len(project_tasks),
                completed_task_count=sum(1 for t in project_tasks if t.status == COMPLETED_STATUS),
                total_hours=round(_hours(project_labor, project_tasks), 2),
            )
        )

    task_rows = []
    for t in tasks:
        task_labor = [lc for lc in labor if lc.task_id == t.id]
        task_rows.append(
            EngineerTask(
                id=t.id,
                name=t.name,
                project_id=t.project_id,
                project_name=_project_name(projects_by_id, t.project_id),
                stakeholder=t.stakeholder,
                start_date=t.start_date,
                end_date=t.end_date,
                status=t.status,
                task_type=t.task_type,
                priority=t.priority,
                completed_date=t.completed_date,
                hours=round(_hours(task_labor, [t]), 2),
            )
        )

    report = EngineerReport(
        engineer_id=engineer.id,
        engineer_name=engineer.name,
        start_date=start_date,
        end_date=end_date,
        total_tasks=len(tasks),
        completed_tasks=sum(1 for t in tasks if t.status == COMPLETED_STATUS),
        total_projects=len(projects),
        total_hours=round(total_hours, 2),
        total_assets=len(assets),
        stakeholders=stakeholders,
        tasks=task_rows,
        assets=[
            EngineerAsset(
                id=a.id,
                name=a.name,
                type=a.type,
                maturity=a.maturity,
                owner_name=a.owner_name,
                description=a.description,
                reuse_count=a.reuse_count or 0,
                created_at=format_timestamp(a.created_at),
            )
            for a in assets
        ],
        projects=project_stats,
        labor_costs=[
            LaborCostRow(
                id=lc.id,
                task_id=lc.task_id,
                project_id=lc.project_id,
                work_date=lc.work_date,
                hours=float(lc.hours or 0),
                work_description=lc.work_description,
            )
            for lc in labor
        ],
    )
    logger.info("report_built", kind="engineer", engineer_id=engineer_id, tasks=len(tasks), hours=report.total_hours)
    return report
