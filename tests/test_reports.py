"""
Tests for the person and engineer reports.

Covers name matching, date-range filtering of tasks/projects/labor, and the
labor-first hours rule with its task-date fallback.
"""

from datetime import datetime

import pytest

from rdtrack.services.date_rules import derived_task_hours, parse_loose_datetime, parse_report_range
from rdtrack.services.errors import EngineerNotFoundError, InvalidReportRequest
from rdtrack.services.reports import build_engineer_report, build_person_report


@pytest.fixture
def team(make):
    make.engineer("eng-alice", "Alice Wang")
    make.engineer("eng-bob", "Bob Li")
    make.project("p1", name="Gateway", sales_name="Carol Smith", created_at=datetime(2024, 2, 1))
    make.project("p2", name="Sensor", sales_name="Dan", created_at=datetime(2024, 2, 15))
    make.task(
        "t1",
        project_id="p1",
        assigned_to=["eng-alice"],
        stakeholder="Carol Smith",
        start_date="2024-03-01",
        end_date="2024-03-03",
        status="completed",
        created_at=datetime(2024, 3, 1),
    )
    make.task(
        "t2",
        project_id="p2",
        assigned_to=["eng-alice", "eng-bob"],
        start_date="2024-03-10",
        status="in_progress",
        created_at=datetime(2024, 3, 2),
    )
    make.task("t3", project_id="p2", assigned_to=["eng-bob"], stakeholder="Erin", created_at=datetime(2024, 3, 3))
    return make


# =============================================================================
# Date rules
# =============================================================================


class TestDateRules:
    def test_parses_supported_formats(self):
        assert parse_loose_datetime("2024-03-01") == datetime(2024, 3, 1)
        assert parse_loose_datetime("2024-03-01 08:30:00") == datetime(2024, 3, 1, 8, 30)
        assert parse_loose_datetime("2024-03-01T08:30:00Z") == datetime(2024, 3, 1, 8, 30)
        assert parse_loose_datetime("2024/03/01") == datetime(2024, 3, 1)

    def test_unparsable_is_absent(self):
        assert parse_loose_datetime("next week") is None
        assert parse_loose_datetime("") is None
        assert parse_loose_datetime(None) is None

    def test_end_bound_covers_whole_day(self):
        start, end = parse_report_range("2024-03-01", "2024-03-31")
        assert start == datetime(2024, 3, 1)
        assert end == datetime(2024, 4, 1)

    def test_unparsable_bounds_mean_no_bound(self):
        assert parse_report_range("soon", None) == (None, None)

    def test_derived_hours(self):
        assert derived_task_hours("2024-03-01", "2024-03-03") == 48
        assert derived_task_hours("2024-03-01 09:00:00", "2024-03-01 09:30:00") == 1
        assert derived_task_hours("2024-03-01", None) == 1
        assert derived_task_hours(None, "2024-03-01") == 0
        assert derived_task_hours("bad", "2024-03-01") == 0

    def test_zero_and_negative_duration_floor_to_one_hour(self):
        assert derived_task_hours("2024-03-01", "2024-03-01") == 1
        assert derived_task_hours("2024-03-05", "2024-03-01") == 1


# =============================================================================
# Person report
# =============================================================================


class TestPersonReport:
    def test_stakeholder_match(self, team, repo):
        report = build_person_report(repo, "Carol")

        assert [t.id for t in report.related_tasks] == ["t1"]
        assert [p.id for p in report.related_projects] == ["p1"]
        assert report.related_projects[0].task_count == 1
        assert len(report.engineer_hours) == 1
        alice = report.engineer_hours[0]
        assert alice.engineer_id == "eng-alice"
        assert alice.engineer_name == "Alice Wang"
        assert alice.total_hours == 48
        assert alice.task_count == 1
        assert alice.project_count == 1

    def test_assignee_matched_by_display_name(self, team, repo):
        report = build_person_report(repo, "Alice")

        assert [t.id for t in report.related_tasks] == ["t1", "t2"]
        rows = [(r.engineer_id, r.total_hours, r.task_count) for r in report.engineer_hours]
        assert rows == [("eng-alice", 49, 2), ("eng-bob", 1, 1)]

    def test_assignee_matched_by_id(self, team, repo):
        report = build_person_report(repo, "eng-bob")
        assert [t.id for t in report.related_tasks] == ["t2", "t3"]

    def test_labor_hours_preferred_over_task_dates(self, team, repo):
        team.labor("l1", "eng-alice", 5, "2024-03-02", task_id="t1")
        team.labor("l2", "eng-alice", 2.5, "2024-03-11", project_id="p2")

        report = build_person_report(repo, "Alice")

        hours = {r.engineer_id: r.total_hours for r in report.engineer_hours}
        assert hours["eng-alice"] == 7.5
        # Bob has no labor rows, so his estimate still comes from task dates
        assert hours["eng-bob"] == 1

    def test_labor_outside_range_ignored(self, team, repo):
        team.labor("l1", "eng-alice", 5, "2024-04-20", task_id="t1")

        report = build_person_report(repo, "Carol", "2024-03-01", "2024-03-31")

        assert report.engineer_hours[0].total_hours == 48

    def test_start_after_all_tasks_keeps_projects_created_in_range(self, team, repo):
        team.project("p3", name="Late", sales_name="Carol Smith", created_at=datetime(2024, 5, 10))

        report = build_person_report(repo, "Carol", start_date="2024-05-01")

        assert report.engineer_hours == []
        assert report.related_tasks == []
        assert [p.id for p in report.related_projects] == ["p3"]
        assert report.related_projects[0].task_count == 0

    def test_unparsable_task_dates_excluded_only_when_filtering(self, make, repo):
        make.engineer("e1", "Frank")
        make.task("t9", assigned_to=["e1"], start_date="whenever", end_date="later")

        assert [t.id for t in build_person_report(repo, "Frank").related_tasks] == ["t9"]
        assert build_person_report(repo, "Frank", "2024-01-01").related_tasks == []

    def test_end_date_inclusive_of_end_day(self, make, repo):
        make.engineer("e1", "Grace")
        make.task("t1", assigned_to=["e1"], start_date="2024-03-01", end_date="2024-03-31 18:00:00")

        report = build_person_report(repo, "Grace", "2024-03-01", "2024-03-31")

        assert [t.id for t in report.related_tasks] == ["t1"]

    def test_sorted_by_hours_then_task_count(self, make, repo):
        make.engineer("e1", "Team A")
        make.engineer("e2", "Team B")
        make.engineer("e3", "Team C")
        make.task("t1", assigned_to=["e1", "e2", "e3"], stakeholder="Helen", start_date="2024-03-01")
        make.task("t2", assigned_to=["e2"], stakeholder="Helen")
        make.task("t3", assigned_to=["e3"], stakeholder="Helen", start_date="2024-03-01", end_date="2024-03-02")

        report = build_person_report(repo, "Helen")

        assert [r.engineer_id for r in report.engineer_hours] == ["e3", "e2", "e1"]

    def test_unknown_engineer_id_falls_back_to_id_as_name(self, make, repo):
        make.task("t1", assigned_to=["ghost"], stakeholder="Ivy", start_date="2024-03-01")
        report = build_person_report(repo, "Ivy")
        assert report.engineer_hours[0].engineer_name == "ghost"

    def test_blank_name_rejected(self, repo):
        with pytest.raises(InvalidReportRequest):
            build_person_report(repo, "   ")


# =============================================================================
# Engineer report
# =============================================================================


class TestEngineerReport:
    def test_only_labor_entries(self, make, repo):
        make.engineer("e1", "Judy")
        make.labor("l1", "e1", 2.5, "2024-03-04")
        make.labor("l2", "e1", 4, "2024-03-05")
        make.labor("l3", "someone-else", 8, "2024-03-05")

        report = build_engineer_report(repo, "e1")

        assert report.total_hours == 6.5
        assert report.total_tasks == 0
        assert sorted(lc.id for lc in report.labor_costs) == ["l1", "l2"]

    def test_undated_labor_counts_only_without_range(self, make, repo):
        make.engineer("e1", "Judy")
        make.labor("l1", "e1", 2, "2024-03-04")
        make.labor("l2", "e1", 3, None)
        make.labor("l3", "e1", 5, "sometime")

        unbounded = build_engineer_report(repo, "e1")
        bounded = build_engineer_report(repo, "e1", "2024-03-01", "2024-03-31")

        assert unbounded.total_hours == 10
        assert sorted(lc.id for lc in unbounded.labor_costs) == ["l1", "l2", "l3"]
        assert bounded.total_hours == 2
        assert [lc.id for lc in bounded.labor_costs] == ["l1"]

    def test_totals_and_breakdowns(self, team, repo):
        team.labor("l1", "eng-alice", 3, "2024-03-02", task_id="t1", project_id="p1")

        report = build_engineer_report(repo, "eng-alice")

        assert report.engineer_name == "Alice Wang"
        assert report.total_tasks == 2
        assert report.completed_tasks == 1
        assert report.total_projects == 2
        # Labor rows exist for the engineer, so the total is the labor sum
        assert report.total_hours == 3
        task_hours = {t.id: t.hours for t in report.tasks}
        assert task_hours == {"t1": 3, "t2": 1}
        projects = {p.project_id: p for p in report.projects}
        assert projects["p1"].total_hours == 3
        assert projects["p1"].completed_task_count == 1
        assert projects["p1"].project_name == "Gateway"
        assert projects["p2"].total_hours == 1
        assert projects["p2"].task_count == 1

    def test_derived_total_without_labor(self, team, repo):
        report = build_engineer_report(repo, "eng-alice")
        assert report.total_hours == 49

    def test_stakeholders_from_tasks_then_projects(self, team, repo):
        report = build_engineer_report(repo, "eng-bob")
        assert report.stakeholders == ["Erin", "Dan"]

    def test_owned_assets_by_id_or_name_within_range(self, team, repo):
        team.asset("a1", owner_id="eng-alice", created_at=datetime(2024, 3, 5))
        team.asset("a2", owner_name="Alice Wang", created_at=datetime(2024, 3, 20))
        team.asset("a3", owner_id="eng-alice", created_at=datetime(2024, 5, 1))
        team.asset("a4", owner_id="eng-bob", created_at=datetime(2024, 3, 6))

        report = build_engineer_report(repo, "eng-alice", "2024-03-01", "2024-03-31")

        assert [a.id for a in report.assets] == ["a2", "a1"]
        assert report.total_assets == 2

    def test_date_range_filters_tasks(self, team, repo):
        report = build_engineer_report(repo, "eng-alice", "2024-03-05", None)
        assert [t.id for t in report.tasks] == ["t2"]
        assert report.total_projects == 1

    def test_exact_assignee_match(self, make, repo):
        make.engineer("e1", "Ken")
        make.task("t1", assigned_to=["e10"], start_date="2024-03-01")
        assert build_engineer_report(repo, "e1").total_tasks == 0

    def test_unknown_engineer(self, repo):
        with pytest.raises(EngineerNotFoundError):
            build_engineer_report(repo, "nobody")

    def test_blank_engineer_id(self, repo):
        with pytest.raises(InvalidReportRequest):
            build_engineer_report(repo, "")
