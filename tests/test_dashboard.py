"""
Tests for dashboard filtering, sorting and status counts.
"""

import pytest

from apptrack.dashboard import filter_records, sort_records, status_counts
from apptrack.models import ApplicationRecord, ApplicationStatus


@pytest.fixture
def records():
    def make(rid, company, role, status, date):
        return ApplicationRecord(rid, company, role, status, date, "", "")

    return [
        make("1", "Acme", "Backend Developer", ApplicationStatus.INTERVIEW, "2024-01-15T15:30:00.000Z"),
        make("2", "globex", "Data Analyst", ApplicationStatus.REJECTED, "2024-02-01T09:00:00.000Z"),
        make("3", "Initech", "Platform Engineer", ApplicationStatus.INTERVIEW, None),
        make("4", "Hooli", "QA Engineer", ApplicationStatus.APPLIED, "2023-12-31T23:59:59.000Z"),
    ]


def test_filter_by_status(records):
    assert [r.id for r in filter_records(records, status="Interview")] == ["1", "3"]
    assert len(filter_records(records, status="All")) == 4
    assert len(filter_records(records)) == 4


def test_filter_by_search_matches_company_or_role(records):
    assert [r.id for r in filter_records(records, search="ENGINEER")] == ["3", "4"]
    assert [r.id for r in filter_records(records, search="glob")] == ["2"]


def test_filter_combines_status_and_search(records):
    result = filter_records(records, status="interview", search="platform")
    assert [r.id for r in result] == ["3"]


def test_filter_rejects_unknown_status(records):
    with pytest.raises(ValueError):
        filter_records(records, status="Ghosted")


def test_sort_by_date_newest_first_undated_last(records):
    assert [r.id for r in sort_records(records)] == ["2", "1", "4", "3"]
    assert [r.id for r in sort_records(records, order="asc")] == ["4", "1", "2", "3"]


def test_sort_by_company_ignores_case(records):
    result = sort_records(records, sort_by="company", order="asc")
    assert [r.company_name for r in result] == ["Acme", "globex", "Hooli", "Initech"]


def test_sort_rejects_unknown_arguments(records):
    with pytest.raises(ValueError):
        sort_records(records, sort_by="salary")
    with pytest.raises(ValueError):
        sort_records(records, order="sideways")


def test_status_counts_include_zeroes(records):
    assert status_counts(records) == {
        "Applied": 1,
        "Application Received": 0,
        "Interview": 2,
        "Rejected": 1,
        "Offer": 0,
    }
