"""
Dashboard helpers - filtering, sorting and counting stored applications
"""

from collections import Counter
from typing import Dict, Iterable, List, Optional

from apptrack.models import ApplicationRecord, ApplicationStatus

ALL_STATUSES = "All"
SORT_FIELDS = ("date", "company")
SORT_ORDERS = ("asc", "desc")


def filter_records(
    records: Iterable[ApplicationRecord],
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> List[ApplicationRecord]:
    """
    Filter records by status and a free-text search term.

    Args:
        records: Records to filter
        status: "All", None, or an ApplicationStatus value
        search: Case-insensitive substring matched against company and role

    Raises:
        ValueError: If status is not a known status
    """
    wanted = None
    if status and status != ALL_STATUSES:
        wanted = ApplicationStatus.coerce(status)

    term = (search or "").strip().lower()
    result = []
    for record in records:
        if wanted is not None and record.application_status != wanted:
            continue
        if term and term not in record.company_name.lower() and term not in record.job_profile.lower():
            continue
        result.append(record)
    return result


def sort_records(
    records: Iterable[ApplicationRecord], sort_by: str = "date", order: str = "desc"
) -> List[ApplicationRecord]:
    """
    Sort records by date or company name.

    Records without a date always sort last.
    """
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"Unknown sort field: {sort_by}")
    if order not in SORT_ORDERS:
        raise ValueError(f"Unknown sort order: {order}")

    reverse = order == "desc"
    records = list(records)

    if sort_by == "company":
        return sorted(records, key=lambda r: r.company_name.lower(), reverse=reverse)

    # ISO-8601 UTC strings sort chronologically
    dated = sorted((r for r in records if r.date), key=lambda r: r.date, reverse=reverse)
    undated = [r for r in records if not r.date]
    return dated + undated


def status_counts(records: Iterable[ApplicationRecord]) -> Dict[str, int]:
    """Count records per status, including zero counts."""
    counts = Counter(r.application_status for r in records)
    return {status.value: counts.get(status, 0) for status in ApplicationStatus}
