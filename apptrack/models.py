"""
Models - Application records produced from mailbox messages

An ApplicationRecord is created once per Gmail message and never mutated.
A record set is a plain dict keyed by the originating message id.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ApplicationStatus(str, Enum):
    """Closed set of application states, valued by their display string."""

    APPLIED = "Applied"
    APPLICATION_RECEIVED = "Application Received"
    INTERVIEW = "Interview"
    REJECTED = "Rejected"
    OFFER = "Offer"

    @classmethod
    def coerce(cls, value: Any) -> "ApplicationStatus":
        """
        Map a free-form status string onto a member.

        Matching ignores case and surrounding whitespace.

        Raises:
            ValueError: If the value is not one of the five statuses
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for status in cls:
                if status.value.lower() == wanted:
                    return status
        raise ValueError(f"Unknown application status: {value!r}")


DEFAULT_STATUS = ApplicationStatus.APPLIED
UNKNOWN_COMPANY = "Unknown Company"
UNKNOWN_POSITION = "Unknown Position"


@dataclass(frozen=True)
class ClassificationFields:
    """The three fields either classifier derives from a message."""

    company_name: str
    job_profile: str
    status: ApplicationStatus


@dataclass(frozen=True)
class ApplicationRecord:
    """One classified job-application email."""

    id: str
    company_name: str
    job_profile: str
    application_status: ApplicationStatus
    date: Optional[str]
    original_subject: str
    sender: str

    @classmethod
    def from_fields(
        cls,
        msg_id: str,
        fields: ClassificationFields,
        date: Optional[str],
        original_subject: str,
        sender: str,
    ) -> "ApplicationRecord":
        return cls(
            id=msg_id,
            company_name=fields.company_name,
            job_profile=fields.job_profile,
            application_status=fields.status,
            date=date,
            original_subject=original_subject,
            sender=sender,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialise using the JSON keys the dashboard consumes."""
        return {
            "id": self.id,
            "companyName": self.company_name,
            "jobProfile": self.job_profile,
            "applicationStatus": self.application_status.value,
            "date": self.date,
            "originalSubject": self.original_subject,
            "from": self.sender,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApplicationRecord":
        return cls(
            id=data["id"],
            company_name=data.get("companyName") or UNKNOWN_COMPANY,
            job_profile=data.get("jobProfile") or UNKNOWN_POSITION,
            application_status=ApplicationStatus.coerce(
                data.get("applicationStatus", DEFAULT_STATUS.value)
            ),
            date=data.get("date"),
            original_subject=data.get("originalSubject", ""),
            sender=data.get("from", ""),
        )


# Record sets are plain dicts: message id -> record
RecordSet = Dict[str, ApplicationRecord]
