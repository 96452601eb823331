from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from uuid import uuid4


PERMIT_STATUSES: tuple[str, ...] = (
    "SUBMITTED",
    "PENDING",
    "REVIEW",
    "UNDER_REVIEW",
    "APPROVED",
    "REJECTED",
    "EXPIRED",
)

# Wire keys served by the permit API.
PERMIT_ID_KEY = "id"
PERMIT_NAME_KEY = "permitName"
APPLICANT_NAME_KEY = "applicantName"
PERMIT_TYPE_KEY = "permitType"
STATUS_KEY = "status"
SUBMITTED_DATE_KEY = "submittedDate"

REQUIRED_PERMIT_FIELDS: tuple[str, ...] = (
    PERMIT_ID_KEY,
    PERMIT_NAME_KEY,
    APPLICANT_NAME_KEY,
    PERMIT_TYPE_KEY,
    STATUS_KEY,
)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value).strip()


def new_permit_id() -> str:
    return uuid4().hex


@dataclass(frozen=True, slots=True)
class PermitRecord:
    permit_id: str
    permit_name: str
    applicant_name: str
    permit_type: str
    status: str
    submitted_date: str = ""

    @property
    def display_name(self) -> str:
        return self.permit_name or self.permit_id

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any]) -> "PermitRecord":
        return cls(
            permit_id=_as_text(value.get(PERMIT_ID_KEY)),
            permit_name=_as_text(value.get(PERMIT_NAME_KEY)),
            applicant_name=_as_text(value.get(APPLICANT_NAME_KEY)),
            permit_type=_as_text(value.get(PERMIT_TYPE_KEY)),
            status=_as_text(value.get(STATUS_KEY)),
            submitted_date=_as_text(value.get(SUBMITTED_DATE_KEY)),
        )

    def to_mapping(self) -> dict[str, str]:
        payload = {
            PERMIT_ID_KEY: self.permit_id,
            PERMIT_NAME_KEY: self.permit_name,
            APPLICANT_NAME_KEY: self.applicant_name,
            PERMIT_TYPE_KEY: self.permit_type,
            STATUS_KEY: self.status,
        }
        if self.submitted_date:
            payload[SUBMITTED_DATE_KEY] = self.submitted_date
        return payload


def with_permit_id(candidate: Mapping[str, Any]) -> dict[str, Any]:
    """Copy ``candidate`` and assign a fresh id when it has none."""
    payload = dict(candidate)
    if not _as_text(payload.get(PERMIT_ID_KEY)):
        payload[PERMIT_ID_KEY] = new_permit_id()
    return payload
