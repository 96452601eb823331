from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from permitsync.app.permit_models import (
    PERMIT_STATUSES,
    REQUIRED_PERMIT_FIELDS,
    PermitRecord,
)
from permitsync.app.sync_debug import sync_debug


INVALID_INPUT_MESSAGE = "Permit data is incomplete or invalid."
MALFORMED_LIST_MESSAGE = "Server returned a malformed permit list."
INVALID_RESPONSE_MESSAGE = "Server returned an invalid permit."
MISSING_ID_MESSAGE = "A permit id is required."


class ValidationError(ValueError):
    """Raised when caller input or a server payload fails the permit shape checks."""

    def __init__(self, message: str, *, problems: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.problems = tuple(problems)


@dataclass(frozen=True, slots=True)
class PermitCheck:
    ok: bool
    problems: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PermitFilterResult:
    permits: tuple[PermitRecord, ...]
    dropped_indexes: tuple[int, ...] = ()

    @property
    def dropped_count(self) -> int:
        return len(self.dropped_indexes)


def check_permit(candidate: object) -> PermitCheck:
    if not isinstance(candidate, Mapping):
        return PermitCheck(ok=False, problems=("not an object",))

    problems: list[str] = []
    for field_name in REQUIRED_PERMIT_FIELDS:
        if field_name not in candidate:
            problems.append(f"{field_name} is missing")
            continue
        value = candidate[field_name]
        if not isinstance(value, str):
            problems.append(f"{field_name} must be a string")
        elif not value.strip():
            problems.append(f"{field_name} is blank")

    return PermitCheck(ok=not problems, problems=tuple(problems))


def is_valid_permit(candidate: object) -> bool:
    return check_permit(candidate).ok


def is_valid_status(status: object) -> bool:
    """True when ``status`` is one of the known permit statuses.

    Not part of the permit shape check: unknown statuses from the server are kept.
    """
    return isinstance(status, str) and status.strip() in PERMIT_STATUSES


def assert_valid_input(candidate: object) -> None:
    result = check_permit(candidate)
    if result.ok:
        return
    sync_debug("validation.input_rejected", problems=list(result.problems))
    raise ValidationError(INVALID_INPUT_MESSAGE, problems=result.problems)


def assert_valid_single_response(candidate: object) -> PermitRecord:
    result = check_permit(candidate)
    if not result.ok:
        sync_debug("validation.response_rejected", problems=list(result.problems))
        raise ValidationError(INVALID_RESPONSE_MESSAGE, problems=result.problems)
    return PermitRecord.from_mapping(candidate)  # type: ignore[arg-type]


def filter_valid_permits(candidates: Any) -> PermitFilterResult:
    """Keep the well-formed permits of a list response, in their original order.

    Only a non-list root raises; individual bad entries are dropped and their
    positions reported through the sync event log.
    """
    if not isinstance(candidates, list):
        sync_debug(
            "validation.list_rejected",
            payload_type=type(candidates).__name__,
        )
        raise ValidationError(MALFORMED_LIST_MESSAGE)

    kept: list[PermitRecord] = []
    dropped: list[int] = []
    seen_ids: set[str] = set()
    for index, candidate in enumerate(candidates):
        if not is_valid_permit(candidate):
            dropped.append(index)
            continue
        record = PermitRecord.from_mapping(candidate)
        # The list is unique by id; later repeats are dropped.
        if record.permit_id in seen_ids:
            dropped.append(index)
            continue
        seen_ids.add(record.permit_id)
        kept.append(record)

    if dropped:
        sync_debug(
            "validation.entries_dropped",
            total=len(candidates),
            dropped=len(dropped),
            indexes=dropped,
        )
    return PermitFilterResult(permits=tuple(kept), dropped_indexes=tuple(dropped))


def require_permit_id(permit_id: object) -> str:
    normalized = permit_id.strip() if isinstance(permit_id, str) else ""
    if not normalized:
        raise ValidationError(MISSING_ID_MESSAGE)
    return normalized
