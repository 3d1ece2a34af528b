"""Field rules for project records.

Pure domain functions: no DB access, deterministic. Every function collects
all violations instead of stopping at the first one, so callers can report
the complete list back to the client.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

# Wire name -> column name. Snake-case keys are accepted for older clients.
UPDATABLE_FIELDS: dict[str, str] = {
    "name": "name",
    "groupName": "group_name",
    "group_name": "group_name",
    "peopleCount": "people_count",
    "people_count": "people_count",
}

_COLUMN_LABELS = {"name": "name", "group_name": "groupName", "people_count": "peopleCount"}

# Column limits of the projects table.
MAX_TEXT_LENGTH = 255
MAX_UUID_LENGTH = 64
MAX_PEOPLE_COUNT = 2**31 - 1


@dataclass
class ProjectDraft:
    """A validated, normalised project ready to be stored."""

    name: str
    group_name: str
    people_count: int
    owner_uuid: str
    submit_time: datetime
    members: list[str]
    leader_uuid: str


def clean_text(value: Any) -> str | None:
    """Return the trimmed string, or None if ``value`` is not a non-empty string."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def is_positive_int(value: Any) -> bool:
    """True for ints in 1..MAX_PEOPLE_COUNT (a 32-bit INTEGER column). Bools are rejected."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 < value <= MAX_PEOPLE_COUNT


def people_count_error(value: Any) -> str | None:
    if is_positive_int(value):
        return None
    if isinstance(value, int) and not isinstance(value, bool) and value > MAX_PEOPLE_COUNT:
        return f"peopleCount must be at most {MAX_PEOPLE_COUNT}"
    return "peopleCount must be an integer greater than 0"


def checked_text(value: Any, label: str, max_length: int, errors: list[str]) -> str | None:
    """Return the trimmed text, appending a violation to ``errors`` if it is blank or too long."""
    cleaned = clean_text(value)
    if cleaned is None:
        errors.append(f"{label} must be a non-empty string")
    elif len(cleaned) > max_length:
        errors.append(f"{label} must be at most {max_length} characters")
        return None
    return cleaned


def parse_submit_time(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or epoch milliseconds into an aware datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def resolve_members(members: list[str] | None, owner_uuid: str) -> list[str]:
    """De-duplicate the supplied members and make sure the owner is one of them."""
    resolved: list[str] = []
    for uuid in members or []:
        if uuid not in resolved:
            resolved.append(uuid)
    if owner_uuid not in resolved:
        resolved.append(owner_uuid)
    return resolved


def validate_new_project(
    *,
    name: Any,
    group_name: Any,
    people_count: Any,
    owner_uuid: Any,
    submit_time: Any,
    members: Any = None,
    leader_uuid: Any = None,
) -> tuple[ProjectDraft | None, list[str]]:
    """Validate a submission. Returns ``(draft, [])`` or ``(None, errors)``."""
    errors: list[str] = []

    clean_name = checked_text(name, "name", MAX_TEXT_LENGTH, errors)

    count_error = people_count_error(people_count)
    if count_error:
        errors.append(count_error)

    clean_group = checked_text(group_name, "groupName", MAX_TEXT_LENGTH, errors)
    clean_owner = checked_text(owner_uuid, "ownerUuid", MAX_UUID_LENGTH, errors)

    parsed_time = None
    if submit_time is None or submit_time == "":
        errors.append("submitTime is required")
    else:
        parsed_time = parse_submit_time(submit_time)
        if parsed_time is None:
            errors.append("submitTime is not a valid date")

    clean_members: list[str] | None = None
    if members is not None:
        if not isinstance(members, list):
            errors.append("members must be a list of user uuids")
        else:
            clean_members = []
            for index, member in enumerate(members):
                cleaned = checked_text(member, f"members[{index}]", MAX_UUID_LENGTH, errors)
                if cleaned is not None:
                    clean_members.append(cleaned)

    clean_leader = None
    if leader_uuid is not None:
        clean_leader = checked_text(leader_uuid, "leaderUuid", MAX_UUID_LENGTH, errors)

    if errors:
        return None, errors

    return (
        ProjectDraft(
            name=clean_name,
            group_name=clean_group,
            people_count=people_count,
            owner_uuid=clean_owner,
            submit_time=parsed_time,
            members=resolve_members(clean_members, clean_owner),
            leader_uuid=clean_leader or clean_owner,
        ),
        [],
    )


def validate_project_update(
    *,
    project_id: Any,
    requesting_uuid: Any,
    fields: Any,
) -> tuple[dict[str, Any], list[str]]:
    """Validate an update request.

    Unknown keys in ``fields`` are ignored. Returns ``(changes, errors)``
    where ``changes`` maps column names to normalised values.
    """
    errors: list[str] = []
    changes: dict[str, Any] = {}

    if clean_text(project_id) is None:
        errors.append("projectId must be a non-empty string")
    if clean_text(requesting_uuid) is None:
        errors.append("requestingUuid must be a non-empty string")

    if not isinstance(fields, Mapping):
        errors.append("fields must be an object")
        return {}, errors

    recognised = {UPDATABLE_FIELDS[key]: value for key, value in fields.items() if key in UPDATABLE_FIELDS}
    if not recognised:
        errors.append("no valid fields to update (expected name, groupName or peopleCount)")

    for column, value in recognised.items():
        label = _COLUMN_LABELS[column]
        if column == "people_count":
            count_error = people_count_error(value)
            if count_error:
                errors.append(count_error)
            else:
                changes[column] = value
        else:
            cleaned = checked_text(value, label, MAX_TEXT_LENGTH, errors)
            if cleaned is not None:
                changes[column] = cleaned

    if errors:
        return {}, errors
    return changes, []
