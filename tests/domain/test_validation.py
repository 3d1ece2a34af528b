"""Tests for project field rules.

Pure functions: every violation is reported, none short-circuits the rest.
"""
from datetime import UTC, datetime, timedelta, timezone

import pytest

from projectdesk.domain.validation import (
    MAX_PEOPLE_COUNT,
    MAX_TEXT_LENGTH,
    MAX_UUID_LENGTH,
    clean_text,
    is_positive_int,
    parse_submit_time,
    resolve_members,
    validate_new_project,
    validate_project_update,
)

pytestmark = pytest.mark.unit


def _submission(**overrides):
    values = {
        "name": "Demo",
        "group_name": "G1",
        "people_count": 3,
        "owner_uuid": "u-001",
        "submit_time": "2024-05-01T10:00:00Z",
    }
    values.update(overrides)
    return values


class TestHelpers:
    def test_clean_text(self):
        assert clean_text("  Demo ") == "Demo"
        assert clean_text("   ") is None
        assert clean_text("") is None
        assert clean_text(42) is None
        assert clean_text(None) is None

    def test_is_positive_int(self):
        assert is_positive_int(1)
        assert not is_positive_int(0)
        assert not is_positive_int(-2)
        assert not is_positive_int(2.5)
        assert not is_positive_int("3")
        assert not is_positive_int(True)

    def test_parse_submit_time_iso_with_offset(self):
        parsed = parse_submit_time("2024-05-01T18:00:00+08:00")
        assert parsed == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)
        assert parsed.tzinfo == UTC

    def test_parse_submit_time_naive_is_utc(self):
        assert parse_submit_time("2024-05-01T10:00:00") == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)

    def test_parse_submit_time_epoch_millis(self):
        assert parse_submit_time(1714557600000) == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)

    def test_parse_submit_time_datetime(self):
        value = datetime(2024, 5, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert parse_submit_time(value) == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)

    @pytest.mark.parametrize("bad", ["not a date", "2024-13-45", True, [], {}])
    def test_parse_submit_time_rejects_garbage(self, bad):
        assert parse_submit_time(bad) is None

    def test_resolve_members_appends_owner(self):
        assert resolve_members(["u-002"], "u-001") == ["u-002", "u-001"]

    def test_resolve_members_dedupes_and_keeps_order(self):
        assert resolve_members(["u-002", "u-001", "u-002"], "u-001") == ["u-002", "u-001"]

    def test_resolve_members_defaults_to_owner(self):
        assert resolve_members(None, "u-001") == ["u-001"]
        assert resolve_members([], "u-001") == ["u-001"]


class TestValidateNewProject:
    def test_minimal_submission(self):
        draft, errors = validate_new_project(**_submission())

        assert errors == []
        assert draft.name == "Demo"
        assert draft.group_name == "G1"
        assert draft.people_count == 3
        assert draft.owner_uuid == "u-001"
        assert draft.members == ["u-001"]
        assert draft.leader_uuid == "u-001"
        assert draft.submit_time == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)

    def test_strings_are_trimmed(self):
        draft, errors = validate_new_project(**_submission(name="  Demo  ", group_name=" G1 ", owner_uuid=" u-001 "))
        assert errors == []
        assert (draft.name, draft.group_name, draft.owner_uuid) == ("Demo", "G1", "u-001")

    def test_explicit_leader_and_members(self):
        draft, errors = validate_new_project(**_submission(members=["u-002", "u-003"], leader_uuid="u-002"))
        assert errors == []
        assert draft.leader_uuid == "u-002"
        assert draft.members == ["u-002", "u-003", "u-001"]

    def test_every_violation_is_reported(self):
        draft, errors = validate_new_project(
            name="  ",
            group_name=None,
            people_count=0,
            owner_uuid="",
            submit_time=None,
        )
        assert draft is None
        assert errors == [
            "name must be a non-empty string",
            "peopleCount must be an integer greater than 0",
            "groupName must be a non-empty string",
            "ownerUuid must be a non-empty string",
            "submitTime is required",
        ]

    @pytest.mark.parametrize("count", [0, -1, 2.5, "3", True, None])
    def test_people_count_must_be_positive_int(self, count):
        draft, errors = validate_new_project(**_submission(people_count=count))
        assert draft is None
        assert errors == ["peopleCount must be an integer greater than 0"]

    def test_unparseable_submit_time(self):
        draft, errors = validate_new_project(**_submission(submit_time="yesterday"))
        assert draft is None
        assert errors == ["submitTime is not a valid date"]

    def test_members_must_be_a_list_of_strings(self):
        _, errors = validate_new_project(**_submission(members="u-002"))
        assert errors == ["members must be a list of user uuids"]

        _, errors = validate_new_project(**_submission(members=["u-002", "", 7]))
        assert errors == ["members[1] must be a non-empty string", "members[2] must be a non-empty string"]

    def test_blank_leader_is_rejected(self):
        _, errors = validate_new_project(**_submission(leader_uuid="  "))
        assert errors == ["leaderUuid must be a non-empty string"]


class TestValidateProjectUpdate:
    def test_camel_case_fields(self):
        changes, errors = validate_project_update(
            project_id="proj-1-abcdef",
            requesting_uuid="u-001",
            fields={"name": " New ", "groupName": "G2", "peopleCount": 5},
        )
        assert errors == []
        assert changes == {"name": "New", "group_name": "G2", "people_count": 5}

    def test_snake_case_fields_accepted(self):
        changes, errors = validate_project_update(
            project_id="proj-1-abcdef",
            requesting_uuid="u-001",
            fields={"group_name": "G2", "people_count": 4},
        )
        assert errors == []
        assert changes == {"group_name": "G2", "people_count": 4}

    def test_unknown_fields_are_ignored(self):
        changes, errors = validate_project_update(
            project_id="proj-1-abcdef",
            requesting_uuid="u-001",
            fields={"peopleCount": 5, "status": "approved", "ownerUuid": "u-999"},
        )
        assert errors == []
        assert changes == {"people_count": 5}

    def test_only_unknown_fields_is_an_error(self):
        changes, errors = validate_project_update(
            project_id="proj-1-abcdef",
            requesting_uuid="u-001",
            fields={"status": "approved"},
        )
        assert changes == {}
        assert errors == ["no valid fields to update (expected name, groupName or peopleCount)"]

    def test_invalid_values_are_all_reported(self):
        changes, errors = validate_project_update(
            project_id="proj-1-abcdef",
            requesting_uuid="u-001",
            fields={"name": "", "peopleCount": 0},
        )
        assert changes == {}
        assert errors == [
            "name must be a non-empty string",
            "peopleCount must be an integer greater than 0",
        ]

    def test_missing_identifiers_and_non_object_fields(self):
        changes, errors = validate_project_update(project_id=None, requesting_uuid=" ", fields=["name"])
        assert changes == {}
        assert errors == [
            "projectId must be a non-empty string",
            "requestingUuid must be a non-empty string",
            "fields must be an object",
        ]


class TestColumnLimits:
    def test_people_count_above_int32_rejected(self):
        assert is_positive_int(MAX_PEOPLE_COUNT)
        assert not is_positive_int(MAX_PEOPLE_COUNT + 1)

        draft, errors = validate_new_project(**_submission(people_count=2**70))

        assert draft is None
        assert errors == [f"peopleCount must be at most {MAX_PEOPLE_COUNT}"]

    def test_overlong_text_and_uuids_all_reported(self):
        draft, errors = validate_new_project(
            **_submission(
                name="n" * (MAX_TEXT_LENGTH + 1),
                group_name="g" * MAX_TEXT_LENGTH,
                leader_uuid="u-" + "1" * MAX_UUID_LENGTH,
                members=["u-" + "2" * MAX_UUID_LENGTH],
            )
        )

        assert draft is None
        assert errors == [
            f"name must be at most {MAX_TEXT_LENGTH} characters",
            f"members[0] must be at most {MAX_UUID_LENGTH} characters",
            f"leaderUuid must be at most {MAX_UUID_LENGTH} characters",
        ]

    def test_length_measured_after_trimming(self):
        draft, errors = validate_new_project(**_submission(name="  " + "n" * MAX_TEXT_LENGTH + "  "))
        assert errors == []
        assert len(draft.name) == MAX_TEXT_LENGTH

    def test_update_limits(self):
        changes, errors = validate_project_update(
            project_id="proj-1-abcdef",
            requesting_uuid="u-001",
            fields={"groupName": "g" * (MAX_TEXT_LENGTH + 1), "peopleCount": 2**70},
        )

        assert changes == {}
        assert errors == [
            f"groupName must be at most {MAX_TEXT_LENGTH} characters",
            f"peopleCount must be at most {MAX_PEOPLE_COUNT}",
        ]
