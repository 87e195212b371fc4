from __future__ import annotations

from datetime import datetime, timezone

from laborportal.services.normalize import (
    EPOCH,
    UNKNOWN_NAME,
    legacy_applicant_id,
    normalize_applicant,
    normalize_applicants,
    normalize_job,
)

FALLBACK_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_string_applicant_becomes_named_user_without_contact() -> None:
    applicant = normalize_applicant("alice", fallback_id="legacy_1", fallback_time=FALLBACK_TIME)

    assert applicant.id == "legacy_1"
    assert applicant.name == "alice"
    assert applicant.user == "alice"
    assert applicant.contact == ""
    assert applicant.applied_at == FALLBACK_TIME


def test_mapping_applicant_prefers_stored_fields() -> None:
    applicant = normalize_applicant(
        {"id": "app_1", "name": " Bob ", "contact": "5550001234", "appliedAt": "2024-01-02T03:04:05.000Z"},
        fallback_id="legacy_1",
        fallback_time=FALLBACK_TIME,
    )

    assert applicant.id == "app_1"
    assert applicant.name == "Bob"
    assert applicant.contact == "5550001234"
    assert applicant.applied_at == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def test_mapping_applicant_falls_back_to_user_then_unknown() -> None:
    from_user = normalize_applicant({"user": "carol"}, fallback_id="x", fallback_time=FALLBACK_TIME)
    empty = normalize_applicant({}, fallback_id="y", fallback_time=FALLBACK_TIME)

    assert from_user.name == "carol"
    assert from_user.id == "x"
    assert empty.name == UNKNOWN_NAME
    assert empty.applied_at == FALLBACK_TIME


def test_unrecognized_applicant_shape_becomes_unknown() -> None:
    applicant = normalize_applicant(42, fallback_id="z", fallback_time=FALLBACK_TIME)

    assert applicant.name == UNKNOWN_NAME
    assert applicant.contact == ""


def test_fallback_ids_are_stable_per_job_and_position() -> None:
    first = normalize_applicants(["a", "b"], job_id="job_1", fallback_time=FALLBACK_TIME)
    second = normalize_applicants(["a", "b"], job_id="job_1", fallback_time=FALLBACK_TIME)

    assert [item.id for item in first] == [item.id for item in second]
    assert first[0].id == legacy_applicant_id("job_1", 0)
    assert first[0].id != first[1].id


def test_non_list_applicants_normalize_to_empty() -> None:
    assert normalize_applicants(None, job_id="job_1", fallback_time=FALLBACK_TIME) == []
    assert normalize_applicants("oops", job_id="job_1", fallback_time=FALLBACK_TIME) == []


def test_normalize_job_accepts_camel_case_local_record() -> None:
    job = normalize_job(
        {
            "id": "job_1",
            "title": " Warehouse Loader ",
            "description": "Lift",
            "pricePerHour": "220",
            "requiredCount": "5",
            "createdBy": "recruiter@demo.com",
            "applicants": ["legacy", {"name": "Dan", "contact": "1111111111"}],
            "createdAt": "2024-03-01T00:00:00.000Z",
            "location": "Mumbai",
            "startDateTime": "",
        }
    )

    assert job is not None
    assert job.title == "Warehouse Loader"
    assert job.price_per_hour == 220.0
    assert job.required_count == 5
    assert job.created_by == "recruiter@demo.com"
    assert job.start_datetime is None
    assert [applicant.name for applicant in job.applicants] == ["legacy", "Dan"]
    assert job.applicants[0].applied_at == job.created_at


def test_normalize_job_accepts_snake_case_row() -> None:
    created_at = datetime(2024, 3, 1, tzinfo=timezone.utc)
    job = normalize_job(
        {
            "id": "job_2",
            "title": "Mason",
            "price_per_hour": 300.5,
            "required_count": 2,
            "created_by": "r@x.com",
            "created_at": created_at,
            "applicants": [{"id": "app_1", "name": "Eve", "contact": "2222222222", "created_at": created_at}],
        }
    )

    assert job is not None
    assert job.price_per_hour == 300.5
    assert job.applicants[0].applied_at == created_at


def test_normalize_job_degrades_bad_values() -> None:
    job = normalize_job({"id": "job_3", "pricePerHour": "abc", "requiredCount": None, "createdAt": "not a date"})

    assert job is not None
    assert job.price_per_hour == 0.0
    assert job.required_count == 0
    assert job.created_at == EPOCH
    assert job.is_full is True


def test_normalize_job_without_id_is_rejected() -> None:
    assert normalize_job({"title": "orphan"}) is None
